from __future__ import annotations

import unittest

from editdata import Capabilities, DataStore, EnterMode, HtmlDataProcessor, ProcessorConfig


class _EchoBridge:
    """A surface that changes nothing, recording what it was given."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def insert_and_read_back(self, tag_name: str, markup: str) -> str:
        self.calls.append((tag_name, markup))
        return markup


class TestRoundTrip(unittest.TestCase):
    def setUp(self) -> None:
        self.processor = HtmlDataProcessor()

    def _round_trip(self, data: str) -> str:
        return self.processor.to_storage_form(self.processor.to_editable_form(data))

    def test_plain_paragraph(self) -> None:
        assert self.processor.to_editable_form("<p>Hello</p>") == "<p>Hello</p>"
        assert self._round_trip("<p>Hello</p>") == "<p>Hello</p>"

    def test_empty_paragraph(self) -> None:
        editable = self.processor.to_editable_form("<p></p>")
        assert editable == '<p><br data-cke-bogus="1" /></p>'
        assert self.processor.to_storage_form(editable) == "<p>&nbsp;</p>"

    def test_trailing_line_break(self) -> None:
        editable = self.processor.to_editable_form("<p>foo<br></p>")
        assert editable == "<p>foo<br /></p>"
        assert self.processor.to_storage_form(editable) == "<p>foo</p>"

    def test_lone_line_break_is_stored_as_a_filler(self) -> None:
        assert self.processor.to_storage_form("<p><br></p>") == "<p>&nbsp;</p>"

    def test_form_with_only_a_submit_button(self) -> None:
        editable = self.processor.to_editable_form('<form><input type="submit"></form>')
        assert "data-cke-bogus" not in editable

    def test_comments_are_hidden_in_the_editable(self) -> None:
        editable = self.processor.to_editable_form("<p>a<!-- note -->b</p>")
        assert editable == "<p>a<!--{cke_protected}{C}%3C!%2D%2D%20note%20%2D%2D%3E-->b</p>"
        assert self.processor.to_storage_form(editable) == "<p>a<!-- note -->b</p>"

    def test_scripts_are_hidden_in_the_editable(self) -> None:
        editable = self.processor.to_editable_form("<p>x</p><script>alert(1)</script>")
        assert editable == "<p>x</p><!--{cke_protected}%3Cscript%3Ealert(1)%3C%2Fscript%3E-->"
        assert self.processor.to_storage_form(editable) == "<p>x</p><script>alert(1)</script>"

    def test_comment_in_attribute_round_trips_exactly(self) -> None:
        data = '<p><img alt="<!-- keep me -->" /></p>'
        editable = self.processor.to_editable_form(data)
        assert editable == '<p><img alt="{cke_protected_1}" /></p>'
        assert self.processor.to_storage_form(editable) == data

    def test_link_urls_are_saved(self) -> None:
        editable = self.processor.to_editable_form('<p><a href="/x">y</a></p>')
        assert editable == '<p><a data-cke-saved-href="/x" href="/x">y</a></p>'
        assert self.processor.to_storage_form(editable) == '<p><a href="/x">y</a></p>'

    def test_event_handlers_are_disabled_in_the_editable(self) -> None:
        editable = self.processor.to_editable_form('<p onclick="go()">x</p>')
        assert editable == '<p data-cke-pa-onclick="go()">x</p>'
        assert self.processor.to_storage_form(editable) == '<p onclick="go()">x</p>'

    def test_form_controls_are_read_only_in_the_editable(self) -> None:
        editable = self.processor.to_editable_form('<p><input type="text"></p>')
        assert editable == '<p><input type="text" data-cke-editable="1" contenteditable="false" /></p>'
        assert self.processor.to_storage_form(editable) == '<p><input type="text" /></p>'

    def test_entities_survive(self) -> None:
        assert self._round_trip("<p>a &amp; b&nbsp;c</p>") == "<p>a &amp; b&nbsp;c</p>"

    def test_surface_fixes_the_structure(self) -> None:
        assert self.processor.to_editable_form("<p>a<div>b</div>") == "<p>a</p><div>b</div>"

    def test_pre_keeps_its_leading_newline(self) -> None:
        editable = self.processor.to_editable_form("<pre>\nx</pre>")
        assert editable == "<pre>\nx</pre>"
        assert self.processor.to_storage_form(editable) == "<pre>\nx</pre>"

    def test_style_element_survives_the_surface(self) -> None:
        editable = self.processor.to_editable_form("<style>p{}</style><p>x</p>")
        assert editable == "<style>p{}</style><p>x</p>"
        assert self.processor.to_storage_form(editable) == '<style type="text/css">p{}</style><p>x</p>'

    def test_object_and_embed_survive_the_surface(self) -> None:
        data = '<p><object width="10"><param name="a" value="b"><embed src="m.swf"></object></p>'
        editable = self.processor.to_editable_form(data)
        assert "<cke:object" in editable
        assert self.processor.to_storage_form(editable) == (
            '<p><object width="10"><param name="a" value="b" /><embed src="m.swf" width="10" /></object></p>'
        )

    def test_table_sections_are_reordered_on_output(self) -> None:
        html = "<table><tbody><tr><td>1</td></tr></tbody><thead><tr><th>h</th></tr></thead></table>"
        assert self.processor.to_storage_form(html) == (
            "<table><thead><tr><th>h</th></tr></thead><tbody><tr><td>1</td></tr></tbody></table>"
        )

    def test_aliases(self) -> None:
        assert self.processor.to_html("x") == "<p>x</p>"
        assert self.processor.to_data_format("<p>x</p>") == "<p>x</p>"


class TestAutoParagraph(unittest.TestCase):
    def test_loose_text_is_wrapped(self) -> None:
        processor = HtmlDataProcessor()
        assert processor.to_editable_form("foo") == "<p>foo</p>"
        assert processor.to_storage_form("foo") == "<p>foo</p>"

    def test_no_context_or_no_body_fix(self) -> None:
        processor = HtmlDataProcessor()
        assert processor.to_editable_form("foo", context=None) == "foo"
        assert processor.to_editable_form("foo", fix_for_body=False) == "foo"

    def test_enter_modes(self) -> None:
        assert HtmlDataProcessor(ProcessorConfig(enter_mode=EnterMode.DIV)).to_editable_form("foo") == "<div>foo</div>"
        assert HtmlDataProcessor(ProcessorConfig(enter_mode="br")).to_editable_form("foo") == "foo"
        assert HtmlDataProcessor(ProcessorConfig(auto_paragraph=False)).to_editable_form("foo") == "foo"


class TestProtectedSource(unittest.TestCase):
    def test_configured_patterns_round_trip(self) -> None:
        processor = HtmlDataProcessor(ProcessorConfig(protected_source=[r"<\?[\s\S]*?\?>"]))
        data = "<p><?php echo 1; ?></p>"
        editable = processor.to_editable_form(data)
        assert "<?php" not in editable
        assert processor.to_storage_form(editable) == data

    def test_store_is_shared_across_calls(self) -> None:
        store = DataStore()
        processor = HtmlDataProcessor(store=store)
        first = processor.to_editable_form('<p><img alt="<!--1-->" /></p>')
        second = processor.to_editable_form('<p><img alt="<!--2-->" /></p>')
        assert "{cke_protected_1}" in first
        assert "{cke_protected_2}" in second
        assert len(store) == 2
        assert processor.to_storage_form(first) == '<p><img alt="<!--1-->" /></p>'


class TestConfig(unittest.TestCase):
    def test_invalid_values_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ProcessorConfig(protected_source=["("])
        with self.assertRaises(ValueError):
            ProcessorConfig(protected_source=r"<\?.*?\?>")
        with self.assertRaises(ValueError):
            ProcessorConfig(enter_mode="span")
        with self.assertRaises(ValueError):
            ProcessorConfig(editable_tag="")
        with self.assertRaises(ValueError):
            ProcessorConfig(fill_empty_blocks=1)

    def test_normalized_values(self) -> None:
        config = ProcessorConfig(editable_tag="DIV", enter_mode="div", protected_source=[r"\[\[.*?\]\]"])
        assert config.editable_tag == "div"
        assert config.enter_mode is EnterMode.DIV
        assert config.fix_tag == "div"
        assert config.protected_source[0].pattern == r"\[\[.*?\]\]"


class TestBridgeCalls(unittest.TestCase):
    def test_surface_gets_the_context_element(self) -> None:
        bridge = _EchoBridge()
        processor = HtmlDataProcessor(bridge=bridge)
        processor.to_editable_form("x")
        processor.to_editable_form("x", context="TD")
        assert bridge.calls == [("body", "ax"), ("td", "ax")]

    def test_pre_context_is_wrapped_when_the_surface_loses_it(self) -> None:
        bridge = _EchoBridge()
        config = ProcessorConfig(capabilities=Capabilities(loses_pre_format=True))
        processor = HtmlDataProcessor(config, bridge=bridge)
        assert processor.to_editable_form("x", context="pre") == "x"
        assert bridge.calls == [("div", "a<pre>x</pre>")]

    def test_pre_newline_is_doubled_only_when_swallowed(self) -> None:
        bridge = _EchoBridge()
        HtmlDataProcessor(bridge=bridge).to_editable_form("<pre>\nx</pre>")
        config = ProcessorConfig(capabilities=Capabilities(swallows_pre_newline=False))
        HtmlDataProcessor(config, bridge=bridge).to_editable_form("<pre>\nx</pre>")
        assert bridge.calls == [("body", "a<pre>\n\nx</pre>"), ("body", "a<pre>\nx</pre>")]

    def test_processing_is_logged(self) -> None:
        processor = HtmlDataProcessor(bridge=_EchoBridge())
        with self.assertLogs("editdata.processor", level="DEBUG") as logs:
            processor.to_editable_form("<p>x</p>")
            processor.to_storage_form("<p>x</p>")
        assert any("to_editable_form" in line for line in logs.output)
        assert any("to_storage_form" in line for line in logs.output)


if __name__ == "__main__":
    unittest.main()
