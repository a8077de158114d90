from __future__ import annotations

import unittest

from editdata.config import Capabilities, Direction, ProcessorConfig
from editdata.filler import FillerRules, create_filler_rules, get_last, is_ignorable
from editdata.fragment import from_html
from editdata.node import Element, Text
from editdata.serialize import BasicWriter

BOGUS_BR = '<br data-cke-bogus="1" />'


def _inbound(html: str, config: ProcessorConfig | None = None) -> str:
    root = from_html(html, fix_tag=None)
    return BasicWriter().serialize(root, create_filler_rules(Direction.INBOUND, config))


def _outbound(html: str, config: ProcessorConfig | None = None) -> str:
    root = from_html(html, fix_tag=None)
    return BasicWriter().serialize(root, create_filler_rules("html", config))


class TestHelpers(unittest.TestCase):
    def test_ignorable_nodes(self) -> None:
        assert is_ignorable(Text(" \n"))
        assert not is_ignorable(Text("\xa0"))
        assert is_ignorable(Element("span", {"data-cke-bookmark": "1"}))
        assert not is_ignorable(Element("span"))

    def test_get_last_skips_ignorable_nodes(self) -> None:
        p = Element("p")
        b = p.append_child(Element("b"))
        p.append_child(Text("  "))
        p.append_child(Element("span", {"data-cke-bookmark": "1"}))
        assert get_last(p) is b

    def test_tail_nbsp_is_split_off(self) -> None:
        rules = FillerRules(Direction.INBOUND, ProcessorConfig())
        p = Element("p")
        text = p.append_child(Text("foo\xa0"))
        assert not rules.maybe_bogus(text)
        assert [child.data for child in p.children] == ["foo", "\xa0"]


class TestInbound(unittest.TestCase):
    def test_empty_block_gets_a_br_filler(self) -> None:
        assert _inbound("<p></p>") == "<p>" + BOGUS_BR + "</p>"

    def test_nbsp_filler_becomes_a_br_filler(self) -> None:
        assert _inbound("<p>&nbsp;</p>") == "<p>" + BOGUS_BR + "</p>"
        assert _inbound("<p>\xa0</p>") == "<p>" + BOGUS_BR + "</p>"

    def test_trailing_nbsp_after_text_is_content(self) -> None:
        assert _inbound("<p>foo&nbsp;</p>") == "<p>foo&nbsp;</p>"

    def test_trailing_br_keeps_exactly_one_line_break(self) -> None:
        assert _inbound("<p>foo<br></p>") == "<p>foo<br /></p>"

    def test_br_between_blocks_becomes_a_filler(self) -> None:
        html = "<div><p>a</p><br><p>b</p></div>"
        assert _inbound(html) == "<div><p>a</p>" + BOGUS_BR + "<p>b</p></div>"

    def test_br_after_text_before_a_block_is_kept(self) -> None:
        assert _inbound("<div>a<br><p>b</p></div>") == "<div>a<br /><p>b</p></div>"

    def test_end_of_line_marker_is_not_bogus(self) -> None:
        html = '<p>foo<br data-cke-eol="1"></p>'
        assert _inbound(html) == '<p>foo<br data-cke-eol="1" /></p>'

    def test_bookmarks_do_not_count_as_content(self) -> None:
        html = '<p><span data-cke-bookmark="1"></span></p>'
        assert _inbound(html) == '<p><span data-cke-bookmark="1"></span>' + BOGUS_BR + "</p>"

    def test_form_ending_with_an_input_gets_a_filler(self) -> None:
        assert _inbound('<form><input name="q"></form>') == '<form><input name="q" />' + BOGUS_BR + "</form>"
        html = '<form>a<input type="submit"></form>'
        assert _inbound(html) == '<form>a<input type="submit" />' + BOGUS_BR + "</form>"

    def test_form_with_only_a_submit_button_gets_no_filler(self) -> None:
        assert _inbound('<form><input type="submit"></form>') == '<form><input type="submit" /></form>'
        assert _inbound('<form><input type="SUBMIT"> </form>') == '<form><input type="SUBMIT" /> </form>'
        assert _outbound('<form><input type="submit"></form>') == '<form><input type="submit" /></form>'

    def test_root_never_gets_a_filler(self) -> None:
        assert _inbound("") == ""
        assert _inbound("a<br>") == "a<br />"

    def test_fill_empty_blocks_disabled(self) -> None:
        assert _inbound("<p></p>", ProcessorConfig(fill_empty_blocks=False)) == "<p></p>"

    def test_mandatory_editing_filler_overrides_the_setting(self) -> None:
        config = ProcessorConfig(
            fill_empty_blocks=False,
            capabilities=Capabilities(mandatory_editing_filler=True),
        )
        assert _inbound("<p></p>", config) == "<p>" + BOGUS_BR + "</p>"
        assert _outbound("<p></p>", config) == "<p></p>"

    def test_surface_without_br_filler(self) -> None:
        config = ProcessorConfig(capabilities=Capabilities(needs_br_filler=False, needs_nbsp_filler=True))
        assert _inbound("<p></p>", config) == "<p>&nbsp;</p>"
        assert _inbound("<ul><li></li></ul>", config) == "<ul><li></li></ul>"
        html = "<table><tr><td></td></tr></table>"
        assert _inbound(html, config) == html

    def test_surface_rendering_empty_blocks(self) -> None:
        config = ProcessorConfig(capabilities=Capabilities(needs_br_filler=False, renders_empty_blocks=True))
        assert _inbound("<p></p>", config) == "<p></p>"


class TestOutbound(unittest.TestCase):
    def test_empty_block_gets_an_nbsp_filler(self) -> None:
        assert _outbound("<p></p>") == "<p>&nbsp;</p>"

    def test_bogus_br_becomes_an_nbsp_filler(self) -> None:
        assert _outbound("<p>" + BOGUS_BR + "</p>") == "<p>&nbsp;</p>"

    def test_trailing_br_is_bogus(self) -> None:
        assert _outbound("<p>foo<br></p>") == "<p>foo</p>"
        assert _outbound("<p>a<br>b<br></p>") == "<p>a<br />b</p>"

    def test_lone_br_becomes_an_nbsp_filler(self) -> None:
        assert _outbound("<p><br></p>") == "<p>&nbsp;</p>"

    def test_trailing_br_is_kept_without_br_fillers(self) -> None:
        config = ProcessorConfig(capabilities=Capabilities(needs_br_filler=False))
        assert _outbound("<p>foo<br></p>", config) == "<p>foo<br /></p>"

    def test_trailing_nbsp_is_kept_when_br_fillers_are_needed(self) -> None:
        assert _outbound("<p>foo&nbsp;</p>") == "<p>foo&nbsp;</p>"

    def test_trailing_nbsp_is_bogus_without_br_fillers(self) -> None:
        config = ProcessorConfig(capabilities=Capabilities(needs_br_filler=False))
        assert _outbound("<p>foo&nbsp;</p>", config) == "<p>foo</p>"
        html = "<table><tr><td>x&nbsp;</td></tr></table>"
        assert _outbound(html, config) == "<table><tr><td>x</td></tr></table>"

    def test_br_between_blocks_becomes_an_nbsp(self) -> None:
        assert _outbound("<div><p>a</p><br><p>b</p></div>") == "<div><p>a</p>&nbsp;<p>b</p></div>"

    def test_br_after_text_before_a_block_is_bogus(self) -> None:
        assert _outbound("<div>a<br><p>b</p></div>") == "<div>a<p>b</p></div>"

    def test_fill_empty_blocks_predicate(self) -> None:
        config = ProcessorConfig(fill_empty_blocks=lambda block: block.name != "td")
        html = "<table><tr><td></td><td>x</td></tr></table><p></p>"
        assert _outbound(html, config) == "<table><tr><td></td><td>x</td></tr></table><p>&nbsp;</p>"


if __name__ == "__main__":
    unittest.main()
