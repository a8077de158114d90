"""Lenient markup tokenizer.

A single regular expression splits the input into tags, comments and the text
between them, and feeds a sink object:

    sink.on_tag_open(name, attrs, self_closing)
    sink.on_tag_close(name)
    sink.on_text(text)
    sink.on_cdata(text)
    sink.on_comment(text)

Text is passed through raw (character references are not decoded), so that
whatever the input spelled survives a parse/write round trip. Nothing here
raises on malformed input: anything that does not look like a tag is text.
"""

import re

from .constants import CDATA

_HTML_PARTS = re.compile(
    r"<(?:"
    r"(?:/([^>]+)>)"  # 1: closing tag name
    r"|(?:!--([\s\S]*?)-->)"  # 2: comment text
    r"|(?:([^\s>/]+)\s*((?:(?:\"[^\"]*\")|(?:'[^']*')|[^\"'>])*)/?>)"  # 3: tag name, 4: attributes
    r")"
)

_ATTRIBUTES = re.compile(r"""([\w\-:.]+)(?:(?:\s*=\s*(?:(?:"([^"]*)")|(?:'([^']*)')|([^\s>]+)))|(?=\s|$))""")

# Boolean attributes written without a value get their own name as value.
_EMPTY_ATTRIBUTES = frozenset(
    {
        "checked",
        "compact",
        "declare",
        "defer",
        "disabled",
        "ismap",
        "multiple",
        "nohref",
        "noresize",
        "noshade",
        "nowrap",
        "readonly",
        "selected",
    }
)


def decode_attr(value):
    """Decode the characters the writer escapes in attribute values."""
    return value.replace("&quot;", '"').replace("&lt;", "<").replace("&gt;", ">")


def parse_attributes(source):
    """Parse the attribute part of a start tag. The first occurrence wins."""
    attrs = {}
    for match in _ATTRIBUTES.finditer(source):
        name = match.group(1).lower()
        if name in attrs:
            continue
        value = match.group(2) or match.group(3) or match.group(4) or ""
        if not value and name in _EMPTY_ATTRIBUTES:
            attrs[name] = name
        else:
            attrs[name] = decode_attr(value)
    return attrs


_CDATA_END = {name: re.compile(rf"</{name}\s*>", re.IGNORECASE) for name in CDATA}


class Tokenizer:
    __slots__ = ("sink",)

    def __init__(self, sink):
        self.sink = sink

    def run(self, html):
        sink = self.sink
        length = len(html)
        next_index = 0

        while next_index < length:
            parts = _HTML_PARTS.search(html, next_index)
            if parts is None:
                break
            tag_index = parts.start()
            if tag_index > next_index:
                sink.on_text(html[next_index:tag_index])
            next_index = parts.end()

            tag_name = parts.group(1)
            if tag_name:
                sink.on_tag_close(tag_name.strip().lower())
                continue

            tag_name = parts.group(3)
            if tag_name:
                tag_name = tag_name.lower()
                # Names like 'a="b"' break things downstream; doctype and other
                # declarations are not part of a fragment.
                if '="' in tag_name or tag_name.startswith("!"):
                    continue
                attrs_part = parts.group(4) or ""
                self_closing = attrs_part.endswith("/")
                attrs = parse_attributes(attrs_part) if attrs_part else {}
                sink.on_tag_open(tag_name, attrs, self_closing)
                if tag_name in CDATA:
                    next_index = self._run_cdata(html, tag_name, next_index)
                continue

            comment = parts.group(2)
            if comment is not None:
                sink.on_comment(comment)

        if next_index < length:
            sink.on_text(html[next_index:])

    def _run_cdata(self, html, tag_name, start):
        """Everything up to the matching end tag is raw text."""
        end = _CDATA_END[tag_name].search(html, start)
        stop = end.start() if end is not None else len(html)
        if stop > start:
            self.sink.on_cdata(html[start:stop])
        if end is None:
            return len(html)
        self.sink.on_tag_close(tag_name)
        return end.end()
