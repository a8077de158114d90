"""Fragment builder: markup string to a node tree.

This is the parser half of the data processor's round trip. It is forgiving
rather than conforming: the tokenizer never fails, unmatched end tags are
ignored, implied end tags are inferred from a small table, and elements left
open at the end are closed. When a ``fix_tag`` is given, inline content found
directly under the root (or under a ``<body>``) is wrapped into that block
element, the way an editor auto-paragraphs loose text.
"""

from .constants import (
    ASCII_WHITESPACE,
    AUTO_CLOSING_TAGS,
    BLOCK_LIKE,
    FLOW_CONTAINER,
    NON_PHRASING,
    SCOPE,
    VOID,
    WHITESPACE_INSIGNIFICANT,
)
from .node import Comment, Element, Fragment, Text
from .tokenizer import Tokenizer


class FragmentBuilder:
    """Token sink building a :class:`Fragment`."""

    __slots__ = ("current", "fix_tag", "root")

    def __init__(self, context="body", fix_tag="p"):
        self.root = Fragment()
        self.current = self.root
        # Auto paragraphing only makes sense where a paragraph may live.
        self.fix_tag = fix_tag if fix_tag and context in FLOW_CONTAINER else None

    # -----------------
    # Helpers
    # -----------------

    def _in_pre(self):
        node = self.current
        while node is not self.root:
            if node.name in ("pre", "textarea"):
                return True
            node = node.parent
        return False

    def _at_fixable_level(self):
        return self.fix_tag is not None and (self.current is self.root or self.current.name == "body")

    def _auto_paragraph(self):
        block = Element(self.fix_tag)
        self.current.append_child(block)
        self.current = block

    def _close(self, element):
        """Close ``element`` and everything opened inside it."""
        self.current = element.parent if element.parent is not None else self.root

    def _apply_implied_end_tags(self, name):
        target = None
        node = self.current
        while node is not self.root:
            if name in AUTO_CLOSING_TAGS.get(node.name, ()):
                target = node
            elif node.name in BLOCK_LIKE or node.name in SCOPE:
                break
            node = node.parent
        if target is not None:
            self._close(target)

    # -----------------
    # Sink interface
    # -----------------

    def on_tag_open(self, name, attrs, self_closing):
        self._apply_implied_end_tags(name)

        if self._at_fixable_level() and name not in BLOCK_LIKE and name not in NON_PHRASING:
            self._auto_paragraph()

        is_empty = name in VOID or (self_closing and ":" in name)
        element = Element(name, attrs, is_empty=is_empty)
        self.current.append_child(element)
        if not is_empty:
            self.current = element

    def on_tag_close(self, name):
        if name in VOID:
            return
        node = self.current
        while node is not self.root:
            if node.name == name:
                self._close(node)
                return
            if node.name in SCOPE:
                return
            node = node.parent

    def on_text(self, text):
        current = self.current
        if not self._in_pre():
            if current.name in WHITESPACE_INSIGNIFICANT and not text.strip(ASCII_WHITESPACE):
                return
            # Leading whitespace of a block's content is not rendered.
            if current is not self.root and current.name in BLOCK_LIKE and not current.last_child:
                text = text.lstrip(ASCII_WHITESPACE)
            if self._at_fixable_level():
                text = text.lstrip(ASCII_WHITESPACE)
                if text:
                    self._auto_paragraph()
            if not text:
                return

        last = self.current.last_child
        if isinstance(last, Text):
            last.data += text
        else:
            self.current.append_child(Text(text))

    def on_cdata(self, text):
        self.current.append_child(Text(text))

    def on_comment(self, text):
        self.current.append_child(Comment(text))


def from_html(markup, context="body", fix_tag="p"):
    """Parse ``markup`` as the content of a ``context`` element.

    ``fix_tag`` names the block used to wrap loose inline content; pass
    ``None`` (or ``False``) to keep it as is.
    """
    builder = FragmentBuilder(context=context, fix_tag=fix_tag)
    Tokenizer(builder).run(markup or "")
    return builder.root
