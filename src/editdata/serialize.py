"""Tree to markup writer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import CDATA, NBSP, VOID
from .node import Comment, Element, ParentNode, Text
from .transforms import apply_rules

if TYPE_CHECKING:
    from .node import Node
    from .transforms import RuleSet


def _escape_attr_value(value: str | None) -> str:
    if value is None:
        return ""
    return str(value).replace('"', "&quot;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_text(text: str | None) -> str:
    # Text is kept raw in the tree; only the non-breaking space character is
    # spelled as an entity so fillers stay visible in the markup.
    if not text:
        return ""
    return text.replace(NBSP, "&nbsp;")


def serialize_start_tag(name: str, attrs: dict[str, str] | None, *, is_empty: bool = False) -> str:
    parts: list[str] = ["<", name]
    if attrs:
        for key, value in attrs.items():
            parts.extend([" ", key, '="', _escape_attr_value(value), '"'])
    parts.append(" />" if is_empty else ">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


class BasicWriter:
    """Accumulates markup for a tree.

    ``serialize`` is the usual entry point; the ``open_tag``/``text``/...
    methods are public so callers can emit extra markup around a tree.
    """

    __slots__ = ("_parts",)

    def __init__(self) -> None:
        self._parts: list[str] = []

    def reset(self) -> None:
        self._parts = []

    def open_tag(self, name: str, attrs: dict[str, str] | None = None, *, is_empty: bool = False) -> None:
        self._parts.append(serialize_start_tag(name, attrs, is_empty=is_empty))

    def close_tag(self, name: str) -> None:
        self._parts.append(serialize_end_tag(name))

    def text(self, text: str) -> None:
        self._parts.append(_escape_text(text))

    def comment(self, comment: str) -> None:
        self._parts.append(f"<!--{comment}-->")

    def html(self, markup: str) -> None:
        self._parts.append(markup)

    def get_html(self, reset: bool = False) -> str:
        out = "".join(self._parts)
        if reset:
            self.reset()
        return out

    def write_node(self, node: Node, *, in_cdata: bool = False) -> None:
        if isinstance(node, Text):
            if in_cdata:
                self.html(node.data)
            else:
                self.text(node.data)
        elif isinstance(node, Comment):
            self.comment(node.data)
        elif isinstance(node, Element):
            if node.is_empty or (node.name in VOID and node.first_child is None):
                self.open_tag(node.name, node.attrs, is_empty=True)
                return
            self.open_tag(node.name, node.attrs)
            self.write_children(node, in_cdata=node.name in CDATA)
            self.close_tag(node.name)
        elif isinstance(node, ParentNode):
            self.write_children(node, in_cdata=in_cdata)

    def write_children(self, node: ParentNode, *, in_cdata: bool = False) -> None:
        for child in node.children:
            self.write_node(child, in_cdata=in_cdata)

    def serialize(self, tree: ParentNode, rules: RuleSet | None = None, filter_root: bool = True) -> str:
        """Filter ``tree`` with ``rules`` (when given) and write its children.

        ``filter_root`` controls whether the rule set's root rules run on
        ``tree`` itself. The writer is reset first; the markup is returned.
        """
        self.reset()
        if rules is not None:
            apply_rules(tree, rules, filter_root=filter_root)
        self.write_children(tree)
        return self.get_html(reset=True)


def to_html(node: Node) -> str:
    """Write a single node (or a root's children) without filtering."""
    writer = BasicWriter()
    writer.write_node(node)
    return writer.get_html()
