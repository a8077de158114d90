"""Bogus and filler normalization.

A *filler* is the invisible node that keeps an otherwise empty block (or the
line after a trailing ``<br>``) one line high: a non-breaking space in stored
markup, a ``<br data-cke-bogus="1">`` in the editable. A *bogus* node is a
filler-shaped node that no longer serves that purpose and must go.

The rules built here run after a block's children were filtered, so a nested
block is final before its ancestor decides whether it is empty. For each
block the bogus cleanup always runs before the filler insertion.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from .config import Direction, ProcessorConfig
from .constants import (
    ASCII_WHITESPACE,
    BLOCK_LIKE,
    BOGUS_ATTR,
    BOOKMARK_ATTR,
    EOL_ATTR,
    LIST_ITEM,
    NBSP,
    TABLE_CELL,
    TEXT_BLOCK,
)
from .node import Element, Fragment, Text
from .transforms import Edit, EditRoot, RuleSet

if TYPE_CHECKING:
    from collections.abc import Callable

    from .node import Node, ParentNode

logger = logging.getLogger(__name__)

TAIL_NBSP_RE = re.compile(r"(?:&nbsp;|\xa0)$")


# -----------------
# Traversal helpers
# -----------------


def is_ignorable(node: Node) -> bool:
    """Whitespace-only text or a bookmark marker element."""
    if isinstance(node, Text):
        return not node.data.strip(ASCII_WHITESPACE)
    if isinstance(node, Element):
        return bool(node.attrs.get(BOOKMARK_ATTR))
    return False


def is_block_boundary(node: Node | None) -> bool:
    if node is None:
        return False
    if isinstance(node, Fragment):
        return True
    return isinstance(node, Element) and node.name in BLOCK_LIKE


def get_last(node: ParentNode) -> Node | None:
    last = node.last_child
    while last is not None and is_ignorable(last):
        last = last.previous
    return last


def get_next(node: Node) -> Node | None:
    following = node.next
    while following is not None and is_ignorable(following):
        following = following.next
    return following


def get_previous(node: Node) -> Node | None:
    preceding = node.previous
    while preceding is not None and is_ignorable(preceding):
        preceding = preceding.previous
    return preceding


# -----------------
# Rules
# -----------------


class FillerRules:
    """Filler handling for one direction under one configuration."""

    __slots__ = ("capabilities", "fill_empty_blocks", "is_output")

    def __init__(self, direction: Direction, config: ProcessorConfig) -> None:
        self.is_output = Direction(direction) is Direction.OUTBOUND
        self.capabilities = config.capabilities
        self.fill_empty_blocks = config.fill_empty_blocks

    def create_filler(self) -> Node:
        if self.is_output or self.capabilities.needs_nbsp_filler:
            return Text(NBSP)
        return Element("br", {BOGUS_ATTR: "1"}, is_empty=True)

    def maybe_bogus(self, node: Node, at_block_end: bool = False) -> bool:
        """Whether ``node`` is filler-shaped in a place where it may be bogus.

        A text node ending in a non-breaking space is split, so that the
        space alone can be removed.
        """
        needs_br_filler = self.capabilities.needs_br_filler
        if isinstance(node, Element):
            if self.is_output and not needs_br_filler:
                return False
            return node.name == "br" and not node.attrs.get(EOL_ATTR)

        if not isinstance(node, Text):
            return False
        match = TAIL_NBSP_RE.search(node.data)
        if match is None:
            return False
        if match.start() and node.parent is not None:
            node.parent.insert_before(Text(node.data[: match.start()]), node)
            node.data = match.group(0)

        if self.is_output:
            parent = node.parent
            return not needs_br_filler and (
                not at_block_end or (parent is not None and parent.name in TEXT_BLOCK)
            )

        previous = node.previous
        # Following a line break at the end of a block.
        if isinstance(previous, Element) and previous.name == "br":
            return True
        # Or a single nbsp between two blocks.
        return previous is None or is_block_boundary(previous)

    def clean_bogus(self, block: ParentNode) -> None:
        """Remove the bogus nodes of ``block``; normalize fillers between blocks."""
        bogus: list[Node] = []
        last = get_last(block)
        if last is not None and self.maybe_bogus(last, at_block_end=True):
            bogus.append(last)

        while last is not None:
            if is_block_boundary(last):
                node = get_previous(last)
                if node is not None and self.maybe_bogus(node):
                    preceding = get_previous(node)
                    if preceding is not None and not is_block_boundary(preceding):
                        bogus.append(node)
                    elif node.parent is not None:
                        node.parent.insert_after(self.create_filler(), node)
                        node.remove()
            last = last.previous

        for node in bogus:
            node.remove()

    def is_empty_block_needing_filler(self, block: ParentNode) -> bool:
        capabilities = self.capabilities
        if not self.is_output and not capabilities.needs_br_filler:
            if isinstance(block, Fragment):
                return False
            if capabilities.renders_empty_blocks or block.name in TABLE_CELL or block.name in LIST_ITEM:
                return False

        last = get_last(block)
        if last is None:
            return True
        if block.name != "form" or not isinstance(last, Element) or last.name != "input":
            return False
        # A form holding nothing but its submit button stays as it is.
        return not (last.attrs.get("type", "").lower() == "submit" and get_previous(last) is None)

    def block_filter(self, fill_empty_block: bool | Callable[[Element], bool]) -> Callable[[ParentNode], None]:
        def _filter(block: ParentNode) -> None:
            if isinstance(block, Fragment):
                return
            self.clean_bogus(block)

            if callable(fill_empty_block):
                wanted = fill_empty_block(block) is not False
            else:
                wanted = bool(fill_empty_block)
            if not self.is_output and self.capabilities.mandatory_editing_filler:
                wanted = True
            if wanted and self.is_empty_block_needing_filler(block):
                block.append_child(self.create_filler())

        return _filter

    def br_filter(self, br: Element) -> None:
        parent = br.parent
        if parent is None or isinstance(parent, Fragment):
            return

        # Fillers and end-of-line markers are not line breaks.
        if BOGUS_ATTR in br.attrs or EOL_ATTR in br.attrs:
            br.attrs.pop(BOGUS_ATTR, None)
            return
        # On output the block cleanup decides whether a line break is bogus.
        if self.is_output and self.maybe_bogus(br):
            return

        following = get_next(br)
        preceding = get_previous(br)
        if following is None and is_block_boundary(parent):
            parent.append_child(self.create_filler())
        elif is_block_boundary(following) and preceding is not None and not is_block_boundary(preceding):
            parent.insert_before(self.create_filler(), following)


def create_filler_rules(direction: Direction | str, config: ProcessorConfig | None = None) -> RuleSet:
    """Rule set normalizing bogus nodes and fillers for ``direction``."""
    config = config or ProcessorConfig()
    filler = FillerRules(Direction(direction), config)
    block_filter = filler.block_filter(config.fill_empty_blocks)

    rules: list[Edit | EditRoot] = [Edit(tag, block_filter, after_children=True) for tag in sorted(TEXT_BLOCK)]
    rules.append(Edit("br", filler.br_filter, after_children=True))
    # The root is an editable of its own; it never gets an automatic filler.
    rules.append(EditRoot(filler.block_filter(False)))

    logger.debug("Filler rules for %s: %d text block tags", Direction(direction).value, len(TEXT_BLOCK))
    return RuleSet.compile(rules)
