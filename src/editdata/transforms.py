"""Declarative tree rules and the interpreter that applies them.

A rule set is a flat list of rule objects, each one of a closed set of kinds:

- RenameElements / RenameAttributes: regex rewrite of names
- Edit: mutate an element in place (optionally after its children ran)
- Drop: remove an element when a predicate holds
- Reorder: stable reorder of an element's children
- EditAttr: rewrite or delete an attribute value
- EditRoot: mutate the root once

Rules are compiled once into a :class:`RuleSet` (immutable, safe to share) and
applied to any number of trees with :func:`apply_rules`.

Per element the interpreter runs, in order: element name rewrites, wildcard
rules, tag rules, the children, then the ``after_children`` edits. Root rules
run once the whole tree was visited. Attribute name rewrites and attribute
rules run last, in a second pass over the final tree, so every element rule
sees the attributes as they came in.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from .node import Element, ParentNode

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from typing import Protocol

    from .node import Node

    class ElementCallback(Protocol):
        def __call__(self, element: Element) -> Action | None: ...

    class RootCallback(Protocol):
        def __call__(self, root: ParentNode) -> None: ...

    class AttrCallback(Protocol):
        def __call__(self, value: str, element: Element) -> str | None: ...


logger = logging.getLogger(__name__)

WILDCARD = "*"


class _StrEnum(str, Enum):
    """Backport of enum.StrEnum (Python 3.11+)."""


class Action(_StrEnum):
    """What an element rule asks the interpreter to do with the element."""

    KEEP = "keep"
    DROP = "drop"
    UNWRAP = "unwrap"


def _compile_pattern(pattern: str | re.Pattern[str]) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


@dataclass(frozen=True, slots=True)
class RenameElements:
    """Rewrite element names matching ``pattern``.

    An empty result unwraps the element: its children take its place.
    """

    pattern: re.Pattern[str]
    replacement: str

    def __init__(self, pattern: str | re.Pattern[str], replacement: str) -> None:
        object.__setattr__(self, "pattern", _compile_pattern(pattern))
        object.__setattr__(self, "replacement", str(replacement))


@dataclass(frozen=True, slots=True)
class RenameAttributes:
    """Rewrite attribute names matching ``pattern``. An empty result deletes."""

    pattern: re.Pattern[str]
    replacement: str

    def __init__(self, pattern: str | re.Pattern[str], replacement: str) -> None:
        object.__setattr__(self, "pattern", _compile_pattern(pattern))
        object.__setattr__(self, "replacement", str(replacement))


@dataclass(frozen=True, slots=True)
class Edit:
    """Call ``func(element)`` for elements named ``tag`` ("*" for all).

    ``func`` mutates the element and returns None or an :class:`Action`.
    With ``after_children`` the call happens once the subtree was filtered.
    """

    tag: str
    func: ElementCallback
    after_children: bool

    def __init__(self, tag: str, func: ElementCallback, *, after_children: bool = False) -> None:
        object.__setattr__(self, "tag", str(tag))
        object.__setattr__(self, "func", func)
        object.__setattr__(self, "after_children", bool(after_children))


@dataclass(frozen=True, slots=True)
class Drop:
    """Remove elements named ``tag`` (with their content) when ``predicate`` holds."""

    tag: str
    predicate: Callable[[Element], bool] | None

    def __init__(self, tag: str, predicate: Callable[[Element], bool] | None = None) -> None:
        object.__setattr__(self, "tag", str(tag))
        object.__setattr__(self, "predicate", predicate)


@dataclass(frozen=True, slots=True)
class Reorder:
    """Sort the element children of ``tag`` elements into ``order``.

    Children whose name is not in ``order`` keep their position; equal names
    keep their relative order.
    """

    tag: str
    order: tuple[str, ...]

    def __init__(self, tag: str, order: Iterable[str]) -> None:
        object.__setattr__(self, "tag", str(tag))
        object.__setattr__(self, "order", tuple(order))

    def rank(self, node: Node) -> int | None:
        if isinstance(node, Element) and node.name in self.order:
            return self.order.index(node.name)
        return None


@dataclass(frozen=True, slots=True)
class EditAttr:
    """Call ``func(value, element)`` for attributes named ``name``.

    The return value replaces the attribute value; None deletes the attribute.
    """

    name: str
    func: AttrCallback

    def __init__(self, name: str, func: AttrCallback) -> None:
        object.__setattr__(self, "name", str(name))
        object.__setattr__(self, "func", func)


@dataclass(frozen=True, slots=True)
class EditRoot:
    """Call ``func(root)`` once, after the whole tree was filtered."""

    func: RootCallback

    def __init__(self, func: RootCallback) -> None:
        object.__setattr__(self, "func", func)


Rule = RenameElements | RenameAttributes | Edit | Drop | Reorder | EditAttr | EditRoot

_RULE_CLASSES: tuple[type[object], ...] = (
    RenameElements,
    RenameAttributes,
    Edit,
    Drop,
    Reorder,
    EditAttr,
    EditRoot,
)

ElementRule = Edit | Drop | Reorder


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Compiled dispatch tables. Build with :meth:`compile`."""

    rules: tuple[Rule, ...]
    element_renames: tuple[RenameElements, ...]
    attribute_renames: tuple[RenameAttributes, ...]
    elements: Mapping[str, tuple[ElementRule, ...]]
    after_children: Mapping[str, tuple[Edit, ...]]
    attributes: Mapping[str, tuple[EditAttr, ...]]
    root: tuple[EditRoot, ...]

    @classmethod
    def compile(cls, rules: Iterable[Rule]) -> RuleSet:
        rules = tuple(rules)
        element_renames: list[RenameElements] = []
        attribute_renames: list[RenameAttributes] = []
        elements: dict[str, list[ElementRule]] = {}
        after_children: dict[str, list[Edit]] = {}
        attributes: dict[str, list[EditAttr]] = {}
        root: list[EditRoot] = []

        for rule in rules:
            if not isinstance(rule, _RULE_CLASSES):
                msg = f"Unsupported rule object: {type(rule).__name__}"
                raise TypeError(msg)
            if isinstance(rule, RenameElements):
                element_renames.append(rule)
            elif isinstance(rule, RenameAttributes):
                attribute_renames.append(rule)
            elif isinstance(rule, EditAttr):
                attributes.setdefault(rule.name, []).append(rule)
            elif isinstance(rule, EditRoot):
                root.append(rule)
            elif isinstance(rule, Edit) and rule.after_children:
                after_children.setdefault(rule.tag, []).append(rule)
            else:
                elements.setdefault(rule.tag, []).append(rule)

        logger.debug(
            "Compiled rule set: %d rules, %d element tags, %d attribute names",
            len(rules),
            len(elements) + len(after_children),
            len(attributes),
        )
        return cls(
            rules=rules,
            element_renames=tuple(element_renames),
            attribute_renames=tuple(attribute_renames),
            elements=MappingProxyType({k: tuple(v) for k, v in elements.items()}),
            after_children=MappingProxyType({k: tuple(v) for k, v in after_children.items()}),
            attributes=MappingProxyType({k: tuple(v) for k, v in attributes.items()}),
            root=tuple(root),
        )

    def merge(self, other: RuleSet | Iterable[Rule]) -> RuleSet:
        """A new rule set with ``other``'s rules after this one's."""
        extra = other.rules if isinstance(other, RuleSet) else tuple(other)
        return RuleSet.compile(self.rules + extra)

    def element_rules(self, name: str) -> tuple[ElementRule, ...]:
        return self.elements.get(WILDCARD, ()) + self.elements.get(name, ())

    def after_rules(self, name: str) -> tuple[Edit, ...]:
        return self.after_children.get(WILDCARD, ()) + self.after_children.get(name, ())


# -----------------
# Interpreter
# -----------------


def rename(name: str, renames: Iterable[RenameElements | RenameAttributes]) -> str:
    """Apply the first matching rename rule to ``name``."""
    for rule in renames:
        if rule.pattern.search(name):
            return rule.pattern.sub(rule.replacement, name, count=1)
    return name


def _run_element_rule(rule: ElementRule, element: Element) -> Action:
    if isinstance(rule, Edit):
        return rule.func(element) or Action.KEEP
    if isinstance(rule, Drop):
        if rule.predicate is None or rule.predicate(element):
            return Action.DROP
        return Action.KEEP
    element.reorder_children(rule.rank)
    return Action.KEEP


def _unwrap(element: Element, rule_set: RuleSet) -> None:
    """Replace ``element`` with its children and filter them in place."""
    parent = element.parent
    children = element.children
    element.replace_with_children()
    for child in children:
        if isinstance(child, Element) and child.parent is parent:
            _filter_element(child, rule_set)


def _filter_attributes(element: Element, rule_set: RuleSet) -> None:
    if not element.attrs:
        return
    filtered: dict[str, str] = {}
    for name, value in element.attrs.items():
        new_name = rename(name, rule_set.attribute_renames)
        if not new_name:
            continue
        for rule in rule_set.attributes.get(new_name, ()):
            value = rule.func(value, element)
            if value is None:
                break
        if value is None:
            continue
        filtered[new_name] = value
    element.attrs = filtered


def _filter_element(element: Element, rule_set: RuleSet) -> None:
    seen: set[str] = set()
    while True:
        name = rename(element.name, rule_set.element_renames)
        if not name:
            _unwrap(element, rule_set)
            return
        element.name = name
        seen.add(name)

        for rule in rule_set.element_rules(name):
            action = _run_element_rule(rule, element)
            if action is Action.DROP:
                element.remove()
                return
            if action is Action.UNWRAP:
                _unwrap(element, rule_set)
                return
            if element.parent is None or element.name != name:
                break

        if element.parent is None:
            # A rule detached the element itself.
            return
        # A rule renamed the element: dispatch again for the new name, once.
        if element.name == name or element.name in seen:
            break

    _filter_children(element, rule_set)

    for rule in rule_set.after_rules(element.name):
        action = rule.func(element) or Action.KEEP
        if action is Action.DROP:
            element.remove()
            return
        if action is Action.UNWRAP:
            element.replace_with_children()
            return
        if element.parent is None:
            return


def _filter_children(parent: ParentNode, rule_set: RuleSet) -> None:
    # Iterate over a snapshot: nodes inserted by rules are final and must not
    # be filtered again, nodes removed by a sibling's rule are skipped.
    for child in parent.children:
        if child.parent is not parent:
            continue
        if isinstance(child, Element):
            _filter_element(child, rule_set)


def apply_rules(root: ParentNode, rule_set: RuleSet, *, filter_root: bool = True) -> ParentNode:
    """Filter every element below ``root`` in place, then run the root rules."""
    _filter_children(root, rule_set)
    if filter_root:
        for rule in rule_set.root:
            rule.func(root)
    if rule_set.attribute_renames or rule_set.attributes:
        for node in root.iter_descendants():
            if isinstance(node, Element):
                _filter_attributes(node, rule_set)
    return root
