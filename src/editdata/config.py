"""Processor configuration.

All objects here are immutable; build one per editor configuration and share
it between processors.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from .node import Element


class Direction(str, Enum):
    """Which way a tree is being filtered."""

    INBOUND = "data"  # storage -> editable
    OUTBOUND = "html"  # editable -> storage


class EnterMode(str, Enum):
    P = "p"
    DIV = "div"
    BR = "br"


@dataclass(frozen=True, slots=True)
class Capabilities:
    """What the host rendering surface does to markup.

    - needs_br_filler: empty blocks need a ``<br>`` to be editable
    - needs_nbsp_filler: use a non-breaking space as editing filler instead
    - mandatory_editing_filler: empty editing blocks always get a filler
    - renders_empty_blocks: empty blocks are displayed without a filler
    - loses_pre_format: a ``<pre>`` context loses its formatting on insert
    - swallows_pre_newline: the first line break after ``<pre>`` is dropped
    - uppercase_style_attributes: style property names come back upper-cased
    """

    needs_br_filler: bool = True
    needs_nbsp_filler: bool = False
    mandatory_editing_filler: bool = False
    renders_empty_blocks: bool = False
    loses_pre_format: bool = False
    swallows_pre_newline: bool = True
    uppercase_style_attributes: bool = False


@dataclass(frozen=True, slots=True)
class ProcessorConfig:
    """Editor configuration consumed by :class:`~editdata.processor.HtmlDataProcessor`.

    ``fill_empty_blocks`` is either a bool or a predicate called with each
    empty block on output; a predicate returning False leaves the block empty.
    ``protected_source`` holds extra regexes whose matches are kept verbatim
    through a round trip.
    """

    editable_tag: str = "body"
    enter_mode: EnterMode = EnterMode.P
    auto_paragraph: bool = True
    fill_empty_blocks: bool | Callable[[Element], bool] = True
    protected_source: tuple[re.Pattern[str], ...] = ()
    capabilities: Capabilities = field(default_factory=Capabilities)

    def __post_init__(self) -> None:
        if not self.editable_tag or not isinstance(self.editable_tag, str):
            msg = f"editable_tag must be a non-empty string, got {self.editable_tag!r}"
            raise ValueError(msg)
        object.__setattr__(self, "editable_tag", self.editable_tag.lower())

        try:
            enter_mode = EnterMode(self.enter_mode)
        except ValueError:
            msg = f"Unknown enter_mode: {self.enter_mode!r}"
            raise ValueError(msg) from None
        object.__setattr__(self, "enter_mode", enter_mode)

        if not isinstance(self.fill_empty_blocks, bool) and not callable(self.fill_empty_blocks):
            msg = "fill_empty_blocks must be a bool or a callable"
            raise ValueError(msg)

        if isinstance(self.protected_source, (str, re.Pattern)):
            msg = "protected_source must be a sequence of patterns"
            raise ValueError(msg)
        compiled: list[re.Pattern[str]] = []
        for pattern in self.protected_source:
            if isinstance(pattern, re.Pattern):
                compiled.append(pattern)
                continue
            try:
                compiled.append(re.compile(pattern))
            except re.error as exc:
                msg = f"Invalid protected_source pattern {pattern!r}: {exc}"
                raise ValueError(msg) from exc
        object.__setattr__(self, "protected_source", tuple(compiled))

    @property
    def fix_tag(self) -> str | None:
        """Block used to wrap loose inline content, None when disabled."""
        if not self.auto_paragraph or self.enter_mode is EnterMode.BR:
            return None
        return self.enter_mode.value
