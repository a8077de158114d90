"""Host rendering surface bridges.

The inbound transform hands its protected markup to the rendering surface
(in a browser: ``element.innerHTML = markup; element.innerHTML``) so the
surface's own parser can fix the structure, then reads the markup back. Any
object with an ``insert_and_read_back`` method can play that part.
"""

from __future__ import annotations

import logging
from typing import Protocol

import html5lib
from html5lib.serializer import HTMLSerializer

from .constants import NBSP

logger = logging.getLogger(__name__)


class HostBridge(Protocol):
    def insert_and_read_back(self, tag_name: str, markup: str) -> str:
        """Insert ``markup`` into a ``tag_name`` element, return its inner markup."""
        ...


class Html5libBridge:
    """A rendering surface made of html5lib's fragment parser and serializer.

    The serializer is set up to write what a browser's ``innerHTML`` would:
    attribute values always double-quoted, no optional tags omitted, boolean
    attributes written out and non-breaking spaces spelled ``&nbsp;``.
    """

    __slots__ = ("_serializer", "_walker")

    def __init__(self) -> None:
        self._walker = html5lib.getTreeWalker("etree")
        self._serializer = HTMLSerializer(
            quote_attr_values="always",
            quote_char='"',
            use_best_quote_char=False,
            omit_optional_tags=False,
            minimize_boolean_attributes=False,
            use_trailing_solidus=False,
            escape_lt_in_attrs=False,
            resolve_entities=True,
        )

    def insert_and_read_back(self, tag_name: str, markup: str) -> str:
        fragment = html5lib.parseFragment(
            markup,
            container=tag_name,
            treebuilder="etree",
            namespaceHTMLElements=False,
        )
        html = self._serializer.render(self._walker(fragment))
        logger.debug("Bridge round trip in <%s>: %d -> %d chars", tag_name, len(markup), len(html))
        return html.replace(NBSP, "&nbsp;")
