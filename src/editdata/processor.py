"""The HTML data processor: stored markup <-> editable markup.

Usage:
    from editdata import HtmlDataProcessor

    processor = HtmlDataProcessor()
    editable = processor.to_editable_form("<p>Hello<!-- note --></p>")
    stored = processor.to_storage_form(editable)
"""

from __future__ import annotations

import logging
import re
import secrets
from typing import TYPE_CHECKING

from .bridge import Html5libBridge
from .config import Direction, ProcessorConfig
from .filler import create_filler_rules
from .fragment import from_html
from .protect import (
    DataStore,
    protect_attributes,
    protect_element_names,
    protect_elements,
    protect_pre_formatted,
    protect_real_comments,
    protect_self_closing_elements,
    protect_source,
    unprotect_attribute_names,
    unprotect_element_names,
    unprotect_elements,
    unprotect_real_comments,
    unprotect_source,
)
from .rules import data_rules, html_rules
from .serialize import BasicWriter
from .transforms import RuleSet

if TYPE_CHECKING:
    from .bridge import HostBridge

logger = logging.getLogger(__name__)

# Prepended to the markup handed to the bridge and stripped afterwards, so a
# leading comment is never the first thing the surface sees.
SENTINEL = "a"

_PRE_WRAPPER_RE = re.compile(r"^<pre>|</pre>$", re.IGNORECASE)


class HtmlDataProcessor:
    """Translates markup between its stored form and its editable form.

    One processor belongs to one editing session: the data store it owns
    resolves the placeholders written by :meth:`to_editable_form` when the
    markup comes back through :meth:`to_storage_form`.
    """

    __slots__ = ("bridge", "config", "data_filter", "html_filter", "salt", "store", "writer")

    def __init__(
        self,
        config: ProcessorConfig | None = None,
        *,
        bridge: HostBridge | None = None,
        writer: BasicWriter | None = None,
        store: DataStore | None = None,
    ) -> None:
        self.config = config or ProcessorConfig()
        self.bridge = bridge or Html5libBridge()
        self.writer = writer or BasicWriter()
        self.store = store if store is not None else DataStore()
        # Random per processor, so salted attribute names never clash with content.
        self.salt = secrets.token_hex(6)

        capabilities = self.config.capabilities
        self.data_filter = RuleSet.compile(data_rules()).merge(create_filler_rules(Direction.INBOUND, self.config))
        self.html_filter = RuleSet.compile(html_rules(capabilities)).merge(
            create_filler_rules(Direction.OUTBOUND, self.config)
        )

    def to_editable_form(self, data: str, context: str | None = "", fix_for_body: bool = True) -> str:
        """Turn stored markup into markup fit for the editable.

        ``context`` is the name of the element the markup is loaded into; it
        defaults to the editable element (also when empty). ``None`` means no
        context at all, which also disables auto paragraphing.
        """
        config = self.config
        editable_tag = config.editable_tag
        if context is not None:
            context = context.lower() or editable_tag

        size = len(data)
        data = protect_source(data, self.store, config.protected_source)
        data = protect_attributes(data, self.salt)
        data = protect_elements(data)
        data = protect_element_names(data)
        data = protect_self_closing_elements(data)
        if config.capabilities.swallows_pre_newline:
            data = protect_pre_formatted(data)

        container = context or editable_tag
        is_pre = False
        if config.capabilities.loses_pre_format and container == "pre":
            container = "div"
            data = f"<pre>{data}</pre>"
            is_pre = True

        data = self.bridge.insert_and_read_back(container, SENTINEL + data)[len(SENTINEL) :]
        data = unprotect_attribute_names(data, self.salt)
        if is_pre:
            data = _PRE_WRAPPER_RE.sub("", data)

        data = unprotect_element_names(data)
        data = unprotect_elements(data)
        # Comments become real again so the rules can see them.
        data = unprotect_real_comments(data)

        fix_tag = config.fix_tag if fix_for_body and context is not None else None
        fragment = from_html(data, context=context or editable_tag, fix_tag=fix_tag)
        data = self.writer.serialize(fragment, self.data_filter)
        data = protect_real_comments(data)

        logger.debug("to_editable_form: %d -> %d chars", size, len(data))
        return data

    def to_storage_form(self, html: str) -> str:
        """Turn editable markup back into the markup to store."""
        size = len(html)
        fragment = from_html(html, context=self.config.editable_tag, fix_tag=self.config.fix_tag)
        data = self.writer.serialize(fragment, self.html_filter)
        data = unprotect_real_comments(data)
        data = unprotect_source(data, self.store)

        logger.debug("to_storage_form: %d -> %d chars", size, len(data))
        return data

    to_html = to_editable_form
    to_data_format = to_storage_form
