"""String-level protection of markup the rendering surface would damage.

Every function here maps ``str`` to ``str`` and never raises. The protected
forms are:

- ``<!--{cke_protected}PAYLOAD-->`` for protected source (scripts, noscript
  blocks, configured patterns),
- ``<!--{cke_protected}{C}PAYLOAD-->`` for comments,
- ``{cke_protected_ID}`` for any of the above found inside a quoted attribute
  value, with the original text kept in a :class:`DataStore`,

where PAYLOAD is the percent-encoded original with ``--`` spelled ``%2D%2D``
so the payload can never close the comment around it.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING
from urllib.parse import quote, unquote

from .constants import EARLY_RESTORED_ELEMENT_NAMES, PROTECTED_ELEMENT_NAMES, SAVED_PREFIX

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

PROTECTED_SOURCE_MARKER = "{cke_protected}"
COMMENT_MARKER = "{C}"

# Characters encodeURIComponent leaves alone besides ASCII alphanumerics.
_URI_COMPONENT_SAFE = "-_.!~*'()"

# A comment never swallows an already protected one.
_COMMENT_RE = re.compile(r"<!--(?!\{cke_protected\})(?:(?!<!--\{cke_protected\})[\s\S])*?-->")
_SCRIPT_RE = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_NOSCRIPT_RE = re.compile(r"<noscript[\s\S]*?</noscript>", re.IGNORECASE)
_TEMP_RE = re.compile(r"<!--\{cke_temp(comment)?\}(\d*?)-->")
_ALREADY_PROTECTED_RE = re.compile(r"cke_temp(comment)?|\{cke_protected")
_QUOTED_RE = re.compile(r"(['\"]).*?\1")
_PROTECTED_RE = re.compile(r"<!--\{cke_protected\}(?:\{C\})?([\s\S]+?)-->")
_PROTECTED_ID_RE = re.compile(r"\{cke_protected_(\d+)\}")
_QUOTED_PROTECTED_RE = re.compile(r"<!--\{cke_protected\}(?:\{C\})?([\s\S]+?)-->")

_REAL_COMMENT_RE = re.compile(r"<!--(?!\{cke_protected\})[\s\S]+?-->")
_PROTECTED_COMMENT_RE = re.compile(r"<!--\{cke_protected\}\{C\}([\s\S]+?)-->")

_PROTECT_ELEMENT_RE = re.compile(r"<(a|area|img|input|source)\b([^>]*)>", re.IGNORECASE)
_PROTECT_ATTRIBUTE_RE = re.compile(
    r"""\b(on\w+|href|src|name)\s*=\s*(?:(?:"[^"]*")|(?:'[^']*')|(?:[^ "'>]+))""",
    re.IGNORECASE,
)

_PROTECT_ELEMENTS_RE = re.compile(
    r"(?:<style(?=[ >])[^>]*>[\s\S]*</style>)|(?:<(:?link|meta|base)[^>]*>)",
    re.IGNORECASE,
)
_ENCODED_ELEMENTS_RE = re.compile(r"<cke:encoded>([^<]*)</cke:encoded>", re.IGNORECASE)

_PROTECT_ELEMENT_NAMES_RE = re.compile(rf"(</?)((?:{'|'.join(PROTECTED_ELEMENT_NAMES)})\b[^>]*>)", re.IGNORECASE)
_UNPROTECT_ELEMENT_NAMES_RE = re.compile(rf"(</?)cke:((?:{'|'.join(EARLY_RESTORED_ELEMENT_NAMES)})\b[^>]*>)", re.IGNORECASE)

_PROTECT_SELF_CLOSING_RE = re.compile(r"<cke:(param|embed)([^>]*?)/?>(?!\s*</cke:\1)", re.IGNORECASE)

_PRE_NEWLINE_RE = re.compile(r"(<pre\b[^>]*>)(\r\n|\n)")


def encode_payload(text: str) -> str:
    """Percent-encode ``text`` so it is safe inside a comment."""
    return quote(text, safe=_URI_COMPONENT_SAFE, errors="surrogatepass").replace("--", "%2D%2D")


def decode_payload(payload: str) -> str:
    return unquote(payload, errors="surrogatepass")


class DataStore:
    """Session-scoped id -> text mapping for protected attribute content.

    Ids start at 1, only ever grow and are never reused, so placeholders
    written by earlier calls stay resolvable for the whole session.
    """

    __slots__ = ("_entries", "_next_id")

    def __init__(self) -> None:
        self._entries: dict[int, str] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, store_id: object) -> bool:
        return store_id in self._entries

    def add(self, text: str) -> int:
        store_id = self._next_id
        self._entries[store_id] = text
        self._next_id += 1
        logger.debug("Stored protected text #%d (%d chars)", store_id, len(text))
        return store_id

    def get(self, store_id: int, default: str = "") -> str:
        return self._entries.get(store_id, default)


# -----------------
# Protected source
# -----------------


def protect_source(data: str, store: DataStore, protected_source: Iterable[re.Pattern[str]] = ()) -> str:
    """Hide comments, scripts, noscript blocks and configured patterns.

    Matches end up as ``<!--{cke_protected}...-->`` comments, or as
    ``{cke_protected_ID}`` placeholders when they sit inside a quoted
    attribute value.
    """
    protected: list[str] = []

    def _push(text: str) -> int:
        protected.append(text)
        return len(protected) - 1

    def _temp_comment(match: re.Match[str]) -> str:
        return f"<!--{{cke_tempcomment}}{_push(match.group(0))}-->"

    def _restore_temp(match: re.Match[str]) -> str:
        index = match.group(2)
        if not index or int(index) >= len(protected):
            return match.group(0)
        return protected[int(index)]

    def _temp(match: re.Match[str]) -> str:
        # There could be protected source inside another one.
        text = _TEMP_RE.sub(_restore_temp, match.group(0))
        # Never protect over protected.
        if _ALREADY_PROTECTED_RE.search(text):
            return text
        return f"<!--{{cke_temp}}{_push(text)}-->"

    def _collapse(match: re.Match[str]) -> str:
        text = _restore_temp(match)
        marker = COMMENT_MARKER if match.group(1) else ""
        return f"<!--{PROTECTED_SOURCE_MARKER}{marker}{encode_payload(text)}-->"

    def _store(match: re.Match[str]) -> str:
        return f"{{cke_protected_{store.add(decode_payload(match.group(1)))}}}"

    def _in_quotes(match: re.Match[str]) -> str:
        return _QUOTED_PROTECTED_RE.sub(_store, match.group(0))

    data = _COMMENT_RE.sub(_temp_comment, data)
    for regex in (_SCRIPT_RE, _NOSCRIPT_RE, *protected_source):
        data = regex.sub(_temp, data)
    data = _TEMP_RE.sub(_collapse, data)
    # Markers living in attribute values would get HTML-encoded by the
    # rendering surface, so those use the data store instead.
    return _QUOTED_RE.sub(_in_quotes, data)


def unprotect_source(html: str, store: DataStore | None) -> str:
    """Inverse of :func:`protect_source`. Unknown placeholder ids become ''."""

    def _lookup(match: re.Match[str]) -> str:
        if store is None:
            return ""
        return store.get(int(match.group(1)))

    html = _PROTECTED_RE.sub(lambda m: decode_payload(m.group(1)), html)
    return _PROTECTED_ID_RE.sub(_lookup, html)


def protect_real_comments(html: str) -> str:
    """Turn every comment not already protected into a ``{C}`` marker."""
    return _REAL_COMMENT_RE.sub(
        lambda m: f"<!--{PROTECTED_SOURCE_MARKER}{COMMENT_MARKER}{encode_payload(m.group(0))}-->",
        html,
    )


def unprotect_real_comments(html: str) -> str:
    return _PROTECTED_COMMENT_RE.sub(lambda m: decode_payload(m.group(1)), html)


# -----------------
# Attributes
# -----------------


def protect_attributes(data: str, salt: str) -> str:
    """Keep URL and name attributes away from the rendering surface.

    In ``a``, ``area``, ``img``, ``input`` and ``source`` start tags, each
    ``href``, ``src`` and ``name`` attribute is duplicated as
    ``data-cke-saved-NAME`` and renamed ``data-cke-SALT-NAME`` so the surface
    cannot rewrite it. Event handler attributes and attributes that already
    have a saved copy are left alone.
    """
    salted = f" data-cke-{salt}-"

    def _element(match: re.Match[str]) -> str:
        tag, attributes = match.group(1), match.group(2)

        def _attribute(attr: re.Match[str]) -> str:
            full, name = attr.group(0), attr.group(1)
            if name[:2].lower() == "on" or SAVED_PREFIX + name in attributes:
                return full
            return f" {SAVED_PREFIX}{full}{salted}{full}"

        return f"<{tag}{_PROTECT_ATTRIBUTE_RE.sub(_attribute, attributes)}>"

    return _PROTECT_ELEMENT_RE.sub(_element, data)


def unprotect_attribute_names(html: str, salt: str) -> str:
    """Strip the salted prefix written by :func:`protect_attributes`."""
    return re.sub(f" data-cke-{re.escape(salt)}-", " ", html, flags=re.IGNORECASE)


# -----------------
# Elements
# -----------------


def protect_elements(html: str) -> str:
    """Encode ``<style>`` blocks and ``<link>``/``<meta>``/``<base>`` tags."""
    return _PROTECT_ELEMENTS_RE.sub(lambda m: f"<cke:encoded>{encode_payload(m.group(0))}</cke:encoded>", html)


def unprotect_elements(html: str) -> str:
    return _ENCODED_ELEMENTS_RE.sub(lambda m: decode_payload(m.group(1)), html)


def protect_element_names(html: str) -> str:
    """Prefix elements the surface mishandles with the ``cke:`` namespace."""
    return _PROTECT_ELEMENT_NAMES_RE.sub(r"\1cke:\2", html)


def unprotect_element_names(html: str) -> str:
    """Restore ``html``, ``body``, ``head`` and ``title``.

    ``object``, ``embed`` and ``param`` keep their prefix until the outbound
    rules strip it.
    """
    return _UNPROTECT_ELEMENT_NAMES_RE.sub(r"\1\2", html)


def protect_self_closing_elements(html: str) -> str:
    """``<cke:param/>`` and ``<cke:embed/>`` become explicit open/close pairs."""
    return _PROTECT_SELF_CLOSING_RE.sub(r"<cke:\1\2></cke:\1>", html)


def protect_pre_formatted(html: str) -> str:
    """Double the first line break after ``<pre>``; the surface eats one."""
    return _PRE_NEWLINE_RE.sub(r"\1\2\2", html)
