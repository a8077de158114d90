"""Element categories and marker names.

This module is the small DTD the data processor works with. Elements are kept
in lists for a stable iteration order; the frozenset views are what the hot
paths look up.

Usage:
    from editdata.constants import BLOCK_LIKE, VOID
"""

VOID_ELEMENTS = [
    "area",
    "base",
    "basefont",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "keygen",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
]

# Elements that start a new text block.
BLOCK_ELEMENTS = [
    "address",
    "article",
    "aside",
    "audio",
    "blockquote",
    "center",
    "dd",
    "details",
    "dir",
    "div",
    "dl",
    "dt",
    "fieldset",
    "figcaption",
    "figure",
    "footer",
    "form",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hgroup",
    "hr",
    "li",
    "main",
    "menu",
    "nav",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "ul",
    "video",
]

# Elements that limit the reach of a block (selection and filler boundaries).
BLOCK_LIMIT_ELEMENTS = [
    "article",
    "aside",
    "audio",
    "body",
    "caption",
    "details",
    "dir",
    "div",
    "dl",
    "fieldset",
    "figcaption",
    "figure",
    "footer",
    "form",
    "header",
    "hgroup",
    "menu",
    "nav",
    "ol",
    "section",
    "table",
    "td",
    "th",
    "tr",
    "ul",
    "video",
]

LIST_ITEM_ELEMENTS = ["dd", "dt", "li"]

# Children allowed in <tr>.
TABLE_CELL_ELEMENTS = ["td", "th"]

# Block-like elements whose content model has no text (list, table and
# grouping containers). Everything else block-like is a text block.
NON_TEXT_BLOCK_ELEMENTS = [
    "audio",
    "dir",
    "dl",
    "hgroup",
    "hr",
    "menu",
    "ol",
    "table",
    "tr",
    "ul",
    "video",
]

# Raw content, never tokenized.
CDATA_ELEMENTS = ["script", "style"]

# Canonical order of table children.
TABLE_ORDER = ["caption", "colgroup", "col", "thead", "tfoot", "tbody"]

# Start tags implicitly closing an open element of the key tag.
AUTO_CLOSING_TAGS = {
    "p": [
        "address",
        "article",
        "aside",
        "blockquote",
        "center",
        "details",
        "dir",
        "div",
        "dl",
        "dt",
        "dd",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hgroup",
        "hr",
        "li",
        "main",
        "menu",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "table",
        "ul",
    ],
    "li": ["li"],
    "dt": ["dt", "dd"],
    "dd": ["dt", "dd"],
    "option": ["option", "optgroup"],
    "tr": ["tr", "tbody", "thead", "tfoot"],
    "td": ["td", "th", "tr", "tbody", "thead", "tfoot"],
    "th": ["td", "th", "tr", "tbody", "thead", "tfoot"],
    "thead": ["tbody", "tfoot"],
    "tbody": ["tbody", "tfoot"],
    "tfoot": ["tbody"],
}

# Elements an implied end tag must not cross.
SCOPE_ELEMENTS = [
    "applet",
    "caption",
    "object",
    "table",
    "td",
    "th",
]

# Containers that can hold a paragraph, hence be auto-paragraphed.
FLOW_CONTAINERS = [
    "article",
    "aside",
    "blockquote",
    "body",
    "dd",
    "details",
    "div",
    "fieldset",
    "figure",
    "footer",
    "form",
    "header",
    "li",
    "main",
    "nav",
    "section",
    "td",
    "th",
]

VOID = frozenset(VOID_ELEMENTS)
BLOCK = frozenset(BLOCK_ELEMENTS)
BLOCK_LIMIT = frozenset(BLOCK_LIMIT_ELEMENTS)
BLOCK_LIKE = BLOCK | BLOCK_LIMIT
LIST_ITEM = frozenset(LIST_ITEM_ELEMENTS)
TABLE_CELL = frozenset(TABLE_CELL_ELEMENTS)
TEXT_BLOCK = BLOCK_LIKE - frozenset(NON_TEXT_BLOCK_ELEMENTS)
CDATA = frozenset(CDATA_ELEMENTS)
SCOPE = frozenset(SCOPE_ELEMENTS)
FLOW_CONTAINER = frozenset(FLOW_CONTAINERS)

# Marker attributes.
BOGUS_ATTR = "data-cke-bogus"
EOL_ATTR = "data-cke-eol"
BOOKMARK_ATTR = "data-cke-bookmark"
TEMP_ATTR = "data-cke-temp"
EDITABLE_ATTR = "data-cke-editable"
TITLE_ATTR = "data-cke-title"
SAVED_PREFIX = "data-cke-saved-"
PROTECTED_ATTR_PREFIX = "data-cke-pa-"

# Attributes whose value the rendering surface may rewrite.
SAVED_ATTRIBUTES = ("name", "href", "src")

# Element names prefixed with ``cke:`` while passing through the surface.
PROTECTED_ELEMENT_NAMES = ("object", "embed", "param", "html", "body", "head", "title")

# The subset restored right after the surface ran.
EARLY_RESTORED_ELEMENT_NAMES = ("html", "body", "head", "title")

NBSP = "\xa0"

# ASCII whitespace, without the non-breaking space.
ASCII_WHITESPACE = " \t\n\r\f"

# Never wrapped into an auto paragraph: table internals and document-level
# elements that are not body content.
NON_PHRASING_ELEMENTS = [
    "base",
    "body",
    "col",
    "colgroup",
    "head",
    "html",
    "link",
    "meta",
    "noscript",
    "option",
    "optgroup",
    "script",
    "style",
    "tbody",
    "tfoot",
    "thead",
    "title",
]

NON_PHRASING = frozenset(NON_PHRASING_ELEMENTS)

# Whitespace between children of these carries no meaning.
WHITESPACE_INSIGNIFICANT = frozenset(NON_TEXT_BLOCK_ELEMENTS) | frozenset(
    ["colgroup", "tbody", "tfoot", "thead", "select"]
)
