"""Default rules of the data processor.

``data_rules`` run on the way into the editable, ``html_rules`` on the way
back to storage. Both return plain rule lists; the processor compiles them
together with the filler rules.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from .config import Capabilities
from .constants import (
    EDITABLE_ATTR,
    PROTECTED_ATTR_PREFIX,
    SAVED_ATTRIBUTES,
    SAVED_PREFIX,
    TABLE_ORDER,
    TEMP_ATTR,
    TITLE_ATTR,
)
from .node import Text
from .transforms import (
    Action,
    Drop,
    Edit,
    EditAttr,
    RenameAttributes,
    RenameElements,
    Reorder,
)

if TYPE_CHECKING:
    from .node import Element
    from .transforms import Rule

_CKE_CLASS_RE = re.compile(r"(?:^|\s+)cke_[^\s]*")
_STYLE_PROPERTY_RE = re.compile(r"(^|;)([^:]+)")

READ_ONLY_ELEMENTS = ("input", "textarea")


# -----------------
# Inbound
# -----------------


def protect_read_only(element: Element) -> None:
    """Lock a form control; remember whether it was editable before."""
    attrs = element.attrs
    # Flag that the lock is ours, so editor functions can still edit it.
    if attrs.get("contenteditable") != "false":
        attrs[EDITABLE_ATTR] = "true" if attrs.get("contenteditable") else "1"
    attrs["contenteditable"] = "false"


def data_rules() -> list[Rule]:
    return [
        # Event handlers must never be live inside the editable.
        RenameAttributes(r"^on", PROTECTED_ATTR_PREFIX + "on"),
        *(Edit(tag, protect_read_only) for tag in READ_ONLY_ELEMENTS),
    ]


# -----------------
# Outbound
# -----------------


def drop_temporary(element: Element) -> Action | None:
    """Drop editor-only elements; saved attribute copies win over live ones."""
    attrs = element.attrs
    if attrs.get(TEMP_ATTR):
        return Action.DROP
    for name in SAVED_ATTRIBUTES:
        if SAVED_PREFIX + name in attrs:
            attrs.pop(name, None)
    return None


def embed_size_from_object(element: Element) -> None:
    parent = element.parent
    if parent is None or parent.name != "object":
        return
    for name in ("width", "height"):
        value = parent.attrs.get(name)
        if value:
            element.attrs[name] = value


def make_param_empty(element: Element) -> None:
    element.remove_children()
    element.is_empty = True


def is_empty_link(element: Element) -> bool:
    """A link with no content and no anchor name. Named anchors are kept."""
    attrs = element.attrs
    return not (element.children or attrs.get("name") or attrs.get(SAVED_PREFIX + "name"))


def unwrap_apple_span(element: Element) -> Action | None:
    if element.attrs.get("class") == "Apple-style-span":
        return Action.UNWRAP
    return None


def clean_html_element(element: Element) -> None:
    element.attrs.pop("contenteditable", None)
    element.attrs.pop("class", None)


def clean_body_element(element: Element) -> None:
    element.attrs.pop("spellcheck", None)
    element.attrs.pop("contenteditable", None)


def normalize_style_element(element: Element) -> None:
    child = element.first_child
    if isinstance(child, Text) and child.data:
        child.data = child.data.strip(" \t\n\r")
    if not element.attrs.get("type"):
        element.attrs["type"] = "text/css"


def restore_title(element: Element) -> None:
    title = element.first_child
    if title is None:
        title = element.append_child(Text())
    if isinstance(title, Text):
        title.data = element.attrs.get(TITLE_ATTR) or ""


def unprotect_read_only(element: Element) -> None:
    attrs = element.attrs
    editable = attrs.get(EDITABLE_ATTR)
    if editable == "true":
        attrs["contenteditable"] = "true"
    elif editable == "1":
        attrs.pop("contenteditable", None)


def strip_editor_classes(value: str, element: Element) -> str | None:
    """Remove ``cke_*`` class names; drop the attribute when nothing is left."""
    return _CKE_CLASS_RE.sub("", value).lstrip(" \t\n\r") or None


def lowercase_style_properties(value: str, element: Element) -> str:
    """Lower-case property names only, values are left as they are."""
    return _STYLE_PROPERTY_RE.sub(lambda m: m.group(0).lower(), value)


def html_rules(capabilities: Capabilities | None = None) -> list[Rule]:
    capabilities = capabilities or Capabilities()
    rules: list[Rule] = [
        RenameElements(r"^cke:", ""),
        RenameElements(r"^\?xml:namespace$", ""),
        RenameAttributes(r"^data-cke-(saved|pa)-", ""),
        RenameAttributes(r"^data-cke-.*", ""),
        RenameAttributes(r"^hidefocus$", ""),
        Edit("*", drop_temporary),
        Reorder("table", TABLE_ORDER),
        Edit("embed", embed_size_from_object),
        Edit("param", make_param_empty),
        Drop("a", is_empty_link),
        Edit("span", unwrap_apple_span),
        Edit("html", clean_html_element),
        Edit("body", clean_body_element),
        Edit("style", normalize_style_element),
        Edit("title", restore_title),
        *(Edit(tag, unprotect_read_only) for tag in READ_ONLY_ELEMENTS),
        EditAttr("class", strip_editor_classes),
    ]
    if capabilities.uppercase_style_attributes:
        rules.append(EditAttr("style", lowercase_style_properties))
    return rules
