from .bridge import HostBridge, Html5libBridge
from .config import Capabilities, Direction, EnterMode, ProcessorConfig
from .filler import create_filler_rules
from .fragment import from_html
from .node import Comment, Element, Fragment, Text
from .processor import HtmlDataProcessor
from .protect import DataStore, protect_source, unprotect_source
from .serialize import BasicWriter, to_html
from .transforms import (
    Action,
    Drop,
    Edit,
    EditAttr,
    EditRoot,
    RenameAttributes,
    RenameElements,
    Reorder,
    RuleSet,
    apply_rules,
)

__all__ = [
    "Action",
    "BasicWriter",
    "Capabilities",
    "Comment",
    "DataStore",
    "Direction",
    "Drop",
    "Edit",
    "EditAttr",
    "EditRoot",
    "Element",
    "EnterMode",
    "Fragment",
    "HostBridge",
    "Html5libBridge",
    "HtmlDataProcessor",
    "ProcessorConfig",
    "RenameAttributes",
    "RenameElements",
    "Reorder",
    "RuleSet",
    "Text",
    "apply_rules",
    "create_filler_rules",
    "from_html",
    "protect_source",
    "to_html",
    "unprotect_source",
]
