"""Tree nodes for the data processor.

Every node knows its parent and its previous/next sibling. Those links are a
view over the parent's children sequence and are only ever changed by the
structural edit methods below (append, insert before/after, remove, replace,
reorder). Each of them leaves the tree consistent before returning:

    node.previous.next is node
    node.next.previous is node
    node.parent.children[node.index] is node
"""

from .constants import ASCII_WHITESPACE


class Node:
    """Base class of all tree nodes.

    - name: tag name for elements, '#text', '#comment' or '#document-fragment'
    - parent: containing node (None for a root or a detached node)
    - previous/next: adjacent siblings
    """

    __slots__ = ("name", "next", "parent", "previous")

    def __init__(self, name):
        self.name = name
        self.parent = None
        self.previous = None
        self.next = None

    @property
    def index(self):
        """Position in the parent's children, -1 when detached."""
        if self.parent is None:
            return -1
        return self.parent._children.index(self)

    def remove(self):
        """Detach this node from its parent (no-op when already detached)."""
        if self.parent is not None:
            self.parent.remove_child(self)
        return self

    def replace_with(self, node):
        """Put ``node`` at this node's position and detach this node."""
        parent = self.parent
        if parent is None:
            return
        parent.insert_before(node, self)
        parent.remove_child(self)

    def to_test_format(self, indent=0):
        raise NotImplementedError


class ParentNode(Node):
    """A node with an ordered list of children."""

    __slots__ = ("_children",)

    def __init__(self, name):
        super().__init__(name)
        self._children = []

    @property
    def children(self):
        return tuple(self._children)

    @property
    def first_child(self):
        return self._children[0] if self._children else None

    @property
    def last_child(self):
        return self._children[-1] if self._children else None

    def _would_create_circular_reference(self, child):
        current = self
        while current is not None:
            if current is child:
                return True
            current = current.parent
        return False

    def _adopt(self, child):
        if self._would_create_circular_reference(child):
            msg = f"Adding {child.name} as child of {self.name} would create circular reference"
            raise ValueError(msg)
        if child.parent is not None:
            child.parent.remove_child(child)

    def _relink(self, index):
        """Recompute the sibling links around ``self._children[index]``."""
        children = self._children
        node = children[index]
        node.parent = self
        node.previous = children[index - 1] if index > 0 else None
        node.next = children[index + 1] if index + 1 < len(children) else None
        if node.previous is not None:
            node.previous.next = node
        if node.next is not None:
            node.next.previous = node

    def append_child(self, child):
        self._adopt(child)
        self._children.append(child)
        self._relink(len(self._children) - 1)
        return child

    def insert_child_at(self, index, child):
        """Insert at ``index``; out of range indexes append."""
        self._adopt(child)
        if index < 0 or index >= len(self._children):
            return self.append_child(child)
        self._children.insert(index, child)
        self._relink(index)
        return child

    def insert_before(self, new_node, reference_node):
        if reference_node.parent is not self or new_node is reference_node:
            return None
        self._adopt(new_node)
        index = self._children.index(reference_node)
        self._children.insert(index, new_node)
        self._relink(index)
        return new_node

    def insert_after(self, new_node, reference_node):
        if reference_node.parent is not self or new_node is reference_node:
            return None
        self._adopt(new_node)
        index = self._children.index(reference_node) + 1
        self._children.insert(index, new_node)
        self._relink(index)
        return new_node

    def remove_child(self, child):
        """Remove a child node, updating all sibling links."""
        if child.parent is not self:
            return None
        index = self._children.index(child)
        del self._children[index]
        if child.previous is not None:
            child.previous.next = child.next
        if child.next is not None:
            child.next.previous = child.previous
        child.parent = None
        child.previous = None
        child.next = None
        return child

    def remove_children(self):
        """Detach every child, returning them in order."""
        removed = list(self._children)
        for child in removed:
            child.parent = None
            child.previous = None
            child.next = None
        self._children = []
        return removed

    def replace_with_children(self):
        """Unwrap: move the children to this node's position and detach it."""
        parent = self.parent
        if parent is None:
            return
        for child in self.remove_children():
            parent.insert_before(child, self)
        parent.remove_child(self)

    def reorder_children(self, key):
        """Stable sort of the children ranked by ``key``.

        Children for which ``key`` returns None keep their position; the ranked
        ones are sorted among the positions they occupied, ties in original order.
        """
        ranked = [(index, child) for index, child in enumerate(self._children) if key(child) is not None]
        slots = [index for index, _ in ranked]
        ordered = sorted(ranked, key=lambda pair: (key(pair[1]), pair[0]))
        for slot, (_, child) in zip(slots, ordered):
            self._children[slot] = child
        for index in range(len(self._children)):
            self._relink(index)

    def iter_descendants(self):
        for child in self._children:
            yield child
            if isinstance(child, ParentNode):
                yield from child.iter_descendants()


class Element(ParentNode):
    """An element. ``is_empty`` marks forced-empty (self-closing) elements."""

    __slots__ = ("attrs", "is_empty")

    def __init__(self, name, attrs=None, is_empty=False):
        if not name:
            msg = "Empty name passed to Element constructor"
            raise ValueError(msg)
        super().__init__(name)
        self.attrs = dict(attrs) if attrs else {}
        self.is_empty = bool(is_empty)

    def __repr__(self):
        return f"Element(<{self.name}>, children={len(self._children)})"

    def to_test_format(self, indent=0):
        result = f"| {' ' * indent}<{self.name}>"
        for key, value in sorted(self.attrs.items()):
            result += f'\n| {" " * (indent + 2)}{key}="{value}"'
        if self._children:
            parts = [result]
            parts.extend(child.to_test_format(indent + 2) for child in self._children)
            return "\n".join(parts)
        return result


class Fragment(ParentNode):
    """Root container. Never has a parent or siblings."""

    __slots__ = ()

    def __init__(self):
        super().__init__("#document-fragment")

    def __repr__(self):
        return f"Fragment(children={len(self._children)})"

    def to_test_format(self, indent=0):
        return "\n".join(child.to_test_format(0) for child in self._children)


class Text(Node):
    """Raw text. Character references are kept undecoded."""

    __slots__ = ("data",)

    def __init__(self, data=""):
        super().__init__("#text")
        self.data = data

    def __repr__(self):
        return f"Text('{self.data[:30]}')"

    def is_whitespace(self):
        return not self.data.strip(ASCII_WHITESPACE)

    def to_test_format(self, indent=0):
        return f'| {" " * indent}"{self.data}"'


class Comment(Node):
    __slots__ = ("data",)

    def __init__(self, data=""):
        super().__init__("#comment")
        self.data = data

    def __repr__(self):
        return f"Comment('{self.data[:30]}')"

    def to_test_format(self, indent=0):
        return f"| {' ' * indent}<!-- {self.data} -->"
