from __future__ import annotations

import unittest

from editdata.node import Comment, Element, Fragment, Text


def _assert_linked(parent) -> None:
    children = parent.children
    for index, child in enumerate(children):
        assert child.parent is parent
        assert child.index == index
        assert child.previous is (children[index - 1] if index else None)
        assert child.next is (children[index + 1] if index + 1 < len(children) else None)


class TestNode(unittest.TestCase):
    def test_append_child_links_siblings(self) -> None:
        root = Fragment()
        a = root.append_child(Element("a"))
        b = root.append_child(Text("b"))
        c = root.append_child(Comment("c"))
        assert root.children == (a, b, c)
        assert root.first_child is a
        assert root.last_child is c
        _assert_linked(root)

    def test_insert_before_and_after(self) -> None:
        root = Fragment()
        middle = root.append_child(Element("b"))
        first = root.insert_before(Element("a"), middle)
        last = root.insert_after(Element("c"), middle)
        assert [n.name for n in root.children] == ["a", "b", "c"]
        assert first.next is middle
        assert last.previous is middle
        _assert_linked(root)

    def test_insert_with_foreign_reference_is_ignored(self) -> None:
        root = Fragment()
        stranger = Element("x")
        assert root.insert_before(Element("a"), stranger) is None
        assert root.insert_after(Element("a"), stranger) is None
        assert root.children == ()

    def test_insert_relative_to_itself_is_ignored(self) -> None:
        root = Fragment()
        a = root.append_child(Element("a"))
        assert root.insert_before(a, a) is None
        assert root.children == (a,)

    def test_insert_child_at_out_of_range_appends(self) -> None:
        root = Fragment()
        a = root.append_child(Element("a"))
        b = root.insert_child_at(5, Element("b"))
        c = root.insert_child_at(0, Element("c"))
        assert root.children == (c, a, b)
        _assert_linked(root)

    def test_remove_detaches_and_relinks(self) -> None:
        root = Fragment()
        a = root.append_child(Element("a"))
        b = root.append_child(Element("b"))
        c = root.append_child(Element("c"))
        assert b.remove() is b
        assert b.parent is None
        assert b.previous is None
        assert b.next is None
        assert b.index == -1
        assert a.next is c
        assert c.previous is a
        _assert_linked(root)
        # Removing twice is a no-op.
        b.remove()
        assert root.children == (a, c)

    def test_moving_a_node_detaches_it_from_its_old_parent(self) -> None:
        first = Element("div")
        second = Element("div")
        child = first.append_child(Text("x"))
        second.append_child(child)
        assert first.children == ()
        assert child.parent is second

    def test_circular_reference_is_rejected(self) -> None:
        outer = Element("div")
        inner = outer.append_child(Element("span"))
        with self.assertRaises(ValueError):
            inner.append_child(outer)
        with self.assertRaises(ValueError):
            outer.append_child(outer)

    def test_empty_element_name_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Element("")

    def test_replace_with(self) -> None:
        root = Fragment()
        a = root.append_child(Element("a"))
        old = root.append_child(Element("old"))
        new = Element("new")
        old.replace_with(new)
        assert root.children == (a, new)
        assert old.parent is None
        _assert_linked(root)

    def test_replace_with_children_unwraps(self) -> None:
        root = Fragment()
        before = root.append_child(Text("<"))
        wrapper = root.append_child(Element("span"))
        x = wrapper.append_child(Text("x"))
        y = wrapper.append_child(Element("b"))
        after = root.append_child(Text(">"))
        wrapper.replace_with_children()
        assert root.children == (before, x, y, after)
        assert wrapper.parent is None
        assert wrapper.children == ()
        _assert_linked(root)

    def test_remove_children_returns_them_detached(self) -> None:
        div = Element("div")
        a = div.append_child(Text("a"))
        b = div.append_child(Text("b"))
        assert div.remove_children() == [a, b]
        assert div.children == ()
        assert a.parent is None
        assert a.next is None
        assert b.previous is None

    def test_reorder_children_keeps_unranked_in_place(self) -> None:
        table = Element("table")
        names = ["tbody", "x-a", "caption", "x-b", "thead", "tbody"]
        nodes = [table.append_child(Element(name)) for name in names]
        order = ["caption", "thead", "tbody"]
        table.reorder_children(lambda n: order.index(n.name) if n.name in order else None)
        assert [n.name for n in table.children] == ["caption", "x-a", "thead", "x-b", "tbody", "tbody"]
        # Equal ranks keep their relative order.
        assert table.children[4] is nodes[0]
        assert table.children[5] is nodes[5]
        _assert_linked(table)

    def test_iter_descendants_is_document_order(self) -> None:
        root = Fragment()
        div = root.append_child(Element("div"))
        div.append_child(Element("p")).append_child(Text("a"))
        root.append_child(Comment("c"))
        assert [n.name for n in root.iter_descendants()] == ["div", "p", "#text", "#comment"]

    def test_text_whitespace_ignores_nbsp(self) -> None:
        assert Text(" \n\t").is_whitespace()
        assert not Text("\xa0").is_whitespace()

    def test_to_test_format(self) -> None:
        root = Fragment()
        p = root.append_child(Element("p", {"class": "x", "b": "1"}))
        p.append_child(Text("hi"))
        root.append_child(Comment("note"))
        assert root.to_test_format() == '| <p>\n|   b="1"\n|   class="x"\n|   "hi"\n| <!-- note -->'


if __name__ == "__main__":
    unittest.main()
