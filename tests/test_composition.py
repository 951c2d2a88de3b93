"""
Controller composition (controller/composition.py)
"""

from arbor.controller import Controller, Partition, partition


class Leaf(Controller):
    pass


class OtherLeaf(Controller):
    pass


class Parent(Controller):
    children = [Leaf]


class SecondParent(Controller):
    children = (Leaf, OtherLeaf)


class Alone(Controller):
    pass


class Middle(Controller):
    children = [OtherLeaf]


class Top(Controller):
    children = [Middle]


# ============================================================================
# partition
# ============================================================================

class TestPartition:

    def test_empty(self):
        layout = partition([])
        assert layout == Partition()
        assert layout.top_level == []

    def test_only_standalone(self):
        layout = partition([Alone, Leaf])
        assert layout.with_children == []
        assert layout.children == []
        assert layout.standalone == [Alone, Leaf]

    def test_parent_child_and_standalone(self):
        layout = partition([Leaf, Alone, Parent])
        assert layout.with_children == [Parent]
        assert layout.children == [Leaf]
        assert layout.standalone == [Alone]
        assert layout.top_level == [Parent, Alone]

    def test_child_listed_once_for_two_parents(self):
        layout = partition([Parent, SecondParent, Leaf, OtherLeaf])
        assert layout.with_children == [Parent, SecondParent]
        assert layout.children == [Leaf, OtherLeaf]
        assert layout.standalone == []

    def test_child_not_discovered_still_in_children(self):
        layout = partition([Parent])
        assert layout.children == [Leaf]
        assert Leaf not in layout.top_level

    def test_nested_parent_is_both_parent_and_child(self):
        layout = partition([Top, Middle, OtherLeaf])
        assert layout.with_children == [Top, Middle]
        assert layout.children == [Middle, OtherLeaf]
        assert Middle in layout.top_level
        assert layout.standalone == []

    def test_duplicates_ignored(self):
        layout = partition([Alone, Alone, Parent, Parent])
        assert layout.with_children == [Parent]
        assert layout.standalone == [Alone]

    def test_partition_does_not_call_setup(self):
        class Exploding(Controller):
            children = [Leaf]

            @classmethod
            def setup(cls, transport):
                raise AssertionError("setup must not run during partition")

        layout = partition([Exploding, Leaf])
        assert layout.with_children == [Exploding]

    def test_children_and_standalone_disjoint(self):
        layout = partition([Parent, SecondParent, Leaf, OtherLeaf, Alone, Top, Middle])
        assert not set(layout.children) & set(layout.standalone)
        assert not set(layout.with_children) & set(layout.standalone)
