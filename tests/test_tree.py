"""
Tests for grammar/tree.py - DerivationTree expansion and materialization.
"""

import pytest

from treefuzz.grammar import (
    DerivationTree, Expansion, IncompleteTree, Nonterminal, Terminal, materialize,
)


S, A, B = Nonterminal("S"), Nonterminal("A"), Nonterminal("B")


class TestDerivationTree:
    """Tests for the open-leaf worklist."""

    def test_new_tree_has_single_open_root(self):
        """Test a fresh tree is one open leaf for the start symbol."""
        tree = DerivationTree("S")
        assert tree.root.symbol == S
        assert tree.root.is_open
        assert tree.open_count == 1
        assert tree.open_leaves == (tree.root,)
        assert not tree.is_complete
        assert tree.steps == 0

    def test_expand_replaces_leaf_with_open_children(self):
        """Test expansion splices new open children in place of the leaf."""
        tree = DerivationTree("S")
        children = tree.expand(0, 0, Expansion.of(A, "-", B))

        assert [child.symbol for child in children] == [A, Terminal("-"), B]
        assert [leaf.symbol for leaf in tree.open_leaves] == [A, B]
        assert tree.root.alternative == 0
        assert tree.root.is_expanded
        assert not tree.root.is_open
        assert tree.steps == 1

    def test_worklist_keeps_left_to_right_order(self):
        """Test expanding a middle leaf keeps surrounding leaves in order."""
        tree = DerivationTree("S")
        tree.expand(0, 0, Expansion.of(A, B, A))
        tree.expand(1, 2, Expansion.of(S, "b", S))

        names = [leaf.name for leaf in tree.open_leaves]
        assert names == ["A", "S", "S", "A"]
        assert str(tree) == "<A><S>b<S><A>"

    def test_child_depth(self):
        """Test children sit one level below their parent."""
        tree = DerivationTree("S")
        tree.expand(0, 0, Expansion.of(A))
        tree.expand(0, 0, Expansion.of(B))
        assert tree.open_leaf(0).depth == 2
        assert tree.depth() == 2

    def test_empty_expansion_closes_leaf(self):
        """Test an epsilon expansion leaves no children and no open leaf."""
        tree = DerivationTree("S")
        assert tree.expand(0, 1, Expansion.of()) == []
        assert tree.is_complete
        assert tree.root.children == []
        assert materialize(tree) == ""

    def test_walk_is_pre_order(self):
        """Test traversal visits parents before children, left to right."""
        tree = DerivationTree("S")
        tree.expand(0, 0, Expansion.of(A, "c"))
        tree.expand(0, 0, Expansion.of("a", "b"))
        assert [node.name for node in tree.walk()] == ["S", "A", "a", "b", "c"]
        assert tree.node_count() == 5


class TestMaterialize:
    """Tests for materialize()."""

    def test_concatenates_terminals_left_to_right(self):
        """Test the output is the terminal yield of the tree."""
        tree = DerivationTree("S")
        tree.expand(0, 0, Expansion.of(A, B))
        tree.expand(1, 0, Expansion.of("y"))
        tree.expand(0, 0, Expansion.of("x"))
        assert materialize(tree) == "xy"

    def test_open_leaf_is_error(self):
        """Test materializing a tree with open leaves fails."""
        tree = DerivationTree("S")
        tree.expand(0, 0, Expansion.of("x", A))
        with pytest.raises(IncompleteTree) as exc_info:
            materialize(tree)
        assert exc_info.value.symbol == "A"

    def test_multi_character_and_empty_terminals(self):
        """Test terminals are copied verbatim."""
        tree = DerivationTree("S")
        tree.expand(0, 0, Expansion.of("SELECT ", "", "\n"))
        assert materialize(tree) == "SELECT \n"
