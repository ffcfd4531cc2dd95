import logging

from models.category import CategoryType
from tagtree.builder import (
    build_forest,
    build_forests,
    find_node,
    flatten_parents,
    iter_nodes,
)
from tests.helpers import category


def _shape(forest):
    """Nested (id, [children]) tuples for compact comparisons."""
    return [(node.id, _shape(node.children)) for node in forest]


class TestBuildForest:
    """Tests for build_forest."""

    def test_builds_nested_tree_in_record_order(self):
        """Test roots and children keep the order of the input records."""
        records = [
            category(1, "Food"),
            category(2, "Groceries", parent_id=1),
            category(3, "Housing"),
            category(4, "Restaurants", parent_id=1),
            category(5, "Rent", parent_id=3),
        ]

        forest = build_forest(records)

        assert _shape(forest) == [(1, [(2, []), (4, [])]), (3, [(5, [])])]

    def test_child_listed_before_parent(self):
        """Test a child record appearing before its parent is still attached."""
        records = [category(2, "Groceries", parent_id=1), category(1, "Food")]

        forest = build_forest(records)

        assert _shape(forest) == [(1, [(2, [])])]

    def test_empty_records(self):
        """Test no records gives an empty forest."""
        assert build_forest([]) == []

    def test_new_nodes_start_collapsed(self):
        """Test freshly built nodes are collapsed."""
        forest = build_forest([category(1, "Food"), category(2, "Groceries", parent_id=1)])

        assert all(node.collapsed for node in iter_nodes(forest))

    def test_copies_record_fields(self):
        """Test node fields come from the record."""
        forest = build_forest([category(1, "Food", budget="600")])

        node = forest[0]
        assert node.name == "Food"
        assert str(node.budget_amount) == "600"
        assert node.type == CategoryType.expense
        assert node.parent_id is None

    def test_dangling_parent_becomes_root(self, caplog):
        """Test a record whose parent is missing is promoted to a root."""
        records = [category(1, "Food"), category(7, "Orphan", parent_id=99)]

        with caplog.at_level(logging.WARNING):
            forest = build_forest(records)

        assert [node.id for node in forest] == [1, 7]
        assert forest[1].parent_id is None
        assert "missing parent 99" in caplog.text

    def test_cyclic_records_terminate_and_are_skipped(self, caplog):
        """Test records in a parent cycle are left out instead of looping."""
        records = [
            category(1, "Food"),
            category(2, "A", parent_id=3),
            category(3, "B", parent_id=2),
        ]

        with caplog.at_level(logging.WARNING):
            forest = build_forest(records)

        assert _shape(forest) == [(1, [])]
        assert "[2, 3]" in caplog.text

    def test_filters_by_category_type(self):
        """Test only records of the requested type are used."""
        records = [
            category(1, "Food"),
            category(2, "Salary", type=CategoryType.income),
        ]

        forest = build_forest(records, CategoryType.income)

        assert [node.id for node in forest] == [2]

    def test_parent_of_other_type_is_treated_as_dangling(self):
        """Test a child whose parent has the other type becomes a root."""
        records = [
            category(1, "Salary", type=CategoryType.income),
            category(2, "Odd", parent_id=1),
        ]

        forest = build_forest(records, CategoryType.expense)

        assert [node.id for node in forest] == [2]
        assert forest[0].parent_id is None

    def test_round_trip_through_flatten_parents(self):
        """Test positional parents of the built forest match the records."""
        records = [
            category(1, "Food"),
            category(2, "Groceries", parent_id=1),
            category(3, "Produce", parent_id=2),
            category(4, "Housing"),
        ]

        forest = build_forest(records)

        assert flatten_parents(forest) == [(r.id, r.parent_id) for r in records]


class TestBuildForests:
    """Tests for build_forests."""

    def test_splits_income_and_expense(self):
        """Test the same record list yields separate income and expense forests."""
        records = [
            category(1, "Food"),
            category(2, "Salary", type=CategoryType.income),
            category(3, "Bonus", parent_id=2, type=CategoryType.income),
        ]

        income, expense = build_forests(records)

        assert _shape(income) == [(2, [(3, [])])]
        assert _shape(expense) == [(1, [])]

    def test_accepts_a_generator(self):
        """Test records can be a one-shot iterable."""
        income, expense = build_forests(r for r in [category(1, "Food")])

        assert income == []
        assert [node.id for node in expense] == [1]


class TestTraversal:
    """Tests for iter_nodes, find_node and flatten_parents."""

    def test_iter_nodes_is_preorder(self):
        """Test parents are yielded before children, in display order."""
        forest = build_forest(
            [
                category(1, "Food"),
                category(2, "Groceries", parent_id=1),
                category(3, "Housing"),
                category(4, "Produce", parent_id=2),
            ]
        )

        assert [node.id for node in iter_nodes(forest)] == [1, 2, 4, 3]

    def test_find_node(self):
        """Test finding a nested node and a missing one."""
        forest = build_forest([category(1, "Food"), category(2, "Groceries", parent_id=1)])

        assert find_node(forest, 2).name == "Groceries"
        assert find_node(forest, 42) is None

    def test_flatten_parents_ignores_stale_parent_field(self):
        """Test pairs come from position, not from the parent_id field."""
        forest = build_forest([category(1, "Food"), category(2, "Groceries", parent_id=1)])
        forest[0].children[0].parent_id = 999

        assert flatten_parents(forest) == [(1, None), (2, 1)]
