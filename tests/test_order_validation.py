"""Tests for order graph invariant checks."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from pyvda5050.exceptions import VdaGraphError
from pyvda5050.models import Edge, Node, Order
from pyvda5050.validation import is_repeated_update, validate_order


def _node(node_id: str, sequence_id: int, released: bool = True) -> Node:
    return Node(node_id=node_id, sequence_id=sequence_id, released=released)


def _edge(edge_id: str, sequence_id: int, start: str, end: str, released: bool = True) -> Edge:
    return Edge(edge_id=edge_id, sequence_id=sequence_id, released=released, start_node_id=start, end_node_id=end)


def _order(nodes: list[Node], edges: list[Edge], *, order_id: str = "o1", update: int = 0, header_id: int = 0) -> Order:
    fields: dict[str, Any] = {
        "header_id": header_id,
        "timestamp": datetime(2026, 1, 1, tzinfo=UTC),
        "version": "2.0.0",
        "manufacturer": "acme",
        "serial_number": "agv-1",
        "order_id": order_id,
        "order_update_id": update,
        "nodes": nodes,
        "edges": edges,
    }
    return Order(**fields)


def _path(released_until: int = 4) -> Order:
    """n0 -e1- n2 -e3- n4 -e5- n6, released up to sequence id *released_until*."""
    return _order(
        [_node(f"n{i}", i, i <= released_until) for i in (0, 2, 4, 6)],
        [_edge(f"e{i}", i, f"n{i - 1}", f"n{i + 1}", i <= released_until) for i in (1, 3, 5)],
    )


class TestSingleOrder:
    def test_valid_path(self) -> None:
        validate_order(_path())

    def test_single_node_is_valid(self) -> None:
        validate_order(_order([_node("home", 0)], []))

    def test_no_nodes_rejected(self) -> None:
        with pytest.raises(VdaGraphError):
            validate_order(_order([], []))

    def test_edge_with_unknown_start_node(self) -> None:
        order = _order([_node("n0", 0), _node("n2", 2)], [_edge("e1", 1, "ghost", "n2")])
        with pytest.raises(VdaGraphError, match="unknown node 'ghost'"):
            validate_order(order)

    def test_duplicate_sequence_id(self) -> None:
        order = _order([_node("n0", 0), _node("n2", 1)], [_edge("e1", 1, "n0", "n2")])
        with pytest.raises(VdaGraphError, match="sequenceId 1"):
            validate_order(order)

    def test_nodes_out_of_list_order(self) -> None:
        order = _order([_node("n2", 2), _node("n0", 0)], [_edge("e1", 1, "n0", "n2")])
        with pytest.raises(VdaGraphError, match="strictly increasing"):
            validate_order(order)

    def test_two_nodes_without_edge(self) -> None:
        with pytest.raises(VdaGraphError, match="alternation"):
            validate_order(_order([_node("n0", 0), _node("n1", 1)], []))

    def test_order_ending_with_edge(self) -> None:
        with pytest.raises(VdaGraphError, match="instead of a node"):
            validate_order(_order([_node("n0", 0)], [_edge("e1", 1, "n0", "n0")]))

    def test_edge_connecting_wrong_neighbours(self) -> None:
        order = _order(
            [_node("n0", 0), _node("n2", 2), _node("n4", 4)],
            [_edge("e1", 1, "n2", "n0"), _edge("e3", 3, "n2", "n4")],
        )
        with pytest.raises(VdaGraphError, match="sits between"):
            validate_order(order)

    def test_released_after_horizon(self) -> None:
        order = _order(
            [_node("n0", 0), _node("n2", 2, released=False), _node("n4", 4)],
            [_edge("e1", 1, "n0", "n2"), _edge("e3", 3, "n2", "n4", released=False)],
        )
        with pytest.raises(VdaGraphError, match="follows unreleased"):
            validate_order(order)

    def test_horizon_suffix(self) -> None:
        order = _path(released_until=2)
        validate_order(order)
        assert [element.sequence_id for element in order.horizon] == [3, 4, 5, 6]

    def test_node_visited_twice(self) -> None:
        order = _order(
            [_node("a", 0), _node("b", 2), _node("a", 4)],
            [_edge("ab", 1, "a", "b"), _edge("ba", 3, "b", "a")],
        )
        validate_order(order)


class TestOrderUpdate:
    def test_extend_horizon(self) -> None:
        prior = _path(released_until=2)
        update = _order(
            [_node("n2", 2), _node("n4", 4), _node("n6", 6, released=False)],
            [_edge("e3", 3, "n2", "n4"), _edge("e5", 5, "n4", "n6", released=False)],
            update=1,
        )
        validate_order(update, prior)

    def test_released_node_flipped_to_unreleased(self) -> None:
        prior = _path(released_until=4)
        update = _order(
            [_node("n2", 2), _node("n4", 4, released=False), _node("n6", 6, released=False)],
            [_edge("e3", 3, "n2", "n4", released=False), _edge("e5", 5, "n4", "n6", released=False)],
            update=1,
        )
        with pytest.raises(VdaGraphError, match="unreleased"):
            validate_order(update, prior)

    def test_released_element_removed(self) -> None:
        prior = _path(released_until=4)
        update = _order([_node("n2", 2)], [], update=1)
        with pytest.raises(VdaGraphError, match="removed"):
            validate_order(update, prior)

    def test_released_element_replaced(self) -> None:
        prior = _path(released_until=4)
        update = _order(
            [_node("n2", 2), _node("x4", 4)],
            [_edge("e3", 3, "n2", "x4")],
            update=1,
        )
        with pytest.raises(VdaGraphError, match="replaced"):
            validate_order(update, prior)

    def test_update_must_not_skip_past_base(self) -> None:
        prior = _path(released_until=2)
        update = _order([_node("n4", 4)], [], update=1)
        with pytest.raises(VdaGraphError, match="past the end"):
            validate_order(update, prior)

    def test_lower_update_id_rejected(self) -> None:
        prior = _order([_node("n0", 0)], [], update=3)
        with pytest.raises(VdaGraphError, match="lower"):
            validate_order(_order([_node("n0", 0)], [], update=2), prior)

    def test_same_update_id_same_content_is_repeat(self) -> None:
        prior = _path()
        repeat = _path().model_copy(update={"header_id": 9})
        validate_order(repeat, prior)
        assert is_repeated_update(repeat, prior)

    def test_same_update_id_different_content_rejected(self) -> None:
        prior = _path(released_until=4)
        changed = _path(released_until=6)
        assert not is_repeated_update(changed, prior)
        with pytest.raises(VdaGraphError, match="already used"):
            validate_order(changed, prior)

    def test_different_order_id_ignores_prior(self) -> None:
        prior = _path()
        fresh = _order([_node("z", 0)], [], order_id="o2")
        validate_order(fresh, prior)
        assert not is_repeated_update(fresh, prior)

    def test_edge_may_reference_prior_node_list(self) -> None:
        # Still has to connect its neighbours in this order.
        prior = _path(released_until=2)
        update = _order(
            [_node("n2", 2), _node("n4", 4)],
            [_edge("e3", 3, "n0", "n4")],
            update=1,
        )
        with pytest.raises(VdaGraphError, match="sits between"):
            validate_order(update, prior)
