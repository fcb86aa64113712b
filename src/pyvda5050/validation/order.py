"""Order graph invariant checks.

Only the structural invariants are checked here.  Whether a valid
revision is *accepted* by the executing vehicle is order-management
policy and lives elsewhere.
"""

from __future__ import annotations

from collections.abc import Sequence

from pyvda5050.exceptions import VdaGraphError
from pyvda5050.models.order import Edge, Node, Order


def _kind(element: Node | Edge) -> str:
    return "node" if isinstance(element, Node) else "edge"


def _element_id(element: Node | Edge) -> str:
    return element.node_id if isinstance(element, Node) else element.edge_id


def _describe(element: Node | Edge) -> str:
    return f"{_kind(element)} {_element_id(element)!r} (sequenceId {element.sequence_id})"


def _check_list_order(elements: Sequence[Node | Edge], label: str) -> None:
    previous: int | None = None
    for element in elements:
        if previous is not None and element.sequence_id <= previous:
            raise VdaGraphError(f"{label} are not in strictly increasing sequenceId order at {_describe(element)}")
        previous = element.sequence_id


def _check_sequence(order: Order) -> list[Node | Edge]:
    """Check sequence ids and node/edge alternation; return the merged path."""
    if not order.nodes:
        raise VdaGraphError(f"order {order.order_id!r} has no nodes")

    seen: dict[int, Node | Edge] = {}
    for element in [*order.nodes, *order.edges]:
        other = seen.get(element.sequence_id)
        if other is not None:
            raise VdaGraphError(f"sequenceId {element.sequence_id} is used by both {_describe(other)} and {_describe(element)}")
        seen[element.sequence_id] = element

    _check_list_order(order.nodes, "nodes")
    _check_list_order(order.edges, "edges")

    path = list(order.elements())
    for index, element in enumerate(path):
        expected = Node if index % 2 == 0 else Edge
        if not isinstance(element, expected):
            raise VdaGraphError(f"{_describe(element)} breaks the node/edge alternation at position {index}")
    if not isinstance(path[-1], Node):
        raise VdaGraphError(f"order {order.order_id!r} ends with {_describe(path[-1])} instead of a node")
    return path


def _check_edges(order: Order, path: list[Node | Edge], known_nodes: set[str]) -> None:
    for edge in order.edges:
        for endpoint in (edge.start_node_id, edge.end_node_id):
            if endpoint not in known_nodes:
                raise VdaGraphError(f"{_describe(edge)} references unknown node {endpoint!r}")

    for index in range(1, len(path), 2):
        edge = path[index]
        start, end = path[index - 1], path[index + 1]
        assert isinstance(edge, Edge) and isinstance(start, Node) and isinstance(end, Node)  # noqa: S101
        if edge.start_node_id != start.node_id or edge.end_node_id != end.node_id:
            raise VdaGraphError(
                f"{_describe(edge)} connects {edge.start_node_id!r} -> {edge.end_node_id!r} "
                f"but sits between {start.node_id!r} and {end.node_id!r}"
            )


def _check_release(path: list[Node | Edge]) -> None:
    horizon_start: Node | Edge | None = None
    for element in path:
        if not element.released:
            horizon_start = horizon_start or element
        elif horizon_start is not None:
            raise VdaGraphError(f"released {_describe(element)} follows unreleased {_describe(horizon_start)}")


def _check_update(order: Order, prior: Order) -> None:
    if order.order_update_id < prior.order_update_id:
        raise VdaGraphError(
            f"order {order.order_id!r}: orderUpdateId {order.order_update_id} is lower than the accepted {prior.order_update_id}"
        )
    if order.order_update_id == prior.order_update_id:
        if not order.same_graph(prior):
            raise VdaGraphError(
                f"order {order.order_id!r}: orderUpdateId {order.order_update_id} was already used for different content"
            )
        return

    first_sequence_id = next(order.elements()).sequence_id
    new_by_sequence = {element.sequence_id: element for element in order.elements()}
    prior_base = prior.base

    if prior_base and first_sequence_id > prior_base[-1].sequence_id:
        raise VdaGraphError(
            f"order {order.order_id!r}: update starts at sequenceId {first_sequence_id}, "
            f"past the end of the released base ({_describe(prior_base[-1])})"
        )

    for element in prior_base:
        if element.sequence_id < first_sequence_id:
            continue
        replacement = new_by_sequence.get(element.sequence_id)
        if replacement is None:
            raise VdaGraphError(f"order {order.order_id!r}: released {_describe(element)} was removed")
        if _kind(replacement) != _kind(element) or _element_id(replacement) != _element_id(element):
            raise VdaGraphError(f"order {order.order_id!r}: released {_describe(element)} was replaced by {_describe(replacement)}")
        if not replacement.released:
            raise VdaGraphError(f"order {order.order_id!r}: released {_describe(element)} became unreleased")


def validate_order(order: Order, prior: Order | None = None) -> None:
    """Check the graph invariants of *order*.

    *prior* is the last accepted order for the same vehicle.  It is only
    taken into account when it has the same ``order_id``; edges may then
    also reference nodes known from it, and its released base must
    survive the update.  Every edge still has to connect the nodes
    directly before and after it in *order*, so that adjacency check
    decides which endpoints are accepted.

    Raises :class:`~pyvda5050.exceptions.VdaGraphError` on the first
    violation found.
    """
    path = _check_sequence(order)

    same_order = prior if prior is not None and prior.order_id == order.order_id else None
    known_nodes = {node.node_id for node in order.nodes}
    if same_order is not None:
        known_nodes.update(node.node_id for node in same_order.nodes)

    _check_edges(order, path, known_nodes)
    _check_release(path)

    if same_order is not None:
        _check_update(order, same_order)


def is_repeated_update(order: Order, prior: Order | None) -> bool:
    """Whether *order* repeats the already accepted *prior* revision.

    A repeat needs no re-planning; it usually is a retransmission with
    a new header.
    """
    return prior is not None and order.same_graph(prior)
