"""Order message: the path graph a vehicle is commanded to follow.

Nodes and edges are kept as flat lists.  ``sequence_id`` runs across
both lists and alone defines traversal order, so a receiver can check
an order without building a graph index first (see
:mod:`pyvda5050.validation.order`).
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import ClassVar

from pydantic import Field

from pyvda5050.models._base import UInt64, VdaBaseModel, VdaEnum
from pyvda5050.models.action import Action
from pyvda5050.models.common import NodePosition, Trajectory
from pyvda5050.models.header import MessageKind, VdaMessage


class OrientationType(VdaEnum):
    """How ``Edge.orientation`` is interpreted."""

    GLOBAL = "GLOBAL"
    """Relative to the project specific map coordinate system."""
    TANGENTIAL = "TANGENTIAL"
    """Tangential to the edge."""


class Node(VdaBaseModel):
    """A node of the order graph.

    The same ``node_id`` may appear more than once in one order (a node
    passed twice); ``sequence_id`` tells the occurrences apart.
    """

    node_id: str
    sequence_id: UInt64
    node_description: str | None = None
    released: bool
    """``True``: part of the base.  ``False``: part of the horizon."""
    node_position: NodePosition | None = None
    actions: list[Action] = Field(default_factory=list)
    """Executed on the node in list order."""


class Edge(VdaBaseModel):
    """A directed connection between two nodes of the order graph."""

    edge_id: str
    sequence_id: UInt64
    edge_description: str | None = None
    released: bool
    start_node_id: str
    end_node_id: str
    max_speed: float | None = None
    """Permitted maximum speed on the edge in m/s."""
    max_height: float | None = None
    min_height: float | None = None
    orientation: float | None = None
    orientation_type: OrientationType | None = None
    direction: str | None = None
    """Junction direction for line-guided vehicles (``left``, ``433MHz``...)."""
    rotation_allowed: bool | None = None
    max_rotation_speed: float | None = None
    length: float | None = None
    trajectory: Trajectory | None = None
    actions: list[Action] = Field(default_factory=list)


class Order(VdaMessage):
    """An order sent from master control to the vehicle."""

    KIND: ClassVar[MessageKind] = MessageKind.ORDER

    order_id: str
    order_update_id: UInt64
    """Unique per ``order_id``; grows with every accepted revision."""
    zone_set_id: str | None = None
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    def elements(self) -> Iterator[Node | Edge]:
        """Yield nodes and edges merged in ``sequence_id`` order."""
        yield from sorted([*self.nodes, *self.edges], key=lambda element: element.sequence_id)

    @property
    def base(self) -> list[Node | Edge]:
        """Released elements, in sequence order."""
        return [element for element in self.elements() if element.released]

    @property
    def horizon(self) -> list[Node | Edge]:
        """Unreleased elements, in sequence order."""
        return [element for element in self.elements() if not element.released]

    @property
    def actions(self) -> list[Action]:
        """All node and edge actions in sequence order."""
        return [action for element in self.elements() for action in element.actions]

    def same_graph(self, other: Order) -> bool:
        """Whether *other* carries the same order revision and graph content.

        Header fields are ignored: a retransmission has a new header.
        """
        return (
            self.order_id == other.order_id
            and self.order_update_id == other.order_update_id
            and self.zone_set_id == other.zone_set_id
            and self.nodes == other.nodes
            and self.edges == other.edges
        )
