"""Geometry and kinematics objects shared by several message kinds."""

from __future__ import annotations

from pydantic import Field

from pyvda5050.models._base import VdaBaseModel


class AgvPosition(VdaBaseModel):
    """Current position of the AGV on the map."""

    x: float
    y: float
    theta: float
    """Orientation of the AGV, range [-pi..pi]."""
    map_id: str
    map_description: str | None = None
    position_initialized: bool
    localization_score: float | None = Field(default=None, ge=0.0, le=1.0)
    """0.0: position unknown, 1.0: position known."""
    deviation_range: float | None = None
    """Deviation range of the position in meters."""


class BoundingBoxReference(VdaBaseModel):
    """Reference point of a load's bounding box in vehicle coordinates.

    The point is in the middle of the load footprint, so ``length/2``
    and ``width/2``.
    """

    x: float
    y: float
    z: float
    theta: float | None = None


class ControlPoint(VdaBaseModel):
    """NURBS control point in world coordinates."""

    x: float
    y: float
    weight: float | None = Field(default=None, gt=0.0)
    """Pull of this point on the curve; 1.0 when not defined."""
    orientation: float | None = None


class LoadDimensions(VdaBaseModel):
    """Dimensions of a load's bounding box in meters."""

    length: float
    width: float
    height: float | None = None


class NodePosition(VdaBaseModel):
    """Position of a node on a map in world coordinates."""

    x: float
    y: float
    theta: float | None = None
    allowed_deviation_xy: float | None = Field(default=None, alias="allowedDeviationXY")
    """Radius in meters within which the node counts as traversed."""
    allowed_deviation_theta: float | None = None
    map_id: str
    map_description: str | None = None


class Trajectory(VdaBaseModel):
    """Edge trajectory as a NURBS curve.

    ``knot_vector`` has ``len(control_points) + degree + 1`` entries.
    """

    degree: int = Field(default=1, ge=1)
    knot_vector: list[float]
    control_points: list[ControlPoint]

    @property
    def is_consistent(self) -> bool:
        return len(self.knot_vector) == len(self.control_points) + self.degree + 1


class Velocity(VdaBaseModel):
    """AGV velocity in vehicle coordinates."""

    vx: float | None = None
    vy: float | None = None
    omega: float | None = None
