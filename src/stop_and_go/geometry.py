"""Geometry primitives and intersection tests in the conveyor frame."""

import math
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field


class Vector3(BaseModel):
    """A 3-D point or extent. X is the travel axis, Y and Z are transverse."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_list(cls, values) -> "Vector3":
        """Build from a YAML-style [x, y, z] list (missing entries are 0)."""
        padded = list(values or []) + [0.0, 0.0, 0.0]
        return cls(x=padded[0], y=padded[1], z=padded[2])

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.z))


class ReferenceFrame(BaseModel):
    """Reference transform of a conveyor.

    The local X axis is the travel axis. The frame is placed in the world
    by a rotation of ``yaw_deg`` about world Z followed by a translation
    to ``origin``.
    """

    origin: Vector3 = Field(default_factory=Vector3)
    yaw_deg: float = 0.0

    def to_world(self, local: Vector3) -> Vector3:
        """Convert a conveyor-local point to world coordinates."""
        c, s = self._cos_sin()
        return Vector3(
            x=self.origin.x + c * local.x - s * local.y,
            y=self.origin.y + s * local.x + c * local.y,
            z=self.origin.z + local.z,
        )

    def _cos_sin(self) -> tuple[float, float]:
        rad = math.radians(self.yaw_deg)
        return math.cos(rad), math.sin(rad)


class BoxGeometry(BaseModel):
    """Axis-aligned box shape of a part, centred at ``location + offset``."""

    size: Vector3
    offset: Vector3 = Field(default_factory=Vector3)

    @property
    def is_empty(self) -> bool:
        """True when the box has no usable volume."""
        if not (self.size.is_finite() and self.offset.is_finite()):
            return True
        return min(self.size.x, self.size.y, self.size.z) <= 0.0


@dataclass(frozen=True)
class Bounds:
    """Min/max corners of an axis-aligned box."""

    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float


def box_bounds(location: Vector3, geometry: Optional[BoxGeometry]) -> Optional[Bounds]:
    """Return the bounds of a placed box, or None for missing/degenerate geometry."""
    if geometry is None or geometry.is_empty or not location.is_finite():
        return None
    cx = location.x + geometry.offset.x
    cy = location.y + geometry.offset.y
    cz = location.z + geometry.offset.z
    hx = geometry.size.x / 2.0
    hy = geometry.size.y / 2.0
    hz = geometry.size.z / 2.0
    return Bounds(cx - hx, cy - hy, cz - hz, cx + hx, cy + hy, cz + hz)


def boxes_intersect(a: Optional[Bounds], b: Optional[Bounds]) -> bool:
    """Zero-clearance overlap test. Touching faces count as intersecting."""
    if a is None or b is None:
        return False
    return (
        a.min_x <= b.max_x
        and b.min_x <= a.max_x
        and a.min_y <= b.max_y
        and b.min_y <= a.max_y
        and a.min_z <= b.max_z
        and b.min_z <= a.max_z
    )


def intersects_slab(bounds: Optional[Bounds], center: float, width: float) -> bool:
    """Test a box against a slab perpendicular to the travel axis.

    The slab spans ``[center - width/2, center + width/2]`` along X and is
    unbounded along Y and Z.
    """
    if bounds is None or not math.isfinite(center):
        return False
    half = width / 2.0
    return bounds.min_x <= center + half and center - half <= bounds.max_x
