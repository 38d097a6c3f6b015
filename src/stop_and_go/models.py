"""Pydantic schemas for conveyor simulation models."""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, Field

from stop_and_go.geometry import BoxGeometry, Bounds, ReferenceFrame, Vector3, box_bounds

DEFAULT_STOPPER_TOLERANCE = 0.001
DEFAULT_TIME_SCALE_MS = 1000.0  # simulation time is reported in ms, speed is per second


class StopperConfigError(ValueError):
    """Stopper positions/commands do not match the declared stopper count."""


class Part(BaseModel):
    """A physical item carried by the conveyor."""

    uid: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    name: str = "part"
    location: Vector3 = Field(default_factory=Vector3)  # conveyor-local
    geometry: Optional[BoxGeometry] = None

    @property
    def position(self) -> float:
        """Distance from the conveyor origin along the travel axis."""
        return self.location.x

    @property
    def bounds(self) -> Optional[Bounds]:
        return box_bounds(self.location, self.geometry)

    def advanced(self, distance: float) -> "Part":
        """Return a copy moved ``distance`` along the travel axis."""
        moved = self.location.model_copy(update={"x": self.location.x + distance})
        return self.model_copy(update={"location": moved})


class ConveyorConfig(BaseModel):
    """Current conveyor settings and stopper inputs read by a simulation step."""

    speed: float = 0.0  # distance per second
    length: float = 0.0  # travel distance after which parts are removed
    stopper_count: int = Field(default=0, ge=0)
    stopper_positions: List[float] = Field(default_factory=list)
    stopper_commands: List[bool] = Field(default_factory=list)
    frame: ReferenceFrame = Field(default_factory=ReferenceFrame)

    stopper_tolerance: float = DEFAULT_STOPPER_TOLERANCE
    time_scale_ms: float = DEFAULT_TIME_SCALE_MS

    @property
    def is_idle(self) -> bool:
        """A halted or zero-length conveyor never advances or removes parts."""
        return self.speed == 0 or self.length == 0

    def travel_distance(self, delta_time_ms: float) -> float:
        """Distance a free part moves during ``delta_time_ms``."""
        return self.speed * (delta_time_ms / self.time_scale_ms)

    def check_stoppers(self) -> None:
        """Raise StopperConfigError if the stopper sequences are inconsistent."""
        n = self.stopper_count
        if len(self.stopper_positions) != n or len(self.stopper_commands) != n:
            raise StopperConfigError(
                f"Expected {n} stopper positions and commands, got "
                f"{len(self.stopper_positions)} positions and "
                f"{len(self.stopper_commands)} commands"
            )


@dataclass
class Classification:
    """Per-part facts computed once per step."""

    stopper_index: int = 0  # 1-based, 0 = not held
    colliding: bool = False  # touches its predecessor
    past_length: bool = False

    @property
    def blocked(self) -> bool:
        return self.colliding or self.stopper_index > 0


@dataclass
class StepOutput:
    """Result of one simulation step."""

    parts: List[Part] = field(default_factory=list)
    sensors: Optional[List[bool]] = None  # None = step skipped, keep previous
    removed: List[str] = field(default_factory=list)  # uids of deleted parts

    @property
    def skipped(self) -> bool:
        return self.sensors is None
