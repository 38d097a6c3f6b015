"""Classify phase: per-part stopper, collision and past-length facts."""

from typing import TYPE_CHECKING, Optional

from stop_and_go.geometry import Bounds, boxes_intersect, intersects_slab
from stop_and_go.models import Classification
from stop_and_go.stepping.phases.base import Phase, PhaseResult, StepContext

if TYPE_CHECKING:
    from stop_and_go.models import ConveyorConfig


class ClassifyPhase(Phase):
    """Classify every part against the stoppers and its predecessor.

    For each part, in index order:
    1. Stopper: the last commanded stopper whose slab the part touches
    2. Collision: overlap with the immediately preceding part
    3. Past length: position strictly greater than the conveyor length

    Read-only: nothing in the snapshot is modified.
    """

    name = "classify"

    def execute(
        self,
        conveyor: "ConveyorConfig",
        context: StepContext,
    ) -> PhaseResult:
        """Fill ``context.classifications`` with one entry per part."""
        conveyor.check_stoppers()

        classifications = []
        previous: Optional[Bounds] = None
        for i, part in enumerate(context.parts):
            bounds = part.bounds
            classifications.append(
                Classification(
                    stopper_index=self._stopper_at(conveyor, bounds),
                    colliding=i > 0 and boxes_intersect(previous, bounds),
                    past_length=part.position > conveyor.length,
                )
            )
            previous = bounds

        context.classifications = classifications
        return PhaseResult()

    def _stopper_at(self, conveyor: "ConveyorConfig", bounds: Optional[Bounds]) -> int:
        """Return the 1-based index of the gating stopper, or 0."""
        index = 0
        for k in range(conveyor.stopper_count):
            if conveyor.stopper_commands[k] and intersects_slab(
                bounds, conveyor.stopper_positions[k], conveyor.stopper_tolerance
            ):
                index = k + 1  # later stopper wins
        return index
