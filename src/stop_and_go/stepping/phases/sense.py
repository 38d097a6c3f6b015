"""Sense phase: one occupancy flag per stopper."""

from typing import TYPE_CHECKING

from stop_and_go.stepping.phases.base import Phase, PhaseResult, StepContext

if TYPE_CHECKING:
    from stop_and_go.models import ConveyorConfig


class SensePhase(Phase):
    """Report which stoppers are holding at least one part."""

    name = "sense"

    def execute(
        self,
        conveyor: "ConveyorConfig",
        context: StepContext,
    ) -> PhaseResult:
        occupied = {c.stopper_index for c in context.classifications}
        occupied.discard(0)
        context.sensors = [
            (k + 1) in occupied for k in range(conveyor.stopper_count)
        ]
        return PhaseResult()
