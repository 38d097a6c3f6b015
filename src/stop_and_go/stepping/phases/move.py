"""Move phase: advance free parts and reap parts past the conveyor end."""

import logging
from typing import TYPE_CHECKING

from stop_and_go.stepping.phases.base import Phase, PhaseResult, StepContext

if TYPE_CHECKING:
    from stop_and_go.models import ConveyorConfig

logger = logging.getLogger(__name__)


class MovePhase(Phase):
    """Apply the classification to the part sequence.

    Decisions come from the pre-step classification only, so a part that
    moves this step does not release its successor until the next step.
    Parts past the conveyor length are dropped whether blocked or not.
    The surviving parts keep their relative order.
    """

    name = "move"

    def execute(
        self,
        conveyor: "ConveyorConfig",
        context: StepContext,
    ) -> PhaseResult:
        """Build ``context.surviving`` from the part snapshot."""
        distance = conveyor.travel_distance(context.delta_time_ms)

        surviving = []
        removed = []
        for part, facts in zip(context.parts, context.classifications):
            if facts.past_length:
                removed.append(part.uid)
                continue
            surviving.append(part if facts.blocked else part.advanced(distance))

        if removed:
            logger.debug("Removed %d part(s) past length %s", len(removed), conveyor.length)

        context.surviving = surviving
        context.removed = removed
        return PhaseResult()
