"""Step orchestrator for coordinating the conveyor step phases."""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from stop_and_go.models import ConveyorConfig, Part, StepOutput
from stop_and_go.stepping.phases import (
    PHASE_REGISTRY,
    Phase,
    PhaseConfig,
    StepContext,
)


@dataclass
class StepConfig:
    """Configuration for a conveyor step.

    Defines the sequence of phases and their parameters.
    """

    name: str
    description: str = ""
    phases: List[PhaseConfig] = field(default_factory=list)


class StepOrchestrator:
    """Orchestrates phase execution for one conveyor step.

    All facts are computed before any output is built, so callers only
    ever see a complete step result.
    """

    def __init__(self, step_config: StepConfig):
        """Initialize orchestrator with step configuration.

        Args:
            step_config: Configuration defining phases to execute
        """
        self.config = step_config
        self._phase_instances: Dict[str, Phase] = {}

        # Instantiate phase handlers
        for phase_config in step_config.phases:
            handler_name = phase_config.handler
            if handler_name not in PHASE_REGISTRY:
                raise ValueError(f"Unknown phase handler: {handler_name}")
            phase_class = PHASE_REGISTRY[handler_name]
            self._phase_instances[phase_config.name] = phase_class()

    def run_step(
        self,
        conveyor: ConveyorConfig,
        parts: Sequence[Part],
        delta_time_ms: float,
    ) -> StepOutput:
        """Run one simulation step through all phases.

        Args:
            conveyor: Conveyor settings and stopper inputs
            parts: Ordered parts, head (oldest) first
            delta_time_ms: Elapsed simulation time since the previous step

        Returns:
            StepOutput with surviving parts and stopper sensors. A halted
            conveyor or an empty belt returns the parts unchanged with
            ``sensors=None``.
        """
        if conveyor.is_idle or not parts:
            return StepOutput(parts=list(parts))

        context = StepContext(parts=list(parts), delta_time_ms=delta_time_ms)

        for phase_config in self.config.phases:
            phase = self._phase_instances.get(phase_config.name)
            if phase is None:
                continue
            result = phase.execute(conveyor, context)
            if not result.should_continue:
                break

        surviving = context.surviving if context.surviving is not None else list(parts)
        return StepOutput(
            parts=surviving,
            sensors=context.sensors,
            removed=context.removed,
        )


def create_default_step() -> StepConfig:
    """Create the default classify/move/sense step configuration."""
    return StepConfig(
        name="stop_and_go",
        description="Classify parts, move and reap them, update stopper sensors",
        phases=[
            PhaseConfig(name="classify", handler="ClassifyPhase"),
            PhaseConfig(name="move", handler="MovePhase"),
            PhaseConfig(name="sense", handler="SensePhase"),
        ],
    )


# Singleton default step
DEFAULT_STEP = create_default_step()


def step(
    conveyor: ConveyorConfig,
    parts: Sequence[Part],
    delta_time_ms: float,
) -> StepOutput:
    """Run one step with the default phases.

    Pure with respect to its arguments: ``parts`` and the parts in it are
    never modified.
    """
    return StepOrchestrator(DEFAULT_STEP).run_step(conveyor, parts, delta_time_ms)
