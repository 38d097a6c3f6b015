"""Conveyor step phases.

Each phase implements a specific part of the simulation step.
"""

from stop_and_go.stepping.phases.base import Phase, PhaseConfig, PhaseResult, StepContext
from stop_and_go.stepping.phases.classify import ClassifyPhase
from stop_and_go.stepping.phases.move import MovePhase
from stop_and_go.stepping.phases.sense import SensePhase

__all__ = [
    # Base classes
    "Phase",
    "PhaseConfig",
    "PhaseResult",
    "StepContext",
    # Phase implementations
    "ClassifyPhase",
    "MovePhase",
    "SensePhase",
]

# Registry of available phase handlers
PHASE_REGISTRY: dict[str, type[Phase]] = {
    "ClassifyPhase": ClassifyPhase,
    "MovePhase": MovePhase,
    "SensePhase": SensePhase,
}


def get_phase_class(handler_name: str) -> type[Phase]:
    """Get phase class by handler name."""
    if handler_name not in PHASE_REGISTRY:
        raise ValueError(f"Unknown phase handler: {handler_name}")
    return PHASE_REGISTRY[handler_name]
