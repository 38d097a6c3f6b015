"""Conveyor stepping with configurable phases.

A step runs classify, move and sense in order over a snapshot of the
conveyor and its parts.
"""

from stop_and_go.stepping.orchestrator import (
    DEFAULT_STEP,
    StepConfig,
    StepOrchestrator,
    create_default_step,
    step,
)
from stop_and_go.stepping.phases import (
    PHASE_REGISTRY,
    ClassifyPhase,
    MovePhase,
    Phase,
    PhaseConfig,
    PhaseResult,
    SensePhase,
    StepContext,
    get_phase_class,
)

__all__ = [
    # Orchestrator
    "StepOrchestrator",
    "StepConfig",
    "DEFAULT_STEP",
    "create_default_step",
    "step",
    # Phase base
    "Phase",
    "PhaseConfig",
    "PhaseResult",
    "StepContext",
    # Phase implementations
    "ClassifyPhase",
    "MovePhase",
    "SensePhase",
    # Registry
    "PHASE_REGISTRY",
    "get_phase_class",
]
