"""Stop-and-go conveyor simulation."""

from stop_and_go.cli import configure
from stop_and_go.component import StopAndGoConveyor
from stop_and_go.engine import SimulationEngine
from stop_and_go.geometry import BoxGeometry, ReferenceFrame, Vector3
from stop_and_go.loader import (
    ConfigLoader,
    ConveyorSpec,
    DefaultsConfig,
    ResolvedConfig,
    RunConfig,
    SignalEvent,
    StopperSpec,
)
from stop_and_go.models import (
    Classification,
    ConveyorConfig,
    Part,
    StepOutput,
    StopperConfigError,
)
from stop_and_go.run import run_simulation
from stop_and_go.stepping import (
    DEFAULT_STEP,
    ClassifyPhase,
    MovePhase,
    Phase,
    PhaseConfig,
    PhaseResult,
    SensePhase,
    StepConfig,
    StepContext,
    StepOrchestrator,
    step,
)
from stop_and_go.storage import connect as db_connect
from stop_and_go.storage import get_db_path, save_results

__all__ = [
    # Geometry
    "Vector3",
    "ReferenceFrame",
    "BoxGeometry",
    # Models
    "Part",
    "ConveyorConfig",
    "Classification",
    "StepOutput",
    "StopperConfigError",
    # Config
    "ConfigLoader",
    "DefaultsConfig",
    "ConveyorSpec",
    "StopperSpec",
    "RunConfig",
    "SignalEvent",
    "ResolvedConfig",
    # Stepping
    "step",
    "StepConfig",
    "StepOrchestrator",
    "DEFAULT_STEP",
    "Phase",
    "PhaseConfig",
    "PhaseResult",
    "StepContext",
    "ClassifyPhase",
    "MovePhase",
    "SensePhase",
    # Component and engine
    "StopAndGoConveyor",
    "SimulationEngine",
    # CLI
    "configure",
    # Entry point
    "run_simulation",
    # Storage
    "save_results",
    "get_db_path",
    "db_connect",
]
