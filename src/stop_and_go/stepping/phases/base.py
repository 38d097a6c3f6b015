"""Base class for conveyor step phases."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from stop_and_go.models import Classification, ConveyorConfig, Part


@dataclass
class PhaseConfig:
    """Configuration for a step phase."""

    name: str
    handler: str  # Handler class name


@dataclass
class PhaseResult:
    """Result from executing a phase."""

    should_continue: bool = True  # False to abort the step


@dataclass
class StepContext:
    """Shared context passed between phases during one step.

    The input parts are a read-only snapshot; phases write their results
    into the context instead of mutating the snapshot.
    """

    parts: List["Part"]
    delta_time_ms: float = 0.0

    # Accumulated results during the step
    classifications: List["Classification"] = field(default_factory=list)
    surviving: Optional[List["Part"]] = None
    removed: List[str] = field(default_factory=list)
    sensors: Optional[List[bool]] = None


class Phase(ABC):
    """Base class for conveyor step phases.

    Each phase implements one part of the step:
    - classify: Compute stopper, collision and past-length facts per part
    - move: Advance free parts and drop parts past the conveyor length
    - sense: Derive one occupancy flag per stopper
    """

    name: str  # Phase name for logging

    @abstractmethod
    def execute(
        self,
        conveyor: "ConveyorConfig",
        context: StepContext,
    ) -> PhaseResult:
        """Execute the phase.

        Args:
            conveyor: Conveyor settings and stopper inputs for this step
            context: Shared context holding the part snapshot and results

        Returns:
            PhaseResult telling the orchestrator whether to continue
        """
        pass
