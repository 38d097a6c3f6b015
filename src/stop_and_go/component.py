"""Stop-and-go conveyor component with I/O signals and properties."""

import logging
import re
import uuid
from typing import Dict, List, Optional

from stop_and_go.geometry import Vector3
from stop_and_go.models import ConveyorConfig, Part, StepOutput
from stop_and_go.stepping import DEFAULT_STEP, StepConfig, StepOrchestrator

logger = logging.getLogger(__name__)

STOPPER_SIGNAL = re.compile(r"^Stopper(\d+)(Command|Sensor)$")


class StopAndGoConveyor:
    """A conveyor instance as seen by the host simulation.

    Exposes the host-facing surface around the step algorithm:
    - Inputs: Enable, AddObject, Clear, Stopper<k>Command
    - Outputs: Stopper<k>Sensor
    - Properties: speed, length, stopper count and positions, source part

    Each instance owns its own state; nothing is shared between conveyors.
    """

    def __init__(
        self,
        config: Optional[ConveyorConfig] = None,
        source_part: Optional[Part] = None,
        step_config: Optional[StepConfig] = None,
        name: str = "Conveyor",
    ):
        """Initialize the component.

        Args:
            config: Conveyor settings (speed, length, stoppers, frame)
            source_part: Template cloned on every AddObject pulse
            step_config: Phases to run per step (default: DEFAULT_STEP)
            name: Name used in event records
        """
        self.name = name
        self.config = (
            config.model_copy(deep=True) if config is not None else ConveyorConfig()
        )
        self.config.check_stoppers()
        self.source_part = source_part
        self.orchestrator = StepOrchestrator(step_config or DEFAULT_STEP)

        self.parts: List[Part] = []
        self.sensors: List[bool] = [False] * self.config.stopper_count
        self.signals: Dict[str, int] = {"Enable": 0, "AddObject": 0, "Clear": 0}

        # Counters
        self.parts_spawned = 0
        self.parts_removed = 0

        # Centralized Logs
        self.event_log: List[dict] = []
        self.now = 0.0  # last known simulation time (ms)

    # --- Properties ---

    @property
    def speed(self) -> float:
        return self.config.speed

    @speed.setter
    def speed(self, value: float) -> None:
        self.config.speed = value

    @property
    def length(self) -> float:
        return self.config.length

    @length.setter
    def length(self, value: float) -> None:
        self.config.length = value

    @property
    def stopper_count(self) -> int:
        return self.config.stopper_count

    @property
    def enabled(self) -> bool:
        return self.signals["Enable"] > 0

    def set_stopper_count(self, count: int) -> None:
        """Replace all stoppers with ``count`` fresh ones.

        New stoppers start at position 0.0 with command and sensor low.
        """
        count = max(count, 0)
        for i, high in enumerate(self.sensors):
            if high:
                self._record("sensor_off", f"Stopper{i + 1}Sensor")
        self.config.stopper_count = count
        self.config.stopper_positions = [0.0] * count
        self.config.stopper_commands = [False] * count
        self.sensors = [False] * count
        logger.debug("%s: reconfigured with %d stopper(s)", self.name, count)

    def set_stopper_position(self, index: int, position: float) -> None:
        """Set the position of stopper ``index`` (1-based)."""
        self._check_index(index)
        self.config.stopper_positions[index - 1] = position

    # --- Signals ---

    def get_signal(self, name: str) -> int:
        """Read an input or output signal value."""
        if name in self.signals:
            return self.signals[name]
        match = STOPPER_SIGNAL.match(name)
        if match:
            index = int(match.group(1))
            self._check_index(index, name)
            if match.group(2) == "Command":
                return int(self.config.stopper_commands[index - 1])
            return int(self.sensors[index - 1])
        raise ValueError(f"Unknown signal: {name}")

    def check_input(self, name: str) -> Optional[int]:
        """Validate a writable input signal name.

        Returns the 1-based stopper index for ``Stopper<k>Command``, None for
        the plain inputs. Raises ValueError for anything else, including
        sensor outputs.
        """
        if name in self.signals:
            return None
        match = STOPPER_SIGNAL.match(name)
        if match and match.group(2) == "Command":
            index = int(match.group(1))
            self._check_index(index, name)
            return index
        raise ValueError(f"Unknown signal: {name}")

    def set_signal(self, name: str, value: int) -> None:
        """Write an input signal. AddObject and Clear act on a rising edge."""
        high = int(value) > 0
        index = self.check_input(name)
        if index is not None:
            self.config.stopper_commands[index - 1] = high
            return

        was_high = self.signals[name] > 0
        self.signals[name] = int(value)
        if high and not was_high:
            if name == "AddObject":
                self.add_object()
            elif name == "Clear":
                self.clear()

    def pulse(self, name: str) -> None:
        """Drive a signal high then low."""
        self.set_signal(name, 1)
        self.set_signal(name, 0)

    # --- Object handling ---

    def add_object(self) -> Optional[Part]:
        """Clone the source part onto the conveyor origin, at the tail.

        Returns the new part, or None when no source part is configured.
        """
        if self.source_part is None:
            return None
        part = self.source_part.model_copy(
            update={"uid": str(uuid.uuid4())[:8], "location": Vector3()},
            deep=True,
        )
        self.parts.append(part)
        self.parts_spawned += 1
        self._record("spawn", part.uid)
        return part

    def clear(self) -> None:
        """Remove every part from the conveyor.

        Cleared parts count as removed, so spawned minus removed stays
        equal to the parts on the belt.
        """
        for part in self.parts:
            self.parts_removed += 1
            self._record("remove", part.uid)
        self.parts = []
        self._record("clear", self.name)

    # --- Simulation ---

    def on_simulation_step(self, simulation_time: float, previous_time: float) -> None:
        """Host callback for one simulation tick (times in ms)."""
        self.now = simulation_time
        if self.enabled:
            self.step(simulation_time - previous_time)

    def step(self, delta_time_ms: float) -> StepOutput:
        """Run one step and apply its output to this component."""
        output = self.orchestrator.run_step(self.config, self.parts, delta_time_ms)
        if output.skipped:
            return output

        self.parts = output.parts
        for uid in output.removed:
            self.parts_removed += 1
            self._record("remove", uid)

        for i, (old, new) in enumerate(zip(self.sensors, output.sensors)):
            if old != new:
                self._record("sensor_on" if new else "sensor_off", f"Stopper{i + 1}Sensor")
        self.sensors = list(output.sensors)
        return output

    def world_locations(self) -> List[Vector3]:
        """Part locations in world coordinates, head first."""
        return [self.config.frame.to_world(p.location) for p in self.parts]

    def lead_world_location(self) -> Optional[Vector3]:
        """World location of the head part, or None on an empty belt."""
        if not self.parts:
            return None
        return self.config.frame.to_world(self.parts[0].location)

    # --- Helpers ---

    def _check_index(self, index: int, signal: Optional[str] = None) -> None:
        if not 1 <= index <= self.config.stopper_count:
            if signal:
                raise ValueError(f"Unknown signal: {signal}")
            raise ValueError(
                f"Stopper index {index} out of range 1..{self.config.stopper_count}"
            )

    def _record(self, event_type: str, subject: str) -> None:
        self.event_log.append(
            {
                "timestamp": self.now,
                "conveyor": self.name,
                "event_type": event_type,
                "subject": subject,
            }
        )
