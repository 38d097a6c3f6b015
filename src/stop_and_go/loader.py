"""YAML configuration loader with name-based resolution."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from stop_and_go.component import StopAndGoConveyor
from stop_and_go.geometry import BoxGeometry, ReferenceFrame, Vector3
from stop_and_go.models import (
    DEFAULT_STOPPER_TOLERANCE,
    DEFAULT_TIME_SCALE_MS,
    ConveyorConfig,
    Part,
)


@dataclass
class DefaultsConfig:
    """Global defaults loaded from config/defaults.yaml."""

    conveyor: Dict[str, Any] = field(default_factory=dict)
    simulation: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StopperSpec:
    """One stopper as declared in a conveyor file."""

    position: float = 0.0
    command: bool = False


@dataclass
class ConveyorSpec:
    """Conveyor configuration file contents."""

    name: str
    speed: float = 0.0
    length: float = 0.0
    stoppers: List[StopperSpec] = field(default_factory=list)
    frame: ReferenceFrame = field(default_factory=ReferenceFrame)
    stopper_tolerance: float = DEFAULT_STOPPER_TOLERANCE
    time_scale_ms: float = DEFAULT_TIME_SCALE_MS

    def to_config(self) -> ConveyorConfig:
        """Build the ConveyorConfig read by the step."""
        return ConveyorConfig(
            speed=self.speed,
            length=self.length,
            stopper_count=len(self.stoppers),
            stopper_positions=[s.position for s in self.stoppers],
            stopper_commands=[s.command for s in self.stoppers],
            frame=self.frame,
            stopper_tolerance=self.stopper_tolerance,
            time_scale_ms=self.time_scale_ms,
        )


@dataclass
class SignalEvent:
    """A scheduled input signal write."""

    at_ms: float
    signal: str
    value: int = 1


@dataclass
class RunConfig:
    """Run-level configuration."""

    name: str
    conveyor: str
    part: Optional[str] = None  # Reference to config/parts/*.yaml
    duration_sec: float = 10.0
    step_ms: float = 10.0
    telemetry_interval_ms: float = 100.0
    spawn_interval_ms: Optional[float] = None  # None = no automatic spawning
    signals: List[SignalEvent] = field(default_factory=list)
    start_time: Optional[datetime] = None  # None = use datetime.now()

    @property
    def duration_ms(self) -> float:
        return self.duration_sec * 1000.0


@dataclass
class ResolvedConfig:
    """Fully resolved configuration ready for simulation."""

    run: RunConfig
    conveyor: ConveyorSpec
    part: Optional[Part] = None


class ConfigLoader:
    """Loads and resolves YAML configuration files."""

    def __init__(self, config_dir: Path | str = "config"):
        self.config_dir = Path(config_dir)
        self.defaults = self.load_defaults()

    def load_defaults(self) -> DefaultsConfig:
        """Load global defaults from config/defaults.yaml."""
        path = self.config_dir / "defaults.yaml"
        if not path.exists():
            return DefaultsConfig()
        data = self._load_yaml(path)
        return DefaultsConfig(
            conveyor=data.get("conveyor", {}),
            simulation=data.get("simulation", {}),
        )

    def load_conveyor(self, name: str) -> ConveyorSpec:
        """Load a conveyor configuration by name."""
        path = self.config_dir / "conveyors" / f"{name}.yaml"
        data = self._load_yaml(path)
        conv_defaults = self.defaults.conveyor

        stoppers = [
            StopperSpec(
                position=float(s.get("position", 0.0)),
                command=bool(s.get("command", False)),
            )
            for s in data.get("stoppers", []) or []
        ]

        frame_data = data.get("frame") or {}
        frame = ReferenceFrame(
            origin=Vector3.from_list(frame_data.get("origin")),
            yaw_deg=frame_data.get("yaw_deg", 0.0),
        )

        return ConveyorSpec(
            name=data["name"],
            speed=data.get("speed", conv_defaults.get("speed", 0.0)),
            length=data.get("length", conv_defaults.get("length", 0.0)),
            stoppers=stoppers,
            frame=frame,
            stopper_tolerance=data.get(
                "stopper_tolerance",
                conv_defaults.get("stopper_tolerance", DEFAULT_STOPPER_TOLERANCE),
            ),
            time_scale_ms=data.get(
                "time_scale_ms",
                conv_defaults.get("time_scale_ms", DEFAULT_TIME_SCALE_MS),
            ),
        )

    def load_part(self, name: str) -> Part:
        """Load a part template by name."""
        path = self.config_dir / "parts" / f"{name}.yaml"
        data = self._load_yaml(path)
        geometry = None
        if data.get("size"):
            geometry = BoxGeometry(
                size=Vector3.from_list(data["size"]),
                offset=Vector3.from_list(data.get("offset")),
            )
        return Part(name=data["name"], geometry=geometry)

    def load_run(self, name: str) -> RunConfig:
        """Load a run configuration by name."""
        path = self.config_dir / "runs" / f"{name}.yaml"
        data = self._load_yaml(path)

        # Parse start_time if provided
        start_time = None
        if data.get("start_time"):
            start_time = datetime.fromisoformat(str(data["start_time"]))

        signals = [
            SignalEvent(
                at_ms=float(s["at_ms"]),
                signal=s["signal"],
                value=int(s.get("value", 1)),
            )
            for s in data.get("signals", []) or []
        ]

        # Use defaults from defaults.yaml
        sim_defaults = self.defaults.simulation
        return RunConfig(
            name=data["name"],
            conveyor=data["conveyor"],
            part=data.get("part"),
            duration_sec=data.get(
                "duration_sec", sim_defaults.get("duration_sec", 10.0)
            ),
            step_ms=data.get("step_ms", sim_defaults.get("step_ms", 10.0)),
            telemetry_interval_ms=data.get(
                "telemetry_interval_ms",
                sim_defaults.get("telemetry_interval_ms", 100.0),
            ),
            spawn_interval_ms=data.get(
                "spawn_interval_ms", sim_defaults.get("spawn_interval_ms")
            ),
            signals=sorted(signals, key=lambda s: s.at_ms),
            start_time=start_time,
        )

    def resolve_run(self, run_name: str) -> ResolvedConfig:
        """Fully resolve a run config into all its components."""
        run = self.load_run(run_name)
        conveyor = self.load_conveyor(run.conveyor)

        # Load part template if specified
        part = None
        if run.part:
            part = self.load_part(run.part)

        return ResolvedConfig(run=run, conveyor=conveyor, part=part)

    def build_component(self, resolved: ResolvedConfig) -> StopAndGoConveyor:
        """Build the conveyor component from resolved configuration."""
        return StopAndGoConveyor(
            config=resolved.conveyor.to_config(),
            source_part=resolved.part,
            name=resolved.conveyor.name,
        )

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            return yaml.safe_load(f) or {}
