"""SimPy host loop for the stop-and-go conveyor."""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd
import simpy

from stop_and_go.component import StopAndGoConveyor
from stop_and_go.loader import ConfigLoader, ResolvedConfig, SignalEvent

logger = logging.getLogger(__name__)


class SimulationEngine:
    """Simulation engine that runs a conveyor from resolved YAML configuration.

    SimPy time is measured in milliseconds, matching the step callback.
    """

    def __init__(
        self,
        config_dir: str = "config",
        save_to_db: bool = True,
        db_path: Optional[Path | str] = None,
    ):
        """Initialize the simulation engine.

        Args:
            config_dir: Path to configuration directory
            save_to_db: If True, save results to DuckDB (default: True)
            db_path: Custom path for DuckDB file (default: ./stop_and_go_results.duckdb)
        """
        self.loader = ConfigLoader(config_dir)
        self.save_to_db = save_to_db
        self.db_path = Path(db_path) if db_path else None

    def run(self, run_name: str) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Run simulation by run config name and return (telemetry_df, events_df)."""
        resolved = self.loader.resolve_run(run_name)
        return self.run_resolved(resolved)

    def run_resolved(
        self, resolved: ResolvedConfig
    ) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Run simulation from a fully resolved configuration."""
        run = resolved.run

        # 1. Determine start time (config or now)
        start_time = run.start_time or datetime.now()

        # 2. Create SimPy environment and the conveyor
        env = simpy.Environment()
        conveyor = self.loader.build_component(resolved)

        # 3. Start host processes
        env.process(self._signal_process(env, conveyor, run.signals))
        if run.spawn_interval_ms:
            env.process(self._spawn_process(env, conveyor, run.spawn_interval_ms))
        env.process(self._step_process(env, conveyor, run.step_ms))

        telemetry_data: List[dict] = []
        env.process(
            self._monitor_process(
                env,
                conveyor,
                telemetry_data,
                run.telemetry_interval_ms,
                start_time,
            )
        )

        # 4. Run simulation
        print(f"Starting Simulation: {run.name} ({run.duration_sec} s)...")
        env.run(until=run.duration_ms)
        logger.info(
            "%s finished: %d spawned, %d removed, %d on belt",
            run.name,
            conveyor.parts_spawned,
            conveyor.parts_removed,
            len(conveyor.parts),
        )

        # 5. Compile results
        df_ts, df_ev = self._compile_results(conveyor, telemetry_data, start_time)

        # 6. Save to DuckDB (if enabled)
        if self.save_to_db:
            from stop_and_go.storage import save_results

            run_id = save_results(resolved, df_ts, df_ev, self.db_path)
            print(f"Results saved to database (run_id: {run_id})")

        return df_ts, df_ev

    def _step_process(
        self,
        env: simpy.Environment,
        conveyor: StopAndGoConveyor,
        step_ms: float,
    ):
        """Tick the conveyor every ``step_ms``."""
        previous = env.now
        while True:
            yield env.timeout(step_ms)
            conveyor.on_simulation_step(env.now, previous)
            previous = env.now

    def _signal_process(
        self,
        env: simpy.Environment,
        conveyor: StopAndGoConveyor,
        signals: List[SignalEvent],
    ):
        """Apply scheduled signal writes at their times."""
        for event in signals:
            if event.at_ms > env.now:
                yield env.timeout(event.at_ms - env.now)
            conveyor.now = env.now
            logger.debug("t=%.1f ms: %s <- %d", env.now, event.signal, event.value)
            conveyor.set_signal(event.signal, event.value)

    def _spawn_process(
        self,
        env: simpy.Environment,
        conveyor: StopAndGoConveyor,
        interval_ms: float,
    ):
        """Pulse AddObject every ``interval_ms``, starting at t=0."""
        while True:
            conveyor.now = env.now
            conveyor.pulse("AddObject")
            yield env.timeout(interval_ms)

    def _monitor_process(
        self,
        env: simpy.Environment,
        conveyor: StopAndGoConveyor,
        telemetry_data: List[dict],
        interval: float = 100.0,
        start_time: Optional[datetime] = None,
    ):
        """Capture telemetry at regular intervals (incremental counts per interval)."""
        # Track previous values for delta calculation
        prev = {"spawned": 0, "removed": 0}

        while True:
            snapshot = {
                "time_ms": env.now,
                "datetime": (
                    start_time + timedelta(milliseconds=env.now) if start_time else None
                ),
                "parts_on_belt": len(conveyor.parts),
                "parts_spawned": conveyor.parts_spawned - prev["spawned"],
                "parts_removed": conveyor.parts_removed - prev["removed"],
                "lead_position": (
                    conveyor.parts[0].position if conveyor.parts else None
                ),
            }
            lead_world = conveyor.lead_world_location()
            snapshot["lead_world_x"] = lead_world.x if lead_world else None
            snapshot["lead_world_y"] = lead_world.y if lead_world else None
            snapshot["lead_world_z"] = lead_world.z if lead_world else None
            prev["spawned"] = conveyor.parts_spawned
            prev["removed"] = conveyor.parts_removed

            # Stopper I/O (current values, not deltas)
            for k in range(1, conveyor.stopper_count + 1):
                snapshot[f"stopper{k}_command"] = conveyor.get_signal(f"Stopper{k}Command")
                snapshot[f"stopper{k}_sensor"] = conveyor.get_signal(f"Stopper{k}Sensor")

            telemetry_data.append(snapshot)
            yield env.timeout(interval)

    def _compile_results(
        self,
        conveyor: StopAndGoConveyor,
        telemetry_data: List[dict],
        start_time: Optional[datetime] = None,
    ) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Compile DataFrames from simulation data."""
        # 1. Telemetry (Time-Series) - datetime already embedded
        df_telemetry = pd.DataFrame(telemetry_data)

        # Reorder columns to put datetime first if present
        if "datetime" in df_telemetry.columns:
            cols = ["datetime", "time_ms"] + [
                c for c in df_telemetry.columns if c not in ["datetime", "time_ms"]
            ]
            df_telemetry = df_telemetry[cols]

        # 2. Events (spawns, removals, sensor edges)
        df_events = pd.DataFrame(
            conveyor.event_log,
            columns=["timestamp", "conveyor", "event_type", "subject"],
        )

        # Add datetime to events
        if start_time and not df_events.empty:
            df_events["datetime"] = df_events["timestamp"].apply(
                lambda ms: start_time + timedelta(milliseconds=ms)
            )
            cols = ["datetime"] + [c for c in df_events.columns if c != "datetime"]
            df_events = df_events[cols]

        return df_telemetry, df_events
