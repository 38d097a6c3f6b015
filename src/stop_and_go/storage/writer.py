"""DuckDB writer for persisting simulation results."""

import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict

import duckdb
import pandas as pd

from stop_and_go.storage.schema import create_tables

if TYPE_CHECKING:
    from stop_and_go.loader import ResolvedConfig

__version__ = "0.3.0"


def stopper_columns(df_ts: pd.DataFrame) -> list[str]:
    """Per-stopper command/sensor columns in a telemetry DataFrame."""
    return [c for c in df_ts.columns if c.startswith("stopper")]


def stopper_occupancy(df_ts: pd.DataFrame) -> Dict[str, float]:
    """Percent of telemetry samples in which each stopper sensor was high."""
    if df_ts.empty:
        return {}
    return {
        col.replace("_sensor", ""): round(float(df_ts[col].mean()) * 100, 1)
        for col in stopper_columns(df_ts)
        if col.endswith("_sensor")
    }


class DuckDBWriter:
    """Writes simulation results to DuckDB database."""

    def __init__(self, db_path: Path):
        """Initialize writer and ensure schema exists.

        Args:
            db_path: Path to DuckDB database file
        """
        self.db_path = db_path
        self.conn = duckdb.connect(str(db_path))
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Create tables if they don't exist."""
        create_tables(self.conn)

    def store_run(
        self,
        resolved: "ResolvedConfig",
        df_ts: pd.DataFrame,
        df_ev: pd.DataFrame,
    ) -> int:
        """Store complete simulation results.

        Args:
            resolved: Resolved configuration used for the simulation
            df_ts: Telemetry DataFrame (time-series)
            df_ev: Events DataFrame (spawns, removals, sensor edges)

        Returns:
            run_id of the stored simulation
        """
        # 1. Insert simulation_runs record
        run_id = self._insert_simulation_run(resolved)

        # 2. Insert telemetry and events (bulk)
        self._insert_telemetry(run_id, df_ts)
        self._insert_events(run_id, df_ev)

        # 3. Compute and insert summary
        self._insert_summary(run_id, df_ts, resolved)

        # Update completed_at
        self.conn.execute(
            "UPDATE simulation_runs SET completed_at = ? WHERE run_id = ?",
            [datetime.now(), run_id],
        )

        return run_id

    def _insert_simulation_run(self, resolved: "ResolvedConfig") -> int:
        """Insert parent record and return run_id."""
        config_json = self._config_to_json(resolved)
        config_hash = hashlib.sha256(config_json.encode()).hexdigest()[:16]

        run_id = self.conn.execute(
            "SELECT nextval('seq_simulation_runs_id')"
        ).fetchone()[0]

        conveyor = resolved.conveyor
        self.conn.execute(
            """
            INSERT INTO simulation_runs (
                run_id, run_name, conveyor_name, part_name, config_hash,
                started_at, duration_sec, step_ms, speed, length,
                stopper_count, config_snapshot, stop_and_go_version
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                run_id,
                resolved.run.name,
                conveyor.name,
                resolved.part.name if resolved.part else None,
                config_hash,
                resolved.run.start_time or datetime.now(),
                resolved.run.duration_sec,
                resolved.run.step_ms,
                conveyor.speed,
                conveyor.length,
                len(conveyor.stoppers),
                config_json,
                __version__,
            ],
        )
        return run_id

    def _config_to_json(self, resolved: "ResolvedConfig") -> str:
        """Convert resolved config to JSON for storage."""
        run = resolved.run
        conveyor = resolved.conveyor
        snapshot: Dict[str, Any] = {
            "run": {
                "name": run.name,
                "conveyor": run.conveyor,
                "part": run.part,
                "duration_sec": run.duration_sec,
                "step_ms": run.step_ms,
                "telemetry_interval_ms": run.telemetry_interval_ms,
                "spawn_interval_ms": run.spawn_interval_ms,
                "signals": [
                    {"at_ms": s.at_ms, "signal": s.signal, "value": s.value}
                    for s in run.signals
                ],
                "start_time": run.start_time.isoformat() if run.start_time else None,
            },
            "conveyor": {
                "name": conveyor.name,
                "speed": conveyor.speed,
                "length": conveyor.length,
                "stoppers": [
                    {"position": s.position, "command": s.command}
                    for s in conveyor.stoppers
                ],
                "frame": conveyor.frame.model_dump(),
                "stopper_tolerance": conveyor.stopper_tolerance,
                "time_scale_ms": conveyor.time_scale_ms,
            },
            "part": resolved.part.model_dump(exclude={"uid"}) if resolved.part else None,
        }
        return json.dumps(snapshot, default=str)

    def _insert_telemetry(self, run_id: int, df_ts: pd.DataFrame) -> None:
        """Insert telemetry records using bulk insert."""
        if df_ts.empty:
            return

        stopper_cols = stopper_columns(df_ts)
        df_insert = pd.DataFrame(
            {
                "ts": df_ts["datetime"].fillna(datetime.now()),
                "sim_time_ms": df_ts["time_ms"].fillna(0),
                "parts_on_belt": df_ts["parts_on_belt"].fillna(0).astype(int),
                "parts_spawned": df_ts["parts_spawned"].fillna(0).astype(int),
                "parts_removed": df_ts["parts_removed"].fillna(0).astype(int),
                "lead_position": df_ts["lead_position"].astype(float),
                "lead_world_x": df_ts["lead_world_x"].astype(float),
                "lead_world_y": df_ts["lead_world_y"].astype(float),
                "lead_world_z": df_ts["lead_world_z"].astype(float),
                "stopper_states": df_ts[stopper_cols].apply(
                    lambda row: json.dumps({c: int(row[c]) for c in stopper_cols}),
                    axis=1,
                )
                if stopper_cols
                else "{}",
            }
        )

        df_insert["run_id"] = run_id

        # Register DataFrame and bulk insert
        self.conn.register("telemetry_df", df_insert)
        self.conn.execute(
            """
            INSERT INTO telemetry (
                id, run_id, ts, sim_time_ms, parts_on_belt,
                parts_spawned, parts_removed, lead_position,
                lead_world_x, lead_world_y, lead_world_z, stopper_states
            )
            SELECT nextval('seq_telemetry_id'), run_id, ts, sim_time_ms, parts_on_belt,
                parts_spawned, parts_removed, lead_position,
                lead_world_x, lead_world_y, lead_world_z, stopper_states
            FROM telemetry_df
            """
        )
        self.conn.unregister("telemetry_df")

    def _insert_events(self, run_id: int, df_ev: pd.DataFrame) -> None:
        """Insert event records using bulk insert."""
        if df_ev.empty:
            return

        df_insert = pd.DataFrame(
            {
                "ts": (
                    df_ev["datetime"] if "datetime" in df_ev.columns else pd.NaT
                ),
                "sim_time_ms": df_ev["timestamp"].astype(float),
                "event_type": df_ev["event_type"].astype(str),
                "subject": df_ev["subject"].astype(str),
            }
        )

        df_insert["run_id"] = run_id

        self.conn.register("events_df", df_insert)
        self.conn.execute(
            """
            INSERT INTO events (id, run_id, ts, sim_time_ms, event_type, subject)
            SELECT nextval('seq_events_id'), run_id, ts, sim_time_ms, event_type, subject
            FROM events_df
            """
        )
        self.conn.unregister("events_df")

    def _insert_summary(
        self, run_id: int, df_ts: pd.DataFrame, resolved: "ResolvedConfig"
    ) -> None:
        """Compute and insert the run summary."""
        total_spawned = int(df_ts["parts_spawned"].sum()) if not df_ts.empty else 0
        total_removed = int(df_ts["parts_removed"].sum()) if not df_ts.empty else 0
        final_on_belt = int(df_ts["parts_on_belt"].iloc[-1]) if not df_ts.empty else 0

        minutes = resolved.run.duration_sec / 60.0
        throughput = round(total_removed / minutes, 2) if minutes > 0 else None

        self.conn.execute(
            """
            INSERT INTO run_summary (
                run_id, total_spawned, total_removed, final_parts_on_belt,
                throughput_per_min, stopper_occupancy
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                run_id,
                total_spawned,
                total_removed,
                final_on_belt,
                throughput,
                json.dumps(stopper_occupancy(df_ts)),
            ],
        )

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()
