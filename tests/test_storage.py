"""Tests for DuckDB storage module."""

import json
from pathlib import Path
from typing import Tuple

import duckdb
import pandas as pd
import pytest

from stop_and_go import ConfigLoader, SimulationEngine
from stop_and_go.storage import connect, get_db_path, save_results
from stop_and_go.storage.schema import SCHEMA_DDL, create_tables
from stop_and_go.storage.writer import DuckDBWriter, stopper_occupancy


@pytest.fixture
def temp_db(tmp_path: Path) -> Path:
    """Create a temporary database file path (does not create the file)."""
    return tmp_path / "test_stop_and_go_results.duckdb"


@pytest.fixture
def resolved(loader: ConfigLoader):
    """Resolved config for testing."""
    resolved = loader.resolve_run("baseline_10s")
    resolved.run.duration_sec = 2.0  # Short run for testing
    return resolved


@pytest.fixture
def simulation_results(config_dir: Path, resolved) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Run a short simulation and return (telemetry_df, events_df)."""
    engine = SimulationEngine(str(config_dir), save_to_db=False)
    return engine.run_resolved(resolved)


class TestSchemaCreation:
    """Tests for schema DDL and table creation."""

    def test_schema_ddl_is_valid_sql(self, temp_db: Path):
        """Schema DDL should be valid DuckDB SQL."""
        conn = duckdb.connect(str(temp_db))
        conn.execute(SCHEMA_DDL)
        conn.close()

    def test_create_tables_creates_all_tables(self, temp_db: Path):
        """create_tables() should create all 4 tables."""
        conn = duckdb.connect(str(temp_db))
        create_tables(conn)

        tables = conn.execute(
            "SELECT table_name FROM information_schema.tables WHERE table_schema = 'main'"
        ).fetchall()
        table_names = {t[0] for t in tables}

        assert {"simulation_runs", "telemetry", "events", "run_summary"} <= table_names
        conn.close()

    def test_create_tables_is_idempotent(self, temp_db: Path):
        """create_tables() should be safe to call multiple times."""
        conn = duckdb.connect(str(temp_db))
        create_tables(conn)
        create_tables(conn)
        conn.close()


class TestDuckDBWriter:
    """Tests for DuckDBWriter class."""

    def test_store_run_inserts_simulation_run(self, temp_db, resolved, simulation_results):
        df_ts, df_ev = simulation_results
        writer = DuckDBWriter(temp_db)

        run_id = writer.store_run(resolved, df_ts, df_ev)

        result = writer.conn.execute(
            "SELECT run_name, conveyor_name, part_name, stopper_count, completed_at "
            "FROM simulation_runs WHERE run_id = ?",
            [run_id],
        ).fetchone()
        writer.close()

        assert run_id >= 1
        assert result[0] == "baseline_10s"
        assert result[1] == "two_stopper_line"
        assert result[2] == "tote"
        assert result[3] == 2
        assert result[4] is not None

    def test_config_snapshot_roundtrips(self, temp_db, resolved, simulation_results):
        df_ts, df_ev = simulation_results
        writer = DuckDBWriter(temp_db)

        run_id = writer.store_run(resolved, df_ts, df_ev)
        snapshot = writer.conn.execute(
            "SELECT config_snapshot FROM simulation_runs WHERE run_id = ?", [run_id]
        ).fetchone()[0]
        writer.close()

        data = json.loads(snapshot)
        assert data["conveyor"]["stoppers"][0] == {"position": 800.0, "command": True}
        assert data["run"]["duration_sec"] == 2.0
        assert data["part"]["name"] == "tote"

    def test_store_run_inserts_telemetry_and_events(
        self, temp_db, resolved, simulation_results
    ):
        df_ts, df_ev = simulation_results
        writer = DuckDBWriter(temp_db)

        run_id = writer.store_run(resolved, df_ts, df_ev)
        n_ts = writer.conn.execute(
            "SELECT COUNT(*) FROM telemetry WHERE run_id = ?", [run_id]
        ).fetchone()[0]
        n_ev = writer.conn.execute(
            "SELECT COUNT(*) FROM events WHERE run_id = ?", [run_id]
        ).fetchone()[0]
        states = writer.conn.execute(
            "SELECT stopper_states FROM telemetry WHERE run_id = ? ORDER BY sim_time_ms LIMIT 1",
            [run_id],
        ).fetchone()[0]
        writer.close()

        assert n_ts == len(df_ts)
        assert n_ev == len(df_ev)
        assert json.loads(states) == {
            "stopper1_command": 1,
            "stopper1_sensor": 0,
            "stopper2_command": 0,
            "stopper2_sensor": 0,
        }

    def test_store_run_inserts_summary(self, temp_db, resolved, simulation_results):
        df_ts, df_ev = simulation_results
        writer = DuckDBWriter(temp_db)

        run_id = writer.store_run(resolved, df_ts, df_ev)
        result = writer.conn.execute(
            "SELECT total_spawned, total_removed, final_parts_on_belt "
            "FROM run_summary WHERE run_id = ?",
            [run_id],
        ).fetchone()
        writer.close()

        # Spawns at 0 and 1500 ms
        assert result == (2, 0, 2)

    def test_run_ids_increment(self, temp_db, resolved, simulation_results):
        df_ts, df_ev = simulation_results
        writer = DuckDBWriter(temp_db)

        first = writer.store_run(resolved, df_ts, df_ev)
        second = writer.store_run(resolved, df_ts, df_ev)
        total = writer.conn.execute("SELECT COUNT(*) FROM telemetry").fetchone()[0]
        writer.close()

        assert second == first + 1
        assert total == 2 * len(df_ts)

    def test_row_ids_come_from_sequences(self, temp_db, resolved, simulation_results):
        df_ts, df_ev = simulation_results
        writer = DuckDBWriter(temp_db)

        writer.store_run(resolved, df_ts, df_ev)
        writer.store_run(resolved, df_ts, df_ev)
        ts_ids = [
            r[0] for r in writer.conn.execute("SELECT id FROM telemetry ORDER BY id").fetchall()
        ]
        ev_ids = [
            r[0] for r in writer.conn.execute("SELECT id FROM events ORDER BY id").fetchall()
        ]
        writer.close()

        assert ts_ids == list(range(1, 2 * len(df_ts) + 1))
        assert ev_ids == list(range(1, 2 * len(df_ev) + 1))

    def test_lead_world_coordinates_stored(self, temp_db, resolved, simulation_results):
        df_ts, df_ev = simulation_results
        writer = DuckDBWriter(temp_db)

        run_id = writer.store_run(resolved, df_ts, df_ev)
        row = writer.conn.execute(
            "SELECT lead_position, lead_world_x, lead_world_z FROM telemetry "
            "WHERE run_id = ? ORDER BY sim_time_ms DESC LIMIT 1",
            [run_id],
        ).fetchone()
        writer.close()

        assert row[1] == pytest.approx(row[0])
        assert row[2] == pytest.approx(750.0)


class TestStopperOccupancy:
    def test_percent_of_samples(self):
        df = pd.DataFrame(
            {
                "time_ms": [0, 100, 200, 300],
                "stopper1_command": [1, 1, 1, 1],
                "stopper1_sensor": [0, 1, 1, 1],
                "stopper2_sensor": [0, 0, 0, 0],
            }
        )
        assert stopper_occupancy(df) == {"stopper1": 75.0, "stopper2": 0.0}

    def test_empty_frame(self):
        assert stopper_occupancy(pd.DataFrame()) == {}


class TestPublicAPI:
    """Tests for the public storage API."""

    def test_get_db_path_returns_default(self):
        assert get_db_path() == Path("./stop_and_go_results.duckdb")

    def test_save_results_creates_db(self, temp_db, resolved, simulation_results):
        df_ts, df_ev = simulation_results

        run_id = save_results(resolved, df_ts, df_ev, temp_db)

        assert temp_db.exists()
        assert isinstance(run_id, int)

    def test_views_are_queryable(self, temp_db, resolved, simulation_results):
        df_ts, df_ev = simulation_results
        save_results(resolved, df_ts, df_ev, temp_db)

        conn = connect(temp_db)
        df = conn.execute("SELECT * FROM v_run_comparison").df()
        conn.close()

        assert len(df) == 1
        assert df["run_name"].iloc[0] == "baseline_10s"

    def test_engine_saves_when_enabled(self, config_dir, temp_db):
        engine = SimulationEngine(str(config_dir), save_to_db=True, db_path=temp_db)

        engine.run("free_flow_5s")

        conn = connect(temp_db)
        count = conn.execute("SELECT COUNT(*) FROM simulation_runs").fetchone()[0]
        conn.close()
        assert count == 1
