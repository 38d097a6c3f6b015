"""DuckDB schema definitions for simulation results storage."""

SCHEMA_DDL = """
-- 1. SIMULATION_RUNS: Parent record for each simulation
CREATE TABLE IF NOT EXISTS simulation_runs (
    run_id INTEGER PRIMARY KEY,
    run_name VARCHAR NOT NULL,
    conveyor_name VARCHAR NOT NULL,
    part_name VARCHAR,
    config_hash VARCHAR NOT NULL,
    started_at TIMESTAMP NOT NULL,
    completed_at TIMESTAMP,
    duration_sec DOUBLE NOT NULL,
    step_ms DOUBLE NOT NULL,
    speed DOUBLE NOT NULL,
    length DOUBLE NOT NULL,
    stopper_count INTEGER NOT NULL,
    -- Config snapshot (JSON blob)
    config_snapshot JSON NOT NULL,
    stop_and_go_version VARCHAR,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- 2. TELEMETRY: Time-series data
CREATE TABLE IF NOT EXISTS telemetry (
    id INTEGER PRIMARY KEY,
    run_id INTEGER NOT NULL REFERENCES simulation_runs(run_id),
    ts TIMESTAMP,
    sim_time_ms DOUBLE NOT NULL,
    parts_on_belt INTEGER DEFAULT 0,
    -- Incremental per interval
    parts_spawned INTEGER DEFAULT 0,
    parts_removed INTEGER DEFAULT 0,
    lead_position DOUBLE,
    -- Head part in world coordinates (conveyor reference frame applied)
    lead_world_x DOUBLE,
    lead_world_y DOUBLE,
    lead_world_z DOUBLE,
    -- Per-stopper I/O as JSON
    stopper_states JSON
);

-- 3. EVENTS: Spawns, removals, sensor edges
CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY,
    run_id INTEGER NOT NULL REFERENCES simulation_runs(run_id),
    ts TIMESTAMP,
    sim_time_ms DOUBLE NOT NULL,
    event_type VARCHAR NOT NULL,
    subject VARCHAR NOT NULL
);

-- 4. RUN_SUMMARY: Pre-aggregated metrics
CREATE TABLE IF NOT EXISTS run_summary (
    run_id INTEGER PRIMARY KEY REFERENCES simulation_runs(run_id),
    total_spawned INTEGER DEFAULT 0,
    total_removed INTEGER DEFAULT 0,
    final_parts_on_belt INTEGER DEFAULT 0,
    throughput_per_min DOUBLE,
    stopper_occupancy JSON
);

-- Sequences for auto-increment IDs
CREATE SEQUENCE IF NOT EXISTS seq_telemetry_id START 1;
CREATE SEQUENCE IF NOT EXISTS seq_events_id START 1;
CREATE SEQUENCE IF NOT EXISTS seq_simulation_runs_id START 1;
"""

INDEX_DDL = """
-- Indexes for query performance
CREATE INDEX IF NOT EXISTS idx_runs_started_at ON simulation_runs(started_at);
CREATE INDEX IF NOT EXISTS idx_telemetry_run_time ON telemetry(run_id, sim_time_ms);
CREATE INDEX IF NOT EXISTS idx_events_run_time ON events(run_id, sim_time_ms);
"""

VIEW_DDL = """
-- Run comparison view
CREATE OR REPLACE VIEW v_run_comparison AS
SELECT r.run_id, r.run_name, r.conveyor_name, r.started_at,
       r.speed, r.length, r.stopper_count,
       s.total_spawned, s.total_removed, s.final_parts_on_belt,
       s.throughput_per_min
FROM simulation_runs r
JOIN run_summary s ON r.run_id = s.run_id;
"""


def create_tables(conn) -> None:
    """Create all tables, indexes, and views in the database.

    Args:
        conn: DuckDB connection
    """
    conn.execute(SCHEMA_DDL)
    conn.execute(INDEX_DDL)
    conn.execute(VIEW_DDL)
