"""Entry point for running simulations."""

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from stop_and_go.cli.configure import configure as configure_func
from stop_and_go.engine import SimulationEngine
from stop_and_go.logging_config import setup_logging
from stop_and_go.storage.writer import stopper_occupancy


def run_simulation(
    run_name: str = "baseline_10s",
    config_dir: str = "config",
    save_to_db: bool = True,
    db_path: Optional[str] = None,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Run a simulation with the given run config name.

    Args:
        run_name: Name of the run config (without .yaml extension)
        config_dir: Path to config directory
        save_to_db: If True, save results to DuckDB database
        db_path: Custom path for DuckDB file

    Returns:
        Tuple of (telemetry_df, events_df)
    """
    engine = SimulationEngine(config_dir, save_to_db=save_to_db, db_path=db_path)
    df_ts, df_ev = engine.run(run_name)

    # Report
    print("\n--- SIMULATION COMPLETE ---")
    print(f"Telemetry Records: {len(df_ts)}")
    print(f"Event Records: {len(df_ev)}")

    if not df_ts.empty:
        print("\n--- FLOW SUMMARY ---")
        print(f"Parts Spawned:     {int(df_ts['parts_spawned'].sum()):,}")
        print(f"Parts Removed:     {int(df_ts['parts_removed'].sum()):,}")
        print(f"Parts On Belt:     {int(df_ts['parts_on_belt'].iloc[-1]):,}")

        occupancy = stopper_occupancy(df_ts)
        if occupancy:
            print("\n--- Stopper Occupancy (% of samples) ---")
            for stopper, pct in occupancy.items():
                print(f"{stopper:<12} {pct:5.1f}%")

    return df_ts, df_ev


def _run_command(args: argparse.Namespace) -> None:
    """Handle 'run' subcommand."""
    df_ts, df_ev = run_simulation(
        args.run, args.config, save_to_db=not args.no_db, db_path=args.db_path
    )

    # Export if requested
    if args.export:
        output_dir = Path(args.output)
        output_dir.mkdir(exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        ts_path = output_dir / f"telemetry_{timestamp}.csv"
        ev_path = output_dir / f"events_{timestamp}.csv"

        df_ts.to_csv(ts_path, index=False)
        df_ev.to_csv(ev_path, index=False)

        print(f"\nExported: {ts_path} ({len(df_ts)} rows)")
        print(f"Exported: {ev_path} ({len(df_ev)} rows)")


def _configure_command(args: argparse.Namespace) -> None:
    """Handle 'configure' subcommand."""
    configure_func(run_name=args.run, config_dir=args.config)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Stop-and-go conveyor simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  run         Run a simulation from config
  configure   Resolve and validate a run config without simulating

Examples:
  python -m stop_and_go run --run baseline_10s
  python -m stop_and_go run --run baseline_10s --export --no-db
  python -m stop_and_go configure --run free_flow_5s
        """,
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic log level (default: WARNING)",
    )
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # === 'run' subcommand ===
    run_parser = subparsers.add_parser(
        "run",
        help="Run simulation from config",
        description="Run a simulation from YAML configuration files.",
    )
    run_parser.add_argument(
        "--run",
        default="baseline_10s",
        help="Run config name (default: baseline_10s)",
    )
    run_parser.add_argument(
        "--config",
        default="config",
        help="Config directory path (default: config)",
    )
    run_parser.add_argument(
        "--export",
        action="store_true",
        help="Export results to CSV files",
    )
    run_parser.add_argument(
        "--output",
        default="output",
        help="Output directory for CSV export (default: output)",
    )
    run_parser.add_argument(
        "--no-db",
        action="store_true",
        help="Skip saving to DuckDB database",
    )
    run_parser.add_argument(
        "--db-path",
        default=None,
        help="Custom path for DuckDB file (default: ./stop_and_go_results.duckdb)",
    )
    run_parser.set_defaults(func=_run_command)

    # === 'configure' subcommand ===
    configure_parser = subparsers.add_parser(
        "configure",
        help="Validate a run config",
        description="Resolve a run configuration and print it without simulating.",
    )
    configure_parser.add_argument(
        "--run",
        required=True,
        help="Run config name (required)",
    )
    configure_parser.add_argument(
        "--config",
        default="config",
        help="Config directory path (default: config)",
    )
    configure_parser.set_defaults(func=_configure_command)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point with subcommands."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(getattr(logging, args.log_level), args.log_file)

    if args.command is None:
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
