"""Tests for YAML configuration loading."""

from pathlib import Path

import pytest

from stop_and_go import ConfigLoader, StopAndGoConveyor, StopperConfigError


class TestShippedConfig:
    """Loading the configs in config/."""

    def test_defaults_loaded(self, loader):
        assert loader.defaults.conveyor["stopper_tolerance"] == 0.001
        assert loader.defaults.simulation["step_ms"] == 10.0

    def test_load_conveyor(self, loader):
        conveyor = loader.load_conveyor("two_stopper_line")

        assert conveyor.name == "two_stopper_line"
        assert conveyor.speed == 250.0
        assert [s.position for s in conveyor.stoppers] == [800.0, 1600.0]
        assert [s.command for s in conveyor.stoppers] == [True, False]
        assert conveyor.frame.origin.z == 750.0
        assert conveyor.time_scale_ms == 1000.0

    def test_conveyor_to_config(self, loader):
        config = loader.load_conveyor("two_stopper_line").to_config()

        assert config.stopper_count == 2
        assert config.stopper_positions == [800.0, 1600.0]
        assert config.stopper_commands == [True, False]
        config.check_stoppers()

    def test_conveyor_without_stoppers(self, loader):
        config = loader.load_conveyor("free_flow").to_config()
        assert config.stopper_count == 0
        assert config.stopper_positions == []

    def test_load_part(self, loader):
        part = loader.load_part("tote")

        assert part.name == "tote"
        assert part.geometry.size.x == 300.0
        assert part.geometry.offset.z == 75.0
        assert part.position == 0.0

    def test_load_run_uses_simulation_defaults(self, loader):
        run = loader.load_run("free_flow_5s")

        assert run.duration_sec == 5.0
        assert run.duration_ms == 5000.0
        assert run.step_ms == 10.0
        assert run.telemetry_interval_ms == 100.0
        assert run.spawn_interval_ms == 1000.0

    def test_signals_sorted_by_time(self, loader):
        run = loader.load_run("baseline_10s")

        times = [s.at_ms for s in run.signals]
        assert times == sorted(times)
        assert run.signals[0].signal == "Enable"

    def test_resolve_run(self, loader):
        resolved = loader.resolve_run("baseline_10s")

        assert resolved.run.name == "baseline_10s"
        assert resolved.conveyor.name == "two_stopper_line"
        assert resolved.part is not None
        assert resolved.part.name == "tote"

    def test_build_component(self, loader):
        resolved = loader.resolve_run("baseline_10s")

        conveyor = loader.build_component(resolved)

        assert isinstance(conveyor, StopAndGoConveyor)
        assert conveyor.name == "two_stopper_line"
        assert conveyor.stopper_count == 2
        assert conveyor.get_signal("Stopper1Command") == 1
        assert conveyor.source_part is resolved.part

    def test_missing_file_raises(self, loader):
        with pytest.raises(FileNotFoundError):
            loader.load_run("does_not_exist")


class TestCustomConfig:
    """Loading configs written to a temporary directory."""

    @pytest.fixture
    def custom_dir(self, tmp_path: Path) -> Path:
        (tmp_path / "conveyors").mkdir()
        (tmp_path / "runs").mkdir()
        (tmp_path / "conveyors" / "rotated.yaml").write_text(
            "name: rotated\n"
            "speed: 100.0\n"
            "length: 500.0\n"
            "stoppers:\n"
            "  - position: 200.0\n"
            "frame:\n"
            "  origin: [1.0, 2.0]\n"
            "  yaw_deg: 90.0\n"
        )
        (tmp_path / "runs" / "short.yaml").write_text(
            "name: short\n"
            "conveyor: rotated\n"
            "start_time: '2026-01-05T06:00:00'\n"
        )
        return tmp_path

    def test_without_defaults_file(self, custom_dir):
        loader = ConfigLoader(custom_dir)

        conveyor = loader.load_conveyor("rotated")
        run = loader.load_run("short")

        assert conveyor.stopper_tolerance == 0.001
        assert conveyor.stoppers[0].command is False
        assert conveyor.frame.origin.y == 2.0
        assert conveyor.frame.origin.z == 0.0
        assert conveyor.frame.yaw_deg == 90.0
        assert run.duration_sec == 10.0
        assert run.spawn_interval_ms is None
        assert run.start_time.hour == 6

    def test_run_without_part(self, custom_dir):
        loader = ConfigLoader(custom_dir)

        resolved = loader.resolve_run("short")
        conveyor = loader.build_component(resolved)

        assert resolved.part is None
        assert conveyor.add_object() is None

    def test_inconsistent_stoppers_rejected_on_build(self, custom_dir):
        loader = ConfigLoader(custom_dir)
        resolved = loader.resolve_run("short")
        config = resolved.conveyor.to_config()
        config.stopper_commands = []

        with pytest.raises(StopperConfigError):
            StopAndGoConveyor(config)
