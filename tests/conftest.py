"""Shared test fixtures for stop-and-go tests."""

from pathlib import Path
from typing import Optional

import pytest

from stop_and_go import (
    BoxGeometry,
    ConfigLoader,
    ConveyorConfig,
    Part,
    SimulationEngine,
    Vector3,
)


@pytest.fixture
def config_dir() -> Path:
    """Path to the shipped config directory."""
    return Path(__file__).parent.parent / "config"


@pytest.fixture
def loader(config_dir: Path) -> ConfigLoader:
    """ConfigLoader instance."""
    return ConfigLoader(config_dir)


@pytest.fixture
def engine(config_dir: Path) -> SimulationEngine:
    """SimulationEngine instance (with DB saving disabled for tests)."""
    return SimulationEngine(str(config_dir), save_to_db=False)


def make_part(position: float, uid: Optional[str] = None, size_x: float = 100.0) -> Part:
    """A box part 100 long (default) centred on ``position``."""
    kwargs = {"uid": uid} if uid else {}
    return Part(
        location=Vector3(x=position),
        geometry=BoxGeometry(size=Vector3(x=size_x, y=50.0, z=50.0)),
        **kwargs,
    )


def make_conveyor(
    speed: float = 100.0,
    length: float = 1000.0,
    positions: Optional[list] = None,
    commands: Optional[list] = None,
) -> ConveyorConfig:
    positions = positions or []
    commands = commands if commands is not None else [False] * len(positions)
    return ConveyorConfig(
        speed=speed,
        length=length,
        stopper_count=len(positions),
        stopper_positions=positions,
        stopper_commands=commands,
    )


@pytest.fixture
def part_factory():
    return make_part


@pytest.fixture
def conveyor_factory():
    return make_conveyor
