"""CLI commands for stop-and-go."""

from stop_and_go.cli.configure import configure

__all__ = [
    "configure",
]
