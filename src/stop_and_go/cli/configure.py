"""Configure command: resolve and validate a run configuration."""

from stop_and_go.loader import ConfigLoader, ResolvedConfig


def configure(run_name: str, config_dir: str = "config") -> ResolvedConfig:
    """Resolve a run config and print what it will simulate.

    Builds the conveyor component once and checks every scheduled signal
    against it, so stopper configuration errors and unknown signal names
    surface here rather than mid-run.

    Args:
        run_name: Name of the run config (without .yaml extension)
        config_dir: Path to config directory

    Returns:
        The resolved configuration
    """
    loader = ConfigLoader(config_dir)
    resolved = loader.resolve_run(run_name)
    component = loader.build_component(resolved)
    for event in resolved.run.signals:
        component.check_input(event.signal)

    conveyor = resolved.conveyor
    print(f"Resolving configuration for run: {run_name}")
    print(f"  Conveyor: {conveyor.name} (speed {conveyor.speed}, length {conveyor.length})")
    for k, stopper in enumerate(conveyor.stoppers, start=1):
        state = "closed" if stopper.command else "open"
        print(f"    Stopper{k}: position {stopper.position} ({state})")
    if resolved.part:
        print(f"  Part: {resolved.part.name}")
    print(f"  Duration: {resolved.run.duration_sec} s, step {resolved.run.step_ms} ms")
    print(f"  Scheduled signals: {len(resolved.run.signals)}")
    print("\n[dry-run] Configuration is valid.")

    return resolved
