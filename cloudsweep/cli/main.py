"""Main CLI entry point using Typer."""

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..delta.calculator import DiffCalculator
from ..delta.filters import build_resource_filter, split_types
from ..errors import AuthError, CloudSweepError, ConfigError, DestroyTimeoutError
from ..models.object_set import count_objects, merge_objects
from ..models.profile import Profile
from ..models.snapshot import Snapshot, SnapshotData
from ..providers import registry
from ..providers.base import Provider, read_all_objects
from ..restore.destroyer import DestroyOptions, Destroyer
from ..restore.incremental import IncrementalSelector
from ..restore.reporter import DestroyerReporter
from ..snapshot.storage import SnapshotStorage
from ..utils.duration import parse_duration
from ..utils.logging import setup_logging
from .config import Config
from .prompts import confirm_action, read_answer

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="cloudsweep",
    help=(
        "Cleanup your cloud resources.\n\n"
        "cloudsweep can remove all resources from a cloud account or the resources which are not part "
        "of a snapshot. Snapshots are only a listing of cloud resource ids. "
        "Start by adding a new cloud profile with the `profile new` sub-command."
    ),
    add_completion=False,
)

# Create Rich console for output
console = Console()


@dataclass
class CliState:
    """Options shared by every command, set by the root callback."""

    config_path: Optional[str] = None
    debug: bool = False
    quiet: bool = False


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj if isinstance(ctx.obj, CliState) else CliState()


def _print_json(document: dict, indent: Optional[int] = None) -> None:
    console.print(json.dumps(document, indent=indent), markup=False, highlight=False, soft_wrap=True)


def _fail(message: str, json_output: bool = False, code: int = 1) -> NoReturn:
    """Report an error and exit."""
    if json_output:
        _print_json({"error": message})
    else:
        console.print(f"✗ {escape(message)}", style="bold red")
    raise typer.Exit(code=code)


def _load_config(state: CliState, json_output: bool = False) -> Config:
    config = Config.load(state.config_path)
    if json_output:
        setup_logging(level="ERROR", verbose=state.debug)
    elif not state.debug and not state.quiet:
        setup_logging(level=config.log_level)
    return config


def _connect(profile: Profile, debug: bool) -> Provider:
    """Create the provider of a profile and check its credentials."""
    provider = registry.create(profile, debug=debug)
    try:
        provider.authenticate()
    except AuthError as e:
        raise AuthError(f"Provider test failed for profile {profile.name}: {e}") from e
    return provider


def _known_types(profiles: Iterable[Profile]) -> List[str]:
    known: List[str] = []
    for profile in profiles:
        known.extend(registry.resource_types(profile.provider))
    return known


def _check_json_option(json_output: bool, plan: bool, auto_approve: bool) -> None:
    if json_output and not (plan or auto_approve):
        raise ConfigError("Cannot use --json option without --plan or --auto-approve")


def _execute_destroyer(
    destroyer: Destroyer,
    plan: bool,
    auto_approve: bool,
    json_output: bool,
    timeout: Optional[float],
    message: str,
) -> None:
    """Print the deletion plan, then confirm and run it unless planning only."""
    if json_output and not plan and destroyer.total_count > 0:
        _run_json(destroyer, auto_approve, timeout)
        return

    destroyer.print(json_output=json_output, console=console)
    if plan or destroyer.total_count == 0:
        return

    if not confirm_action(message, auto_approve=auto_approve, console=console):
        _fail("Deletion canceled", json_output)

    try:
        passes = destroyer.run(confirmed=True, timeout=timeout)
    except DestroyTimeoutError:
        DestroyerReporter(console).display_pending(destroyer)
        raise

    console.print(f"✓ All objects deleted ({passes} pass(es))", style="green")


def _run_json(destroyer: Destroyer, auto_approve: bool, timeout: Optional[float]) -> None:
    """Run the deletion and print a single document: the plan, plus what is left on timeout."""
    document = destroyer.to_dict()
    try:
        destroyer.run(confirmed=auto_approve, timeout=timeout)
    except DestroyTimeoutError as e:
        document["error"] = str(e)
        document["pending"] = e.pending
        _print_json(document, indent=2)
        raise typer.Exit(code=1)
    _print_json(document, indent=2)


def _new_destroyer(config: Config, state: CliState) -> Destroyer:
    return Destroyer(
        DestroyOptions(
            target_delay=config.target_delay,
            pass_delay=config.pass_delay,
            debug=state.debug,
        )
    )


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file (default: $CLOUDSWEEP_CONFIG or ~/.cloudsweep/config.yaml)",
    ),
    debug: bool = typer.Option(False, "--debug", "-v", help="Enable verbose output for debugging purpose"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """cloudsweep - Cleanup your cloud resources."""
    ctx.obj = CliState(config_path=config_path, debug=debug, quiet=quiet)

    # Setup logging
    log_level = "ERROR" if quiet else ("DEBUG" if debug else "INFO")
    setup_logging(level=log_level, verbose=debug)

    # Disable colors if requested
    if no_color:
        console.no_color = True


@app.command()
def version():
    """Show version information."""
    import boto3

    from .. import __version__

    console.print(f"cloudsweep version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")
    console.print(f"boto3 {boto3.__version__}")


# Profile commands
profile_app = typer.Typer(help="Manage cloud profiles")
app.add_typer(profile_app, name="profile")


def parse_settings(settings: Optional[List[str]]) -> Dict[str, str]:
    """Parse repeated key=value options."""
    parsed: Dict[str, str] = {}
    for setting in settings or []:
        if "=" not in setting:
            raise ConfigError(f"Invalid setting format: {setting}. Use key=value")
        key, value = setting.split("=", 1)
        parsed[key.strip()] = value.strip()
    return parsed


@profile_app.command("list")
def profile_list(ctx: typer.Context):
    """List profiles."""
    state = _state(ctx)
    try:
        config = _load_config(state)
        if not config.profiles:
            console.print("No profile configured", style="yellow")
            console.print("\nCreate one with: cloudsweep profile new <provider> <name> --set key=value")
            return
        for profile in config.profiles:
            console.print(profile.name, markup=False, highlight=False)
    except CloudSweepError as e:
        _fail(str(e))


@profile_app.command("describe")
def profile_describe(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile name to describe"),
):
    """Describe a profile."""
    state = _state(ctx)
    try:
        config = _load_config(state)
        profile = config.get_profile(name)
        console.print(str(profile), markup=False, highlight=False, end="")
    except CloudSweepError as e:
        _fail(str(e))


@profile_app.command("new")
def profile_new(
    ctx: typer.Context,
    provider: str = typer.Argument(..., help="Provider name (see `cloudsweep provider list`)"),
    name: str = typer.Argument(..., help="New profile name"),
    settings: Optional[List[str]] = typer.Option(
        None, "--set", "-s", help="Provider setting as key=value (repeatable)"
    ),
):
    """Create a new profile."""
    state = _state(ctx)
    try:
        config = _load_config(state)
        profile = Profile(name=name, provider=provider, config=parse_settings(settings))

        # Fails on unknown provider or incomplete settings
        registry.create(profile, debug=state.debug)

        config.add_profile(profile)
        path = config.write()
        console.print(f"✓ Created profile '[bold]{escape(name)}[/bold]' ({escape(provider)})", style="green")
        logger.debug(f"Configuration written to {path}")
    except CloudSweepError as e:
        _fail(f"Cannot create profile {name}: {e}")


@profile_app.command("remove")
def profile_remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile name to remove"),
):
    """Remove a profile."""
    state = _state(ctx)
    try:
        config = _load_config(state)
        config.remove_profile(name)
        config.write()
        console.print(f"✓ Profile '[bold]{escape(name)}[/bold]' removed", style="green")
    except CloudSweepError as e:
        _fail(str(e))


@profile_app.command("test")
def profile_test(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile name to test"),
):
    """Test a profile's authentication."""
    state = _state(ctx)
    try:
        config = _load_config(state)
        profile = config.get_profile(name)
        _connect(profile, state.debug)
        console.print(f"✓ Authenticated with profile '[bold]{escape(name)}[/bold]'", style="green")
    except CloudSweepError as e:
        _fail(str(e))


# Provider commands
provider_app = typer.Typer(help="Show supported providers and their resource types")
app.add_typer(provider_app, name="provider")


@provider_app.command("list")
def provider_list():
    """List providers."""
    for name in registry.names():
        console.print(name, markup=False, highlight=False)


@provider_app.command("describe")
def provider_describe(name: str = typer.Argument(..., help="Provider to describe")):
    """Describe provider resource types and settings."""
    try:
        provider_class = registry.get(name)
    except CloudSweepError as e:
        _fail(str(e))

    console.print("[bold]Resource types[/bold] (deletion order):")
    for resource_type in provider_class.RESOURCE_TYPES:
        console.print(f"  {escape(resource_type)}")
    console.print("[bold]Settings:[/bold]")
    for key, description in provider_class.REQUIRED_SETTINGS.items():
        console.print(f"  {escape(key)}: {escape(description)}")


# Config commands
config_app = typer.Typer(help="Show cloudsweep configuration")
app.add_typer(config_app, name="config")


@config_app.command("list")
def config_list(ctx: typer.Context):
    """List configuration options."""
    state = _state(ctx)
    try:
        config = _load_config(state)
    except CloudSweepError as e:
        _fail(str(e))

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Option", style="cyan")
    table.add_column("Value")
    table.add_row("configuration path", str(config.path))
    table.add_row("version", str(config.version))
    table.add_row("snapshot_folder_path", str(config.snapshot_folder_path))
    table.add_row("log_level", config.log_level)
    table.add_row("target_delay", str(config.target_delay))
    table.add_row("pass_delay", str(config.pass_delay))
    table.add_row("profiles", str(len(config.profiles)))
    console.print(table)


# Snapshot commands
snapshot_app = typer.Typer(help="Manage resource snapshots")
app.add_typer(snapshot_app, name="snapshot")


@snapshot_app.command("new")
def snapshot_new(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Snapshot name (alphanumeric, hyphens, underscores only)"),
    profiles: List[str] = typer.Argument(..., help="One or more profiles to snapshot"),
):
    """Create a new snapshot containing all resource ids."""
    state = _state(ctx)
    try:
        config = _load_config(state)
        storage = SnapshotStorage(config.snapshot_folder_path)
        snapshot = Snapshot(name=name, created_at=datetime.now(timezone.utc))
        snapshot.validate()
        if storage.exists(name):
            raise ConfigError(f"Snapshot {name} already exist")

        selected = [config.get_profile(profile_name) for profile_name in dict.fromkeys(profiles)]
        providers = [_connect(profile, state.debug) for profile in selected]

        for profile, provider in zip(selected, providers):
            console.print(f"📸 Reading resources of profile [bold]{escape(profile.name)}[/bold]...")
            objects = read_all_objects(provider)
            snapshot.data.append(SnapshotData(profile=profile.name, objects=objects))

        storage.save_snapshot(snapshot)
        total = sum(count_objects(data.objects) for data in snapshot.data)
        console.print(f"✓ Snapshot '[bold]{escape(name)}[/bold]' created ({total} objects)", style="green")
    except ValueError as e:
        _fail(str(e))
    except CloudSweepError as e:
        _fail(f"Snapshot failed: {e}")


@snapshot_app.command("list")
def snapshot_list(ctx: typer.Context):
    """List snapshots."""
    state = _state(ctx)
    try:
        config = _load_config(state)
        names = SnapshotStorage(config.snapshot_folder_path).list_snapshots()
    except CloudSweepError as e:
        _fail(str(e))

    if not names:
        console.print("No snapshots found", style="yellow")
        return
    for name in names:
        console.print(name, markup=False, highlight=False)


@snapshot_app.command("describe")
def snapshot_describe(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Snapshot name to describe"),
):
    """Describe a snapshot."""
    state = _state(ctx)
    try:
        config = _load_config(state)
        snapshot = SnapshotStorage(config.snapshot_folder_path).load_snapshot(name)
        console.print(str(snapshot), markup=False, highlight=False, end="")
    except FileNotFoundError as e:
        _fail(f"Snapshot not found: {e}")
    except CloudSweepError as e:
        _fail(str(e))


@snapshot_app.command("remove")
def snapshot_remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Snapshot name to remove"),
):
    """Remove a snapshot."""
    state = _state(ctx)
    try:
        config = _load_config(state)
        SnapshotStorage(config.snapshot_folder_path).delete_snapshot(name)
        console.print(f"✓ Snapshot '[bold]{escape(name)}[/bold]' removed", style="green")
    except FileNotFoundError as e:
        _fail(f"Error while deleting snapshot {name}: {e}")
    except CloudSweepError as e:
        _fail(str(e))


@snapshot_app.command("update")
def snapshot_update(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Snapshot name to update"),
    incremental: bool = typer.Option(
        False, "--incremental", "-i", help="Choose resource by resource which new resources to add"
    ),
):
    """Add resources created since a snapshot to that snapshot."""
    state = _state(ctx)
    try:
        config = _load_config(state)
        storage = SnapshotStorage(config.snapshot_folder_path)
        snapshot = storage.load_snapshot(name)
        profiles = [config.get_profile(data.profile) for data in snapshot.data]
        calculator = DiffCalculator(debug=state.debug)

        added = 0
        for data, profile in zip(snapshot.data, profiles):
            provider = _connect(profile, state.debug)
            diff = calculator.calculate(data.objects, read_all_objects(provider))
            if not diff.created:
                console.print(f"No new object in profile {escape(profile.name)}")
                continue

            additions = diff.created
            if incremental:
                selector = IncrementalSelector(reader=read_answer, console=console, describe=provider.describe)
                additions = selector.select(diff.created)
                if additions is None:
                    console.print("Update canceled, snapshot left unchanged", style="yellow")
                    raise typer.Exit(code=0)

            data.objects = merge_objects(data.objects, additions)
            added += count_objects(additions)

        if added == 0:
            console.print("Nothing to add", style="green")
            return

        storage.save_snapshot(snapshot)
        console.print(f"✓ Snapshot '[bold]{escape(name)}[/bold]' updated ({added} objects added)", style="green")
    except typer.Exit:
        raise
    except FileNotFoundError as e:
        _fail(f"Snapshot not found: {e}")
    except CloudSweepError as e:
        _fail(f"Snapshot update failed: {e}")


@app.command()
def clean(
    ctx: typer.Context,
    snapshot_name: str = typer.Argument(..., help="Snapshot to restore the profiles to"),
    plan: bool = typer.Option(False, "--plan", help="Only show what resource would be deleted"),
    auto_approve: bool = typer.Option(False, "--auto-approve", help="Approve resource deletion without confirmation"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format (with --plan or --auto-approve)"),
    timeout: Optional[str] = typer.Option(
        None, "--timeout", help="Exit with error after a specific duration (ex: 30s, 5m, 1.5h)"
    ),
    only_resource_types: Optional[str] = typer.Option(
        None, "--only-resource-types", help="Remove only these resource types (separated by ',')"
    ),
    exclude_resource_types: Optional[str] = typer.Option(
        None, "--exclude-resource-types", help="Remove all except these resource types (separated by ',')"
    ),
):
    """Delete resources created since a snapshot."""
    state = _state(ctx)
    try:
        _check_json_option(json_output, plan, auto_approve)
        timeout_seconds = parse_duration(timeout)
        only = split_types(only_resource_types)
        exclude = split_types(exclude_resource_types)
        build_resource_filter(only, exclude)

        config = _load_config(state, json_output)
        snapshot = SnapshotStorage(config.snapshot_folder_path).load_snapshot(snapshot_name)
        profiles = [config.get_profile(data.profile) for data in snapshot.data]
        resource_filter = build_resource_filter(only, exclude, _known_types(profiles))

        destroyer = _new_destroyer(config, state)
        calculator = DiffCalculator(debug=state.debug)
        for data, profile in zip(snapshot.data, profiles):
            provider = _connect(profile, state.debug)
            objects = read_all_objects(provider)
            if resource_filter is not None:
                objects = resource_filter.apply(objects)
            diff = calculator.calculate(data.objects, objects)
            destroyer.add(profile, provider, diff.created)

        _execute_destroyer(
            destroyer,
            plan=plan,
            auto_approve=auto_approve,
            json_output=json_output,
            timeout=timeout_seconds,
            message=(
                "Do you really want to delete newly created resources?\n"
                "  cloudsweep will delete all resources shown above."
            ),
        )
    except typer.Exit:
        raise
    except FileNotFoundError as e:
        _fail(f"Snapshot not found: {e}", json_output)
    except CloudSweepError as e:
        _fail(str(e), json_output)
    except Exception as e:
        logger.exception("Error in clean command")
        _fail(f"Error during clean: {e}", json_output, code=2)


@app.command()
def nuke(
    ctx: typer.Context,
    profiles: List[str] = typer.Argument(..., help="One or more profiles to empty"),
    plan: bool = typer.Option(False, "--plan", help="Only show what resource would be deleted"),
    auto_approve: bool = typer.Option(False, "--auto-approve", help="Approve resource deletion without confirmation"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format (with --plan or --auto-approve)"),
    timeout: Optional[str] = typer.Option(
        None, "--timeout", help="Exit with error after a specific duration (ex: 30s, 5m, 1.5h)"
    ),
    only_resource_types: Optional[str] = typer.Option(
        None, "--only-resource-types", help="Remove only these resource types (separated by ',')"
    ),
    exclude_resource_types: Optional[str] = typer.Option(
        None, "--exclude-resource-types", help="Remove all except these resource types (separated by ',')"
    ),
):
    """Delete ALL resources of the given profiles."""
    state = _state(ctx)
    try:
        _check_json_option(json_output, plan, auto_approve)
        timeout_seconds = parse_duration(timeout)
        only = split_types(only_resource_types)
        exclude = split_types(exclude_resource_types)
        build_resource_filter(only, exclude)

        config = _load_config(state, json_output)
        selected = [config.get_profile(name) for name in dict.fromkeys(profiles)]
        resource_filter = build_resource_filter(only, exclude, _known_types(selected))

        destroyer = _new_destroyer(config, state)
        for profile in selected:
            provider = _connect(profile, state.debug)
            objects = read_all_objects(provider)
            if resource_filter is not None:
                objects = resource_filter.apply(objects)
            destroyer.add(profile, provider, objects)

        _execute_destroyer(
            destroyer,
            plan=plan,
            auto_approve=auto_approve,
            json_output=json_output,
            timeout=timeout_seconds,
            message=(
                "Do you really want to delete ALL resources?\n"
                "  cloudsweep will delete all resources shown above."
            ),
        )
    except typer.Exit:
        raise
    except CloudSweepError as e:
        _fail(str(e), json_output)
    except Exception as e:
        logger.exception("Error in nuke command")
        _fail(f"Error during nuke: {e}", json_output, code=2)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
