"""Thin CLI wrapper for nasher.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler

from nasher import __version__
from nasher.config import Settings, get_settings, print_settings_json
from nasher.types import AnswerMode, BuildStatus, Command

if TYPE_CHECKING:
    from nasher.project.models import ProjectConfig

app = typer.Typer(
    name="nasher",
    help="nasher - build Neverwinter Nights modules, haks and erfs from source",
    no_args_is_help=True,
)
console = Console()


class ConsolePrompter:
    """Prompter backed by the terminal, honoring --yes/--no/--default."""

    def __init__(self, mode: AnswerMode = AnswerMode.ASK) -> None:
        self.mode = mode

    def ask(self, question: str, default: str = "", allow_blank: bool = True) -> str:
        if self.mode is not AnswerMode.ASK and (default or allow_blank):
            return default
        while True:
            answer: str = typer.prompt(
                question, default=default, show_default=bool(default)
            )
            if answer.strip() or allow_blank:
                return answer
            console.print("[yellow]This value cannot be blank[/yellow]")

    def confirm(
        self, question: str, default: bool = False, repeat: bool = False
    ) -> bool:
        if self.mode is AnswerMode.DEFAULT or (
            repeat and self.mode is not AnswerMode.ASK
        ):
            return default
        if self.mode is AnswerMode.YES:
            return True
        if self.mode is AnswerMode.NO:
            return False
        return typer.confirm(question, default=default)


@dataclass
class CliState:
    """Options shared by every command."""

    settings: Settings
    prompter: ConsolePrompter
    verbose: bool = False


def configure_logging(level: str) -> None:
    """Route log records through rich at the given level."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
        ],
        force=True,
    )


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn fatal nasher errors into a red message and exit code 1."""
    from nasher.builds.toolchain import ToolExecutionError
    from nasher.project.parser import ConfigError
    from nasher.project.paths import FilesystemError
    from nasher.project.resolver import TargetResolutionError

    try:
        yield
    except (
        ConfigError,
        FilesystemError,
        TargetResolutionError,
        ToolExecutionError,
    ) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from None


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"nasher version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug output and more detail"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only show errors"),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Automatically answer yes to all prompts"),
    ] = False,
    no: Annotated[
        bool,
        typer.Option("--no", "-n", help="Automatically answer no to all prompts"),
    ] = False,
    default: Annotated[
        bool,
        typer.Option("--default", "-d", help="Accept the default for all prompts"),
    ] = False,
) -> None:
    """nasher - build Neverwinter Nights modules, haks and erfs from source."""
    settings = get_settings()
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = settings.log_level
    configure_logging(level)

    mode = AnswerMode.ASK
    if yes:
        mode = AnswerMode.YES
    elif no:
        mode = AnswerMode.NO
    elif default:
        mode = AnswerMode.DEFAULT

    ctx.obj = CliState(
        settings=settings, prompter=ConsolePrompter(mode), verbose=verbose
    )


def _load_project(state: CliState) -> tuple[Path, "ProjectConfig"]:
    """Find the package root and load the config cascade."""
    from nasher.project.loader import load_configs
    from nasher.project.paths import package_config_path, require_package_root

    root = require_package_root()
    config = load_configs(
        [state.settings.global_config, package_config_path(root)],
        state.prompter,
        state.settings,
    )
    return root, config


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective runtime settings."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings))
    else:
        timeout = settings.tool_timeout or "(none)"
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Paths:[/bold]")
        console.print(f"  Global config:       {settings.global_config}")
        console.print(f"  Install directory:   {settings.install_dir}")
        console.print()
        console.print("[bold]Tools:[/bold]")
        console.print(f"  Compiler:            {settings.compiler_binary}")
        console.print(f"  Archive tool:        {settings.erf_binary}")
        console.print(f"  GFF converter:       {settings.gff_binary}")
        console.print(f"  Tool timeout:        {timeout}")
        console.print()
        console.print("[bold]Operational:[/bold]")
        console.print(f"  Log level:           {settings.log_level}")


@app.command()
def init(
    ctx: typer.Context,
    directory: Annotated[
        Path,
        typer.Argument(help="Directory to initialize"),
    ] = Path("."),
    file: Annotated[
        Path | None,
        typer.Argument(help="Archive to unpack into the new project"),
    ] = None,
) -> None:
    """Create a new nasher project."""
    from nasher.builds.service import init_project
    from nasher.builds.toolchain import Toolchain

    state: CliState = ctx.obj
    with handle_errors():
        init_project(
            directory.resolve(),
            state.prompter,
            state.settings,
            Toolchain.from_settings(state.settings),
            archive=file,
        )
    console.print(f"[green]Project initialized in {directory}[/green]")


@app.command("list")
def list_targets(ctx: typer.Context) -> None:
    """List the targets of the current project."""
    from nasher.project.resolver import TargetResolutionError

    state: CliState = ctx.obj
    with handle_errors():
        _, project = _load_project(state)
        if not project.targets:
            raise TargetResolutionError(
                "No targets found. Please check your nasher.cfg file.",
                None,
                code="no_targets",
            )

    if not state.verbose:
        for name in project.target_names():
            console.print(name)
        return

    for i, target in enumerate(project.targets.values()):
        if i:
            console.print()
        console.print(f"[bold]Target:[/bold]      [green]{target.name}[/green]")
        console.print(f"[bold]Description:[/bold] {target.description}")
        console.print(f"[bold]File:[/bold]        {target.file}")
        console.print("[bold]Sources:[/bold]")
        for source in target.sources:
            console.print(f"  {source}")


@app.command()
def unpack(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Archive to unpack")],
    directory: Annotated[
        Path | None,
        typer.Option("--dir", help="Destination (default: the project's src dir)"),
    ] = None,
) -> None:
    """Unpack an erf, hak or mod file into the project's source tree."""
    from nasher.builds.service import unpack_archive
    from nasher.builds.toolchain import Toolchain
    from nasher.project.paths import get_src_dir

    state: CliState = ctx.obj
    with handle_errors():
        root, _ = _load_project(state)
        dest = directory.resolve() if directory else get_src_dir(root)
        written = unpack_archive(
            file,
            dest,
            Toolchain.from_settings(state.settings),
            cache_root=root,
        )
    console.print(f"[green]Unpacked {len(written)} file(s) into {dest}[/green]")


def _build(ctx: typer.Context, command: Command, target_name: str | None) -> None:
    """Run the build pipeline for the compile, pack and install commands."""
    from nasher.builds.service import run_target
    from nasher.builds.toolchain import Toolchain
    from nasher.project.resolver import resolve_target

    state: CliState = ctx.obj
    with handle_errors():
        root, project = _load_project(state)
        target = resolve_target(project, target_name)
        outcome = run_target(
            command,
            project,
            target,
            root,
            state.prompter,
            Toolchain.from_settings(state.settings),
        )

    for warning in outcome.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")

    if outcome.status is BuildStatus.DECLINED:
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit(code=0)

    if outcome.installed is not None:
        console.print(f"[green]Installed {outcome.installed}[/green]")
    elif outcome.artifact is not None:
        console.print(f"[green]Packed {target.file}[/green]")
    else:
        console.print(f"[green]Compiled target {target.name}[/green]")


TargetArg = Annotated[
    str | None,
    typer.Argument(help="Target to build (default: the first target)"),
]


@app.command()
def compile(ctx: typer.Context, target: TargetArg = None) -> None:
    """Stage and compile a target's sources."""
    _build(ctx, Command.COMPILE, target)


@app.command()
def pack(ctx: typer.Context, target: TargetArg = None) -> None:
    """Compile, convert and pack a target into its output file."""
    _build(ctx, Command.PACK, target)


@app.command()
def install(ctx: typer.Context, target: TargetArg = None) -> None:
    """Pack a target and install it into the game's user directory."""
    _build(ctx, Command.INSTALL, target)


@app.command()
def dump(ctx: typer.Context) -> None:
    """Print the merged project configuration as YAML."""
    state: CliState = ctx.obj
    with handle_errors():
        _, project = _load_project(state)
    typer.echo(yaml.safe_dump(project.model_dump(mode="json"), sort_keys=False))
