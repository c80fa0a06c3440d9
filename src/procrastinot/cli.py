"""CLI entrypoint for procrastinot."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Annotated, Iterator, TextIO

import typer

from . import commands, config, render
from .commands import CommandResult, CommandShell
from .logging_setup import setup_logging

PROMPT = "> "

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Explicit settings file (default: nearest .procrastinot.yaml)"),
]
ScriptOption = Annotated[
    Path | None,
    typer.Option("--script", help="Read commands from a file instead of stdin"),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Print query results as JSON")]
FailFastOption = Annotated[
    bool,
    typer.Option("--fail-fast", help="Stop at the first failing command with exit code 1"),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option("--log-level", help="Override settings.log_level"),
]

app = typer.Typer(help="Hierarchical to-do manager with tree-aware search")


def _can_interact() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def _can_render_rich_output() -> bool:
    return sys.stdout.isatty()


def _print_rich(renderable) -> None:
    from rich.console import Console

    Console().print(renderable)


def _warn_config(message: str) -> None:
    typer.echo(f"Warning: {message}", err=True)


def _resolve_config_path(config_path: Path | None) -> Path | None:
    if config_path is not None:
        path = config_path.resolve()
        if not path.exists():
            raise typer.BadParameter(f"config file not found: {path}")
        return path
    return config.discover_config(Path.cwd())


def _load_settings(config_path: Path | None) -> config.Settings:
    return config.resolve_settings(_resolve_config_path(config_path), warn=_warn_config)


def _iter_lines(stream: TextIO, *, interactive: bool) -> Iterator[str]:
    if not interactive:
        yield from stream
        return
    while True:
        try:
            yield input(PROMPT)
        except (EOFError, KeyboardInterrupt):
            typer.echo("")
            return


def _emit(shell: CommandShell, result: CommandResult, *, as_json: bool) -> None:
    if not result.ok:
        typer.echo(f"Error: {result.message}", err=True)
        return
    view = result.view
    if view is not None and as_json:
        typer.echo(render.render_tree_json(shell.registry.forest, view))
    elif view is None or view.is_empty:
        typer.echo(result.message)
    elif _can_render_rich_output():
        _print_rich(render.render_tree_rich(shell.registry.forest, view))
    else:
        typer.echo(result.message)


def run_session(
    shell: CommandShell,
    lines: Iterator[str],
    *,
    as_json: bool = False,
    fail_fast: bool = False,
) -> bool:
    """Run command lines until exhausted or ``quit``. Returns False if any command failed."""
    all_ok = True
    for line in lines:
        result = shell.execute(line)
        if result is None:
            continue
        _emit(shell, result, as_json=as_json)
        if not result.ok:
            all_ok = False
            if fail_fast:
                break
        if not shell.running:
            break
    return all_ok


@app.callback(invoke_without_command=True)
def root_callback(ctx: typer.Context) -> None:
    """Start the interactive shell when no command is provided."""
    if ctx.invoked_subcommand is not None:
        return
    ctx.invoke(shell_cmd)


@app.command("shell")
def shell_cmd(
    script: ScriptOption = None,
    config_path: ConfigOption = None,
    as_json: JsonOption = False,
    fail_fast: FailFastOption = False,
    log_level: LogLevelOption = None,
) -> None:
    """Read task commands line by line and print each result."""
    settings = _load_settings(config_path)
    if log_level is not None:
        level = log_level.upper()
        if level not in config.VALID_LOG_LEVELS:
            raise typer.BadParameter(
                f"expected one of {', '.join(config.VALID_LOG_LEVELS)}",
                param_hint="--log-level",
            )
        settings.log_level = level
    setup_logging(settings.log_level)

    shell = CommandShell(settings=settings)
    if script is not None:
        try:
            with script.open(encoding="utf-8") as fh:
                ok = run_session(shell, iter(fh), as_json=as_json, fail_fast=fail_fast)
        except OSError as exc:
            typer.echo(f"Error: unable to read script {script}: {exc}", err=True)
            raise typer.Exit(code=1) from exc
    else:
        lines = _iter_lines(sys.stdin, interactive=_can_interact())
        ok = run_session(shell, lines, as_json=as_json, fail_fast=fail_fast)

    if fail_fast and not ok:
        raise typer.Exit(code=1)


@app.command("init")
def init_cmd(config_path: ConfigOption = None) -> None:
    """Write a default settings file."""
    target = (config_path or Path.cwd() / config.CONFIG_FILENAME).resolve()
    if config.write_default_config_if_missing(target):
        typer.echo(f"Created config: {target}")
    else:
        typer.echo(f"Using existing config: {target}")


@app.command("commands")
def commands_cmd() -> None:
    """List the commands understood by the shell."""
    if not _can_render_rich_output():
        typer.echo(commands.render_command_help())
        return

    from rich import box
    from rich.table import Table

    table = Table(box=box.SIMPLE_HEAVY, show_header=True, header_style="bold white", pad_edge=False)
    table.add_column("usage", style="bold", no_wrap=True)
    table.add_column("summary")
    for usage, summary in commands.command_rows():
        table.add_row(usage, summary)
    _print_rich(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
