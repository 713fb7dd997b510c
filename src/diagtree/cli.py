# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line interface rendering diagnostic feeds as a grouped tree."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import typer

from .config import DiagtreeConfig, load_config
from .console import detect_tty, get_console_manager
from .errors import AdapterUnavailable, ConfigError
from .logging import configure_verbose_logging, fail, ok
from .normalizer import group_key_for, normalize
from .paths import absolute_path
from .session import ViewSession
from .terminal import BufferRegistry, ConsoleSurface, JsonFileSource, PanelHost, TerminalHost
from .tree import ExpansionSnapshot, build_tree, reconcile

EXIT_CLEAN: Final[int] = 0
EXIT_DIAGNOSTICS: Final[int] = 1
EXIT_FAILURE: Final[int] = 2

app = typer.Typer(name="diagtree", help="Render diagnostics grouped by file.", no_args_is_help=True)


@dataclass(slots=True)
class _Runtime:
    """Collaborators shared by the CLI commands.

    Attributes:
        config: Loaded configuration.
        registry: Buffer numbers of the files named in the feed.
        source: JSON feed whose relative file names are anchored at ``project_root``.
        host: Host services making display paths relative to ``working_root``.
        use_color: Whether console output is coloured.
        project_root: Directory configuration was loaded from.
        working_root: Directory display paths and ``--expand`` arguments are relative to.
    """

    config: DiagtreeConfig
    registry: BufferRegistry
    source: JsonFileSource
    host: TerminalHost
    use_color: bool
    project_root: Path
    working_root: Path


def _prepare(feed: Path, root: Path | None, color: bool | None, verbose: bool, **overrides: object) -> _Runtime:
    """Load configuration and wire the feed, registry and host.

    Args:
        feed: JSON diagnostics file.
        root: Project root, defaults to the current directory.
        color: Explicit colour preference, ``None`` to follow TTY detection.
        verbose: Attach a DEBUG handler to the package logger.
        **overrides: Configuration values given on the command line.

    Returns:
        _Runtime: Collaborators for the command.

    Raises:
        typer.Exit: With code 2 when the configuration is invalid.
    """

    if verbose:
        configure_verbose_logging()
    use_color = detect_tty() if color is None else color
    project_root = (root or Path.cwd()).expanduser().resolve()
    try:
        config = load_config(project_root, overrides)
    except ConfigError as exc:
        fail(str(exc), use_emoji=False, use_color=use_color)
        raise typer.Exit(code=EXIT_FAILURE) from exc
    working_root = config.working_root or project_root
    registry = BufferRegistry()
    source = JsonFileSource(feed.expanduser(), registry, base_dir=project_root)
    host = TerminalHost(registry, working_root=working_root, signs=config.signs, use_color=use_color)
    return _Runtime(config, registry, source, host, use_color, project_root, working_root)


def _expanded_keys(runtime: _Runtime, paths: list[str]) -> list[str]:
    """Return the group keys of files given relative to the working root.

    Args:
        runtime: Collaborators of the running command.
        paths: File paths passed with ``--expand``.

    Returns:
        list[str]: Group identities, registering unseen files.
    """

    return [
        group_key_for(runtime.registry.number_for(absolute_path(path, base_dir=runtime.working_root)))
        for path in paths
    ]


@app.command()
def show(
    feed: Path = typer.Argument(..., metavar="FILE", help="JSON file holding the diagnostics."),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root used for configuration and paths."),
    expand: list[str] | None = typer.Option(None, "--expand", "-e", help="Expand the group of this file."),
    expand_all: bool = typer.Option(False, "--expand-all", "-a", help="Expand every group."),
    title: str | None = typer.Option(None, "--title", help="Panel title, empty to hide it."),
    color: bool | None = typer.Option(None, "--color/--no-color", help="Force colour output on or off."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity to stderr."),
) -> None:
    """Print the diagnostics tree once.

    Exits with 0 when there are no diagnostics, 1 when there are, 2 when the
    feed or the configuration cannot be read.
    """

    runtime = _prepare(feed, root, color, verbose, title=title)
    try:
        raw = runtime.source.get_all()
    except AdapterUnavailable as exc:
        runtime.host.notify_error(str(exc))
        raise typer.Exit(code=EXIT_FAILURE) from exc

    result = normalize(raw, runtime.host)
    tree = build_tree(result.diagnostics)
    wanted = [group.group_key for group in tree] if expand_all else _expanded_keys(runtime, expand or [])
    reconcile(ExpansionSnapshot.of(*wanted), tree)

    console = get_console_manager().get(color=runtime.use_color, emoji=False)
    ConsoleSurface(console).draw(runtime.config.projector().render(tree).lines)
    if not result.diagnostics:
        ok("No diagnostics", use_emoji=False, use_color=runtime.use_color)
        raise typer.Exit(code=EXIT_CLEAN)
    raise typer.Exit(code=EXIT_DIAGNOSTICS)


@app.command()
def watch(
    feed: Path = typer.Argument(..., metavar="FILE", help="JSON file holding the diagnostics."),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root used for configuration and paths."),
    expand: list[str] | None = typer.Option(None, "--expand", "-e", help="Expand the group of this file."),
    interval: float | None = typer.Option(None, "--interval", "-i", min=0.01, help="Seconds between polls."),
    color: bool | None = typer.Option(None, "--color/--no-color", help="Force colour output on or off."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity to stderr."),
    max_polls: int | None = typer.Option(None, "--max-polls", hidden=True, min=0),
) -> None:
    """Keep the diagnostics tree on screen, redrawing it whenever the file changes."""

    runtime = _prepare(feed, root, color, verbose, poll_interval=interval)
    console = get_console_manager().get(color=runtime.use_color, emoji=False)

    def new_session() -> ViewSession:
        return ViewSession(
            runtime.source,
            runtime.host,
            lambda: ConsoleSurface(console, clear=True),
            projector=runtime.config.projector(),
            deferred_refresh=runtime.config.deferred_refresh,
        )

    panels = PanelHost(new_session)
    try:
        session = panels.open()
    except AdapterUnavailable as exc:
        runtime.host.notify_error(str(exc))
        raise typer.Exit(code=EXIT_FAILURE) from exc

    if expand:
        session.expand(_expanded_keys(runtime, expand))
    polls = 0
    try:
        while session.is_open and (max_polls is None or polls < max_polls):
            runtime.source.poll()
            session.process_pending()
            polls += 1
            time.sleep(runtime.config.poll_interval)
    except KeyboardInterrupt:
        pass
    finally:
        panels.close()


def main() -> None:
    """Run the CLI application."""

    app()


__all__ = ["app", "main"]
