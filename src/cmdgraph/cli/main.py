"""Root Typer application for the ``cmdgraph`` command."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Type

import typer
from rich.table import Table

from . import inspection
from .common import CLIError, configure_state, console, parse_override
from .matching import match_command

ExceptionHandler = Callable[[Exception], Any]


class CmdgraphTyper(typer.Typer):
    """Typer app that routes exceptions escaping non-standalone runs to handlers.

    Handlers are looked up along the exception's MRO, so a handler registered
    for a base class also covers its subclasses. A handler may return an
    exception (typically ``typer.Exit``) to have it raised instead.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._handlers: Dict[Type[Exception], ExceptionHandler] = {}

    def exception_handler(
        self, exception_type: Type[Exception]
    ) -> Callable[[ExceptionHandler], ExceptionHandler]:
        def register(handler: ExceptionHandler) -> ExceptionHandler:
            self._handlers[exception_type] = handler
            return handler

        return register

    def handler_for(self, exception: Exception) -> ExceptionHandler | None:
        for klass in type(exception).__mro__:
            handler = self._handlers.get(klass)
            if handler is not None:
                return handler
        return None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return super().__call__(*args, **kwargs)
        except Exception as exc:
            handler = self.handler_for(exc)
            if handler is None:
                raise
            outcome = handler(exc)
            if isinstance(outcome, BaseException):
                raise outcome from exc
            return outcome


app = CmdgraphTyper(
    add_completion=False,
    help="Render, export and match command-line definitions backed by an arena graph.",
    no_args_is_help=True,
)


@app.exception_handler(CLIError)
def handle_cli_error(exception: CLIError) -> typer.Exit:
    console.print(f"[bold red]Error:[/bold red] {exception.format_message()}")
    return typer.Exit(code=exception.exit_code)


@app.callback()
def main(
    ctx: typer.Context,
    environment: Optional[str] = typer.Option(
        None,
        "--environment",
        "-e",
        help="Configuration layer to apply on top of default.yaml.",
        show_default=False,
    ),
    override: List[str] = typer.Option(  # noqa: B008 - Typer callback signature
        [],
        "--override",
        "-o",
        metavar="KEY=VALUE",
        help="Settings override such as policies.matching.unknown_flags=error (repeatable).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log at DEBUG and print the resolved configuration summary.",
    ),
) -> None:
    """Resolve settings once for every subcommand."""

    state = configure_state(
        ctx,
        environment=environment,
        overrides=[parse_override(item) for item in override],
        verbose=verbose,
    )
    if verbose:
        summary = Table(title="CLI Context", show_header=False, box=None)
        summary.add_row("Environment", state.environment)
        summary.add_row("Config dir", str(state.settings.config_dir))
        summary.add_row("Policy version", state.settings.policy_version)
        if state.overrides:
            summary.add_row("Overrides", ", ".join(sorted(state.overrides)))
        console.print(summary)


app.add_typer(inspection.app, name="inspect", help="Inspect command hierarchies.")
app.command("match", context_settings={"ignore_unknown_options": True})(match_command)
