"""CLI entry point for clickflow."""

import argparse
import sys

from rich.console import Console
from rich.table import Table

from clickflow.config import ServiceConfig, load_config
from clickflow.core.errors import FlowError
from clickflow.core.logging import ErrorIds, enable_file_logging, logError, set_log_level
from clickflow.core.orchestrator import FlowResult

console = Console()


def _print_result(result: FlowResult) -> None:
    table = Table(title=f"{result.flow} trace")
    table.add_column("Step", style="cyan")
    table.add_column("OK")
    table.add_column("Locator", style="dim")
    table.add_column("Technique")
    table.add_column("ms", justify="right")
    table.add_column("Error", style="red")

    for record in result.trace:
        attempt = record.attempt
        table.add_row(
            record.step,
            "[green]yes[/green]" if record.succeeded else "[red]no[/red]",
            attempt.candidate.describe() if attempt and attempt.candidate else "",
            attempt.technique.name if attempt and attempt.technique else "",
            f"{attempt.elapsed_ms:.0f}" if attempt else "",
            record.error or "",
        )
    console.print(table)

    if result.success:
        console.print(f"[green]Flow completed.[/green] Final URL: {result.final_url}")
    else:
        assert result.error is not None
        console.print(
            f"[red]Flow failed at {result.failed_step!r}[/red] "
            f"([bold]{result.error.kind.value}[/bold]): {result.error.message}"
        )


def _serve(config: ServiceConfig) -> None:
    from clickflow.server import create_app

    app = create_app(config)
    console.print(f"[bold cyan]clickflow[/bold cyan] listening on {config.host}:{config.port}")
    console.print(f"Environment: [dim]{config.env}[/dim]")
    console.print(f"Health check: http://{config.host}:{config.port}/health")
    app.run(host=config.host, port=config.port, threaded=True)


def _run_flow(args: argparse.Namespace, config: ServiceConfig) -> int:
    from clickflow.flows import click_play, login_signup, parse_login_request

    try:
        if args.command == "click-play":
            result = click_play(config)
        else:
            request = parse_login_request({"email": args.email, "otp": args.otp})
            result = login_signup(config, request)
    except FlowError as e:
        console.print(f"[red]{e.kind.value}[/red]: {e.message}")
        return 1

    _print_result(result)
    return 0 if result.success else 1


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="clickflow - browser flows behind a small HTTP service"
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window (default: headless)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level: debug, info, warning, error (default: from CLICKFLOW_LOG_LEVEL or info)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write debug logs to this file",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: PORT or 3000)")

    subparsers.add_parser("click-play", help="Run the click-play flow once")

    login = subparsers.add_parser("login", help="Run the login-signup flow once")
    login.add_argument("--email", required=True, help="Email address to submit")
    login.add_argument("--otp", default=None, help="One-time code, if already received")

    args = parser.parse_args(argv)

    try:
        config = load_config()
    except FlowError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        return 2

    overrides: dict[str, object] = {}
    if args.headed:
        overrides["headless"] = False
    if args.log_level:
        overrides["log_level"] = args.log_level
    if getattr(args, "host", None):
        overrides["host"] = args.host
    if getattr(args, "port", None):
        overrides["port"] = args.port
    if overrides:
        config = config.model_copy(update=overrides)

    set_log_level(config.log_level)
    if args.log_file:
        enable_file_logging(args.log_file)

    if args.command == "serve":
        _serve(config)
        return 0

    try:
        return _run_flow(args, config)
    except KeyboardInterrupt:
        logError(ErrorIds.KEYBOARD_INTERRUPT, "Flow interrupted by user")
        console.print("\n[yellow]Interrupted.[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
