#!/usr/bin/env python3
"""
Application Entry Script.

Main entry point for the messenger backend. All functionality is
accessible through command-line options.

Usage:
    python run.py --help
    python run.py --action server --verbose
    python run.py --action bot
    python run.py --action migrate
    python run.py --action health --debug
    python run.py --action config
    python run.py --action test --test-type unit
"""

import asyncio
import subprocess
import sys
from pathlib import Path

import click

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from messenger.backend.core.logging import get_logger, log_with_source, setup_logging


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


@click.command()
@click.option(
    "--action",
    type=click.Choice(["server", "bot", "migrate", "health", "config", "test", "info"]),
    default="info",
    help="Action to perform.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
@click.option(
    "--host",
    default=None,
    help="Server host (for server action).",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Server port (for server action).",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload (for server action).",
)
@click.option(
    "--test-type",
    type=click.Choice(["all", "unit", "integration"]),
    default="all",
    help="Test type to run (for test action).",
)
def main(
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    test_type: str,
) -> None:
    """
    Messenger Entry Point.

    Run the API server or the Telegram bot, apply migrations, check
    health, view configuration, or run tests.

    Examples:

        # Start development server
        python run.py --action server --reload --verbose

        # Run the Telegram bot in polling mode
        python run.py --action bot --verbose

        # Apply database migrations
        python run.py --action migrate
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")
    logger = get_logger(__name__)

    log_with_source(logger, "cli", "debug", "Starting application", action=action, log_level=log_level)

    if action == "server":
        run_server(logger, host, port, reload)
    elif action == "bot":
        run_bot(logger)
    elif action == "migrate":
        run_migrations(logger)
    elif action == "health":
        check_health(logger)
    elif action == "config":
        show_config(logger)
    elif action == "test":
        run_tests(logger, test_type)
    elif action == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the FastAPI server."""
    from messenger.backend.core.config import get_app_config

    server = get_app_config().application.server
    server_host = host or server.host
    server_port = port or server.port

    log_with_source(
        logger, "cli", "info", "Starting server",
        host=server_host, port=server_port, reload=reload,
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "messenger.backend.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]

    if reload:
        cmd.append("--reload")

    click.echo(f"Starting server at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        log_with_source(logger, "cli", "info", "Server stopped")
    except subprocess.CalledProcessError as e:
        log_with_source(logger, "cli", "error", "Server failed to start", exit_code=e.returncode)
        sys.exit(e.returncode)


def run_bot(logger) -> None:
    """Run the Telegram bot in long-polling mode."""
    from messenger.backend.core.config import get_app_config

    app_config = get_app_config()
    if not app_config.features.channel_telegram_enabled:
        click.echo(click.style("Telegram channel is disabled in features.yaml", fg="yellow"))
        sys.exit(1)
    if app_config.features.telegram_webhook_enabled:
        click.echo(click.style(
            "telegram_webhook_enabled is true; the bot runs inside the API server. "
            "Set it to false to use polling.",
            fg="yellow",
        ))
        sys.exit(1)

    if app_config.features.security_startup_checks_enabled:
        from messenger.backend.core.startup_checks import StartupSecurityError, run_startup_checks

        try:
            run_startup_checks()
        except StartupSecurityError as e:
            click.echo(click.style(str(e), fg="red"), err=True)
            sys.exit(1)

    async def _poll() -> None:
        from messenger.backend.core.database import dispose_engine
        from messenger.telegram.bot import create_bot, create_dispatcher

        bot = create_bot()
        dp = create_dispatcher()
        try:
            await bot.delete_webhook(drop_pending_updates=True)
            await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
        finally:
            await bot.session.close()
            await dispose_engine()

    log_with_source(logger, "telegram", "info", "Starting bot polling")
    click.echo("Bot is polling. Press Ctrl+C to stop\n")
    try:
        asyncio.run(_poll())
    except KeyboardInterrupt:
        log_with_source(logger, "telegram", "info", "Bot stopped")


def run_migrations(logger) -> None:
    """Apply Alembic migrations up to head."""
    from alembic import command
    from alembic.config import Config

    log_with_source(logger, "cli", "info", "Applying migrations")
    command.upgrade(Config(str(PROJECT_ROOT / "alembic.ini")), "head")
    click.echo(click.style("Database is up to date.", fg="green"))


def check_health(logger) -> None:
    """Check application health by testing imports, configuration and the database."""
    click.echo("Checking application health...\n")

    checks = []

    try:
        from messenger.backend.core.config import get_app_config
        app_config = get_app_config()
        checks.append(("YAML configuration", True, f"App: {app_config.application.name}"))
    except Exception as e:
        checks.append(("YAML configuration", False, str(e)))
        log_with_source(logger, "cli", "error", "Configuration failed", error=str(e))

    try:
        from messenger.backend.core.config import get_settings
        settings = get_settings()
        providers = [
            name for name, key in (
                ("anthropic", settings.anthropic_api_key),
                ("groq", settings.groq_api_key),
                ("telegram", settings.telegram_bot_token),
            ) if key
        ]
        checks.append(("Secrets", True, f"Providers: {', '.join(providers) or 'none'}"))
    except Exception as e:
        checks.append(("Secrets", False, str(e)))
        log_with_source(logger, "cli", "warning", "Secrets not configured", error=str(e))

    try:
        from messenger.backend.main import get_app
        checks.append(("FastAPI application", True, f"Title: {get_app().title}"))
    except Exception as e:
        checks.append(("FastAPI application", False, str(e)))
        log_with_source(logger, "cli", "error", "FastAPI app failed", error=str(e))

    try:
        from messenger.backend.api.health import check_database
        from messenger.backend.core.database import dispose_engine

        async def _db() -> dict:
            try:
                return await check_database()
            finally:
                await dispose_engine()

        db_status = asyncio.run(_db())
        checks.append(("Database", db_status["status"] == "healthy", db_status.get("error")))
    except Exception as e:
        checks.append(("Database", False, str(e)))
        log_with_source(logger, "cli", "error", "Database check failed", error=str(e))

    click.echo("Health Check Results:")
    click.echo("-" * 50)

    all_passed = True
    for name, passed, detail in checks:
        status = click.style("✓ PASS", fg="green") if passed else click.style("✗ FAIL", fg="red")
        detail_str = f" ({detail})" if detail else ""
        click.echo(f"  {status}  {name}{detail_str}")
        if not passed:
            all_passed = False

    click.echo("-" * 50)

    if all_passed:
        click.echo(click.style("\nAll checks passed!", fg="green"))
    else:
        click.echo(click.style("\nSome checks failed. See details above.", fg="yellow"))
        sys.exit(1)


def show_config(logger) -> None:
    """Display loaded configuration. Secrets are never printed."""
    click.echo("Application Configuration:\n")

    try:
        from messenger.backend.core.config import get_app_config

        app_config = get_app_config()
        sections = {
            "Application": app_config.application,
            "Database": app_config.database,
            "Logging": app_config.logging,
            "Features": app_config.features,
            "Plans": app_config.plans,
            "AI": app_config.ai,
        }
        for title, section in sections.items():
            click.echo(f"{title} Settings (from YAML):")
            click.echo("-" * 40)
            for key, value in section.model_dump().items():
                click.echo(f"  {key}: {value}")
            click.echo()

        log_with_source(logger, "cli", "info", "Configuration displayed")

    except Exception as e:
        log_with_source(logger, "cli", "error", "Failed to load configuration", error=str(e))
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)


def run_tests(logger, test_type: str) -> None:
    """Run the test suite."""
    log_with_source(logger, "cli", "info", "Running tests", type=test_type)

    cmd = [sys.executable, "-m", "pytest"]
    if test_type == "unit":
        cmd.append("tests/unit")
    elif test_type == "integration":
        cmd.append("tests/integration")
    else:
        cmd.append("tests/")
    cmd.append("-v")

    click.echo(f"Running: {' '.join(cmd)}\n")
    result = subprocess.run(cmd)
    sys.exit(result.returncode)


def show_info(logger) -> None:
    """Display application information."""
    from messenger.backend.core.config import get_app_config

    app = get_app_config().application
    click.echo(app.name)
    click.echo("=" * 40)
    click.echo(f"Version: {app.version}")
    click.echo(f"Description: {app.description}")
    click.echo()
    click.echo("Available Actions:")
    click.echo("  --action server    Start the API server")
    click.echo("  --action bot       Run the Telegram bot (polling mode)")
    click.echo("  --action migrate   Apply database migrations")
    click.echo("  --action health    Check application health")
    click.echo("  --action config    Display configuration")
    click.echo("  --action test      Run test suite")
    click.echo("  --action info      Show this information")
    click.echo()
    click.echo("Logging Options:")
    click.echo("  --verbose, -v      Enable INFO level logging")
    click.echo("  --debug, -d        Enable DEBUG level logging")

    log_with_source(logger, "cli", "debug", "Info displayed")


if __name__ == "__main__":
    main()
