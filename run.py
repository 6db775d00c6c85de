#!/usr/bin/env python3
"""
Application Entry Script.

Main entry point for the survey CRM backend. All functionality is
accessible through command-line options.

Usage:
    python run.py --help
    python run.py --action server --verbose
    python run.py --action health --debug
    python run.py --action config
    python run.py --action test --test-type unit
    python run.py --action create-admin --email admin@example.com
"""

import asyncio
import subprocess
import sys
from pathlib import Path

import click

# Ensure project root is in path for absolute imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from modules.backend.core.logging import bind_source, get_logger, setup_logging


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
    type=click.Choice(["server", "health", "config", "test", "info", "create-admin"]),
    default="info",
    help="Action to perform.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging).")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output (DEBUG level logging).")
@click.option("--host", default=None, help="Server host (for server action).")
@click.option("--port", default=None, type=int, help="Server port (for server action).")
@click.option("--reload", is_flag=True, help="Enable auto-reload (for server action).")
@click.option(
    "--test-type",
    type=click.Choice(["all", "unit", "integration"]),
    default="all",
    help="Test type to run (for test action).",
)
@click.option("--coverage", is_flag=True, help="Run tests with coverage (for test action).")
@click.option("--email", default=None, help="Admin email (for create-admin action).")
@click.option("--name", default=None, help="Admin display name (for create-admin action).")
def main(
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    test_type: str,
    coverage: bool,
    email: str | None,
    name: str | None,
) -> None:
    """
    Survey CRM Backend Entry Point.

    Run the application server, check health, view configuration,
    run tests, or create the first administrator.

    Examples:

        # Start development server
        python run.py --action server --reload --verbose

        # Check application health
        python run.py --action health --debug

        # Run unit tests with coverage
        python run.py --action test --test-type unit --coverage

        # Create an administrator (password is prompted)
        python run.py --action create-admin --email admin@example.com
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")
    bind_source("cli")
    logger = get_logger(__name__)

    logger.debug("Starting application", extra={"action": action, "log_level": log_level})

    if action == "server":
        run_server(logger, host, port, reload)
    elif action == "health":
        check_health(logger)
    elif action == "config":
        show_config(logger)
    elif action == "test":
        run_tests(logger, test_type, coverage)
    elif action == "create-admin":
        create_admin(logger, email, name)
    elif action == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the FastAPI development server."""
    from modules.backend.core.config import get_app_config

    server = get_app_config().application.server
    server_host = host or server.host
    server_port = port or server.port

    logger.info(
        "Starting server",
        extra={"host": server_host, "port": server_port, "reload": reload},
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "modules.backend.main:app",
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
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def check_health(logger) -> None:
    """Check application health by loading configuration and the application."""
    click.echo("Checking application health...\n")

    checks = []

    try:
        from modules.backend.core.config import get_app_config

        app_config = get_app_config()
        checks.append(("YAML configuration", True, f"App: {app_config.application.name}"))
    except Exception as e:
        checks.append(("YAML configuration", False, str(e)))
        logger.error("Configuration failed", extra={"error": str(e)})

    try:
        from modules.backend.core.config import get_settings

        get_settings()
        checks.append(("Secrets (config/.env)", True, None))
    except Exception as e:
        checks.append(("Secrets (config/.env)", False, str(e)))
        logger.error("Secrets failed", extra={"error": str(e)})

    try:
        from modules.backend.models import Base

        checks.append(("Database models", True, f"{len(Base.metadata.tables)} tables"))
    except Exception as e:
        checks.append(("Database models", False, str(e)))
        logger.error("Database models failed", extra={"error": str(e)})

    try:
        from modules.backend.main import get_app

        app = get_app()
        checks.append(("FastAPI application", True, f"{len(app.routes)} routes"))
    except Exception as e:
        checks.append(("FastAPI application", False, str(e)))
        logger.error("FastAPI app failed", extra={"error": str(e)})

    try:
        from modules.backend.core.startup_checks import run_startup_checks

        run_startup_checks()
        checks.append(("Startup security checks", True, None))
    except Exception as e:
        checks.append(("Startup security checks", False, str(e)))

    click.echo("Health Check Results:")
    click.echo("-" * 50)

    all_passed = True
    for check_name, passed, detail in checks:
        status = click.style("✓ PASS", fg="green") if passed else click.style("✗ FAIL", fg="red")
        detail_str = f" ({detail})" if detail else ""
        click.echo(f"  {status}  {check_name}{detail_str}")
        if not passed:
            all_passed = False

    click.echo("-" * 50)

    if all_passed:
        click.echo(click.style("\nAll checks passed!", fg="green"))
    else:
        click.echo(click.style("\nSome checks failed. See details above.", fg="yellow"))
        sys.exit(1)


def _echo_section(values: dict, indent: int = 2) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_section(value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def show_config(logger) -> None:
    """Display loaded configuration. Secrets live in config/.env and are not shown."""
    click.echo("Application Configuration:\n")

    try:
        from modules.backend.core.config import get_app_config

        app_config = get_app_config()
        sections = [
            ("Application", app_config.application),
            ("Database", app_config.database),
            ("Logging", app_config.logging),
            ("Feature Flags", app_config.features),
            ("Integrations", app_config.integrations),
            ("Company", app_config.company),
        ]
        for title, section in sections:
            click.echo(f"{title} (from YAML):")
            click.echo("-" * 40)
            _echo_section(section.model_dump())
            click.echo()

        logger.info("Configuration displayed successfully")

    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)


def run_tests(logger, test_type: str, coverage: bool) -> None:
    """Run the test suite."""
    logger.info("Running tests", extra={"type": test_type, "coverage": coverage})

    cmd = [sys.executable, "-m", "pytest"]

    if test_type == "unit":
        cmd.append("tests/unit")
    elif test_type == "integration":
        cmd.append("tests/integration")
    else:
        cmd.append("tests/")

    cmd.append("-v")

    if coverage:
        cmd.extend(["--cov=modules/backend", "--cov-report=term-missing"])

    click.echo(f"Running: {' '.join(cmd)}\n")

    try:
        result = subprocess.run(cmd)
        sys.exit(result.returncode)
    except FileNotFoundError:
        logger.error("pytest not found. Install with: pip install -e '.[test]'")
        sys.exit(1)


async def _create_admin(email: str, password: str, name: str | None):
    from modules.backend.core.database import dispose_engine, get_session_factory
    from modules.backend.models.user import UserRole
    from modules.backend.services.user import UserService

    try:
        async with get_session_factory()() as session:
            user = await UserService(session).create_user(
                email=email,
                password=password,
                name=name,
                role=UserRole.ADMIN.value,
            )
            await session.commit()
            return user
    finally:
        await dispose_engine()


def create_admin(logger, email: str | None, name: str | None) -> None:
    """Create an ADMIN user. The password is prompted for."""
    from modules.backend.core.exceptions import ApplicationError

    email = email or click.prompt("Email")
    password = click.prompt("Password", hide_input=True, confirmation_prompt=True)

    try:
        user = asyncio.run(_create_admin(email, password, name))
    except ApplicationError as e:
        logger.error("Admin creation failed", extra={"email": email, "error": e.message})
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        sys.exit(1)

    logger.info("Admin created", extra={"user_id": user.id})
    click.echo(click.style(f"Administrator {user.email} created ({user.id})", fg="green"))


def show_info(logger) -> None:
    """Display application information."""
    from modules.backend.core.config import get_app_config

    app_settings = get_app_config().application
    click.echo(app_settings.name)
    click.echo("=" * 40)
    click.echo(f"Version: {app_settings.version}")
    click.echo(f"Description: {app_settings.description}")

    click.echo()
    click.echo("Available Actions:")
    click.echo("  --action server        Start the development server")
    click.echo("  --action health        Check application health")
    click.echo("  --action config        Display configuration")
    click.echo("  --action test          Run test suite")
    click.echo("  --action create-admin  Create an administrator")
    click.echo("  --action info          Show this information")
    click.echo()
    click.echo("Logging Options:")
    click.echo("  --verbose, -v          Enable INFO level logging")
    click.echo("  --debug, -d            Enable DEBUG level logging")
    click.echo()
    click.echo("Background worker:")
    click.echo("  taskiq worker modules.backend.tasks.worker:broker")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()
