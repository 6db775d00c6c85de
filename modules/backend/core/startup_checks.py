"""
Startup Security Validation.

Checks security invariants before the application accepts traffic.
If any check fails, the application refuses to start with a clear
error message.

Called during FastAPI lifespan initialization when
`security_startup_checks_enabled` is set in features.yaml.
"""

from modules.backend.core.config import get_app_config, get_settings
from modules.backend.core.logging import get_logger

logger = get_logger(__name__)


class StartupSecurityError(RuntimeError):
    """One or more startup checks failed; the message lists them."""


def run_startup_checks() -> None:
    """
    Validate all security invariants at startup.

    Raises:
        StartupSecurityError: If any check fails
    """
    app_config = get_app_config()
    settings = get_settings()
    environment = app_config.application.environment
    is_production = environment == "production"

    errors: list[str] = []

    _check_secret_strength(settings, app_config.security, errors)
    _check_integration_secrets(settings, app_config, errors)
    _check_production_safety(app_config, is_production, errors)

    if errors:
        for error in errors:
            logger.error("Startup security check failed", extra={"check": error})
        raise StartupSecurityError(
            f"Startup blocked: {len(errors)} security check(s) failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    logger.info(
        "Startup security checks passed",
        extra={"environment": environment},
    )


def _check_secret_strength(settings, security_config, errors: list[str]) -> None:
    jwt_min = security_config.secrets_validation.jwt_secret_min_length
    if len(settings.jwt_secret) < jwt_min:
        errors.append(
            f"JWT_SECRET is {len(settings.jwt_secret)} chars, "
            f"minimum is {jwt_min}"
        )


def _check_integration_secrets(settings, app_config, errors: list[str]) -> None:
    """Validate that enabled integrations have their credentials configured."""
    features = app_config.features
    integrations = app_config.integrations

    if features.integration_microsoft_graph_enabled:
        graph = integrations.microsoft_graph
        if not settings.ms_graph_client_secret:
            errors.append(
                "integration_microsoft_graph_enabled is true but MS_GRAPH_CLIENT_SECRET is empty"
            )
        if not graph.tenant_id or not graph.client_id:
            errors.append("microsoft_graph.tenant_id and client_id must be set")

    if features.integration_bunny_enabled:
        if not settings.bunny_storage_api_key:
            errors.append(
                "integration_bunny_enabled is true but BUNNY_STORAGE_API_KEY is empty"
            )
        if not integrations.bunny.storage_zone or not integrations.bunny.cdn_host:
            errors.append("bunny.storage_zone and bunny.cdn_host must be set")


def _check_production_safety(app_config, is_production: bool, errors: list[str]) -> None:
    """Validate production environment safety constraints."""
    if not is_production:
        return

    app = app_config.application
    if app.debug:
        errors.append("debug is true in production environment")

    if app_config.features.api_detailed_errors:
        errors.append("api_detailed_errors is true in production environment")

    if app.docs_enabled:
        errors.append("docs_enabled is true in production environment")

    cors_config = app_config.security.cors
    if cors_config.enforce_in_production:
        origins = app.cors.origins
        localhost_origins = [o for o in origins if "localhost" in o]
        if localhost_origins:
            errors.append(
                f"CORS origins contain localhost in production: {localhost_origins}"
            )
