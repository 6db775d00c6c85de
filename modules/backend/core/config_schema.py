"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema   → application.yaml
    DatabaseSchema      → database.yaml
    LoggingSchema       → logging.yaml
    FeaturesSchema      → features.yaml
    SecuritySchema      → security.yaml
    ObservabilitySchema → observability.yaml
    ConcurrencySchema   → concurrency.yaml
    IntegrationsSchema  → integrations.yaml
    CompanySchema       → company.yaml
"""

from pydantic import BaseModel, ConfigDict


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: int


class CorsSchema(_StrictBase):
    origins: list[str]


class PaginationSchema(_StrictBase):
    default_limit: int
    max_limit: int


class TimeoutsSchema(_StrictBase):
    database: int
    external_api: int
    background: int


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    api_prefix: str
    docs_enabled: bool
    server: ServerSchema
    cors: CorsSchema
    pagination: PaginationSchema
    timeouts: TimeoutsSchema


# =============================================================================
# database.yaml
# =============================================================================


class BrokerSchema(_StrictBase):
    queue_name: str
    result_expiry_seconds: int


class RedisSchema(_StrictBase):
    host: str
    port: int
    db: int
    broker: BrokerSchema


class DatabaseSchema(_StrictBase):
    host: str
    port: int
    name: str
    user: str
    pool_size: int
    max_overflow: int
    pool_timeout: int
    pool_recycle: int
    echo: bool
    echo_pool: bool
    redis: RedisSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema
    quiet_loggers: dict[str, str] = {}


# =============================================================================
# features.yaml
# =============================================================================


class FeaturesSchema(_StrictBase):
    api_detailed_errors: bool
    api_request_logging: bool
    security_startup_checks_enabled: bool
    background_tasks_enabled: bool
    notifications_enabled: bool
    notifications_calendar_events_enabled: bool
    integration_microsoft_graph_enabled: bool
    integration_bunny_enabled: bool


# =============================================================================
# security.yaml
# =============================================================================


class JwtSchema(_StrictBase):
    algorithm: str
    access_token_expire_minutes: int
    audience: str


class RequestLimitsSchema(_StrictBase):
    max_body_size_bytes: int
    max_header_size_bytes: int


class SecretsValidationSchema(_StrictBase):
    jwt_secret_min_length: int


class CorsEnforcementSchema(_StrictBase):
    enforce_in_production: bool
    allow_methods: list[str]
    allow_headers: list[str]


class SecuritySchema(_StrictBase):
    jwt: JwtSchema
    request_limits: RequestLimitsSchema
    secrets_validation: SecretsValidationSchema
    cors: CorsEnforcementSchema


# =============================================================================
# observability.yaml
# =============================================================================


class HealthChecksSchema(_StrictBase):
    ready_timeout_seconds: int
    detailed_auth_required: bool


class ObservabilitySchema(_StrictBase):
    health_checks: HealthChecksSchema


# =============================================================================
# concurrency.yaml
# =============================================================================


class ThreadPoolSchema(_StrictBase):
    max_workers: int


class SemaphoresSchema(_StrictBase):
    database: int
    redis: int
    external_api: int


class ShutdownSchema(_StrictBase):
    drain_seconds: int


class ConcurrencySchema(_StrictBase):
    thread_pool: ThreadPoolSchema
    semaphores: SemaphoresSchema
    shutdown: ShutdownSchema


# =============================================================================
# integrations.yaml
# =============================================================================


class GraphRateLimitSchema(_StrictBase):
    max_requests: int
    time_window_seconds: int


class GraphRetrySchema(_StrictBase):
    max_retries: int
    base_delay_seconds: float


class MicrosoftGraphSchema(_StrictBase):
    base_url: str
    authority_url: str
    tenant_id: str
    client_id: str
    scope: str
    token_safety_margin_seconds: int
    calendar_timezone: str
    default_event_duration_hours: int
    shared_mailboxes: list[str]
    rate_limit: GraphRateLimitSchema
    retry: GraphRetrySchema


class BunnyCircuitBreakerSchema(_StrictBase):
    fail_max: int
    timeout_duration: int


class BunnySchema(_StrictBase):
    storage_zone: str
    region: str
    cdn_host: str
    circuit_breaker: BunnyCircuitBreakerSchema


class UploadsSchema(_StrictBase):
    max_image_size_bytes: int
    allowed_image_types: list[str]
    image_max_dimension: int
    image_quality: int


class DocumentsSchema(_StrictBase):
    max_versions: int


class IntegrationsSchema(_StrictBase):
    microsoft_graph: MicrosoftGraphSchema
    bunny: BunnySchema
    uploads: UploadsSchema
    documents: DocumentsSchema


# =============================================================================
# company.yaml
# =============================================================================


class CompanySchema(_StrictBase):
    name: str
    address: str
    phone: str
    email: str
    website: str
    tax_id: str
