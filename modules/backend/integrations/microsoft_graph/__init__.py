# Microsoft Graph integration
from modules.backend.integrations.microsoft_graph.app_auth import GraphAppClient
from modules.backend.integrations.microsoft_graph.client import MicrosoftGraphClient
from modules.backend.integrations.microsoft_graph.errors import (
    MicrosoftGraphError,
    handle_graph_error,
    to_application_error,
)
from modules.backend.integrations.microsoft_graph.rate_limiter import GraphRateLimiter

__all__ = [
    "GraphAppClient",
    "GraphRateLimiter",
    "MicrosoftGraphClient",
    "MicrosoftGraphError",
    "handle_graph_error",
    "to_application_error",
]
