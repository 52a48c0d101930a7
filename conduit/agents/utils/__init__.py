"""
Utility functions for the tool-orchestration layer.
"""

from .config_loader import ServerConfigValidator, load_server_configs, validate_server_configs
from .logging_config import configure_logging, LOG_FORMAT
from .responses import respond, error_response, success_response, status_code_for

__all__ = [
    "ServerConfigValidator",
    "load_server_configs",
    "validate_server_configs",
    "configure_logging",
    "LOG_FORMAT",
    "respond",
    "error_response",
    "success_response",
    "status_code_for",
]
