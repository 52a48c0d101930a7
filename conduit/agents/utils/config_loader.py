"""
Loading and validation of capability-server configurations.

Two shapes are accepted:

- a list of server records::

    [{"id": "calc", "name": "Calculator", "transport_type": "stdio",
      "command": "python", "args": ["calc_server.py"]}]

- the ``mcpServers`` mapping used by MCP clients::

    {"mcpServers": {"calc": {"command": "python", "args": ["calc_server.py"]},
                    "search": {"url": "http://localhost:8000/mcp"}}}
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Union

from pydantic import ValidationError

from ..core.enums import TransportType
from ..core.exceptions import ConfigurationError
from ..core.models import ServerConfig

logger = logging.getLogger(__name__)

ConfigSource = Union[str, Path, Sequence[Mapping[str, Any]], Mapping[str, Any]]

_RENAMED_KEYS = {
    "url": "address",
    "transport": "transport_type",
    "type": "transport_type",
}


class ServerConfigValidator:
    """Validator for capability-server configurations."""

    def __init__(self, supported_transports: Sequence[str] = tuple(t.value for t in TransportType)):
        self._supported_transports = set(supported_transports)

    def validate_server_config(self, config: ServerConfig) -> List[str]:
        """Validate one server configuration.

        Args:
            config: Server configuration to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if config.transport_type not in self._supported_transports:
            errors.append(f"Unsupported transport type: {config.transport_type}")
        elif config.transport_type == TransportType.STDIO.value:
            if not config.command:
                errors.append("Command is required for stdio transport")
        elif config.transport_type == TransportType.NETWORK.value:
            if not config.address:
                errors.append("Address is required for network transport")

        return errors

    def validate_server_configs(self, configs: Sequence[ServerConfig]) -> List[str]:
        """Validate a list of server configurations.

        Returns:
            List of validation errors, each prefixed with its server id
        """
        errors = []
        seen = set()
        for config in configs:
            if config.id in seen:
                errors.append(f"{config.id}: Duplicate server id")
            seen.add(config.id)
            errors.extend(f"{config.id}: {error}" for error in self.validate_server_config(config))
        return errors


def validate_server_configs(configs: Sequence[ServerConfig]) -> List[str]:
    return ServerConfigValidator().validate_server_configs(configs)


def _from_mcp_servers(servers: Mapping[str, Any]) -> List[Dict[str, Any]]:
    records = []
    for server_id, entry in servers.items():
        if not isinstance(entry, Mapping):
            raise ConfigurationError("Server entry must be an object", server_id=server_id)

        record: Dict[str, Any] = {"id": server_id, "name": server_id}
        for key, value in entry.items():
            key = _RENAMED_KEYS.get(key, key)
            if key == "disabled":
                record["enabled"] = not value
            elif key in ServerConfig.model_fields:
                record[key] = value
            else:
                logger.debug(f"Ignoring unknown key '{key}' for server '{server_id}'")

        if "transport_type" not in record:
            record["transport_type"] = (
                TransportType.NETWORK.value if record.get("address") else TransportType.STDIO.value
            )
        records.append(record)
    return records


def _read_source(source: ConfigSource) -> Any:
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to read server configuration from {path}: {e}") from e
    return source


def load_server_configs(source: ConfigSource) -> List[ServerConfig]:
    """
    Load server configurations from a JSON file path or already parsed data.

    Malformed records and duplicate ids raise. Servers whose transport is
    incomplete are kept and logged; the connection manager rejects them
    when they are first used.

    Raises:
        ConfigurationError: If the source cannot be read or parsed
    """
    data = _read_source(source)

    if isinstance(data, Mapping):
        if "mcpServers" not in data or not isinstance(data["mcpServers"], Mapping):
            raise ConfigurationError("Server configuration object must contain an 'mcpServers' mapping")
        records = _from_mcp_servers(data["mcpServers"])
    elif isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
        records = list(data)
    else:
        raise ConfigurationError(f"Unsupported server configuration type: {type(data).__name__}")

    configs = []
    for index, record in enumerate(records):
        try:
            configs.append(record if isinstance(record, ServerConfig) else ServerConfig.model_validate(record))
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid server configuration at index {index}: {e}",
                context={"index": index}
            ) from e

    seen = set()
    for config in configs:
        if config.id in seen:
            raise ConfigurationError(f"Duplicate server id: {config.id}", server_id=config.id)
        seen.add(config.id)

    for error in validate_server_configs(configs):
        logger.warning(f"Server configuration problem: {error}")

    logger.info(f"Loaded {len(configs)} server configuration(s)")
    return configs
