"""Transport selection.

Maps a transport name to its provider configurator class. Provider
packages are imported lazily so that selecting Kafka never loads the
Azure or Postgres SDK adapters and vice versa.

Architecture:
- PIPELINE_TRANSPORT env var selects the default transport: "eventhub"
  (default), "kafka" or "postgres"
- config.config.compose_from_config() uses create_configurator() for each
  provider section present in config.yaml
"""

import logging
import os
from enum import StrEnum

from pipeline.common.builders import require_enum
from pipeline.common.configurator import ProviderConfigurator

logger = logging.getLogger(__name__)


class TransportType(StrEnum):
    """Transport protocol type."""

    EVENTHUB = "eventhub"
    KAFKA = "kafka"
    POSTGRES = "postgres"


def get_transport_type() -> TransportType:
    """Get configured transport type from environment.

    Returns:
        TransportType from PIPELINE_TRANSPORT, EVENTHUB when unset or invalid
    """
    transport_str = os.getenv("PIPELINE_TRANSPORT", "eventhub").lower()
    try:
        return TransportType(transport_str)
    except ValueError:
        valid = ", ".join(f"'{t.value}'" for t in TransportType)
        logger.warning(
            f"Invalid PIPELINE_TRANSPORT value '{transport_str}'. "
            f"Must be one of {valid}. Defaulting to 'eventhub'."
        )
        return TransportType.EVENTHUB


def strip_entity_path(connection_string: str) -> str:
    """Remove EntityPath from a connection string if present.

    This normalizes entity-level connection strings to namespace-level
    so the SDK's `eventhub_name` parameter can be used instead.
    """
    parts = [
        part
        for part in connection_string.split(";")
        if part.strip() and not part.startswith("EntityPath=")
    ]
    return ";".join(parts)


def create_configurator(transport_type: TransportType | str | None = None) -> ProviderConfigurator:
    """Create an empty configurator for the given (or configured) transport."""
    if transport_type:
        transport_type = require_enum("transport_type", transport_type, TransportType)
    else:
        transport_type = get_transport_type()

    if transport_type == TransportType.KAFKA:
        from pipeline.kafka.configurator import KafkaConfigurator

        logger.info("Creating Kafka configurator")
        return KafkaConfigurator()

    if transport_type == TransportType.POSTGRES:
        from pipeline.postgres.configurator import PostgresConfigurator

        logger.info("Creating Postgres configurator")
        return PostgresConfigurator()

    from pipeline.eventhub.configurator import EventHubConfigurator

    logger.info("Creating Event Hub configurator")
    return EventHubConfigurator()


__all__ = [
    "TransportType",
    "get_transport_type",
    "strip_entity_path",
    "create_configurator",
]
