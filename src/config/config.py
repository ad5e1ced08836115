"""Pipeline configuration from YAML file.

Loads from config/config.yaml. The `pipeline:` section holds one optional
sub-section per provider (kafka, eventhub, postgres) plus composer options:

    pipeline:
      strict_slots: false
      kafka:
        connection: {...}        # connection builder settings
        publications: [...]      # one mapping per publication
        subscriptions: [...]     # one mapping per subscription
      eventhub:
        connection: {...}
        inbox: {...}             # true, or inbox builder settings
        distributed_lock: true
      postgres:
        connection: {...}
        outbox: true

Setting keys are builder setter names without the "set_" prefix
(bootstrap_servers -> set_bootstrap_servers). A `data_type` key on a
publication or subscription is applied first, so explicit names win.

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.
"""

import json
import logging
import os
import re
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from core.errors.exceptions import ConfigurationError, InvalidArgumentError
from core.utils.json_serializers import json_serializer
from pipeline.common.composer import PipelineComposer
from pipeline.common.configurator import STORE_SLOTS, ProviderConfigurator
from pipeline.common.transport import TransportType, create_configurator

# Configure module logger
logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        # Support both ${VAR} and ${VAR:-default} syntax
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge overlay into base dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# Default config file: config.yaml next to this module
DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"

PROVIDERS = tuple(transport.value for transport in TransportType)
PIPELINE_KEYS = {"strict_slots", *PROVIDERS}
PROVIDER_KEYS = {"connection", "publications", "subscriptions", *STORE_SLOTS}


@dataclass
class PipelineConfig:
    """Composer configuration, one dict per provider section.

    An empty section means the provider is not used.
    """

    kafka: Dict[str, Any] = field(default_factory=dict)
    eventhub: Dict[str, Any] = field(default_factory=dict)
    postgres: Dict[str, Any] = field(default_factory=dict)
    strict_slots: bool = False

    @property
    def providers(self) -> List[str]:
        return [provider for provider in PROVIDERS if getattr(self, provider)]

    def validate(self) -> None:
        """Validate configuration for correctness and constraints.

        Checks required connection fields, entity identifiers and numeric
        ranges.
        """
        if not self.providers:
            raise ValueError("At least one provider section (kafka, eventhub, postgres) is required")

        for provider in self.providers:
            section = getattr(self, provider)
            unknown = set(section) - PROVIDER_KEYS
            if unknown:
                raise ValueError(
                    f"{provider}: unknown keys {sorted(unknown)}. "
                    f"Allowed: {sorted(PROVIDER_KEYS)}"
                )

            connection = section.get("connection") or {}
            if not connection:
                raise ValueError(f"{provider}.connection is required")

            for index, publication in enumerate(section.get("publications") or []):
                self._validate_publication(publication, f"{provider}.publications[{index}]")

            for index, subscription in enumerate(section.get("subscriptions") or []):
                self._validate_subscription(subscription, f"{provider}.subscriptions[{index}]")

        if self.kafka:
            self._validate_kafka(self.kafka)
        if self.eventhub:
            self._validate_eventhub(self.eventhub)
        if self.postgres:
            self._validate_postgres(self.postgres)

    @staticmethod
    def _validate_enum(
        settings: Dict[str, Any],
        key: str,
        valid_values: List[Any],
        context: str
    ) -> None:
        """Validate that a setting's value is in a list of valid values."""
        if key in settings and settings[key] not in valid_values:
            raise ValueError(
                f"{context}: {key} must be one of {valid_values}, "
                f"got '{settings[key]}'"
            )

    @staticmethod
    def _validate_min(
        settings: Dict[str, Any],
        key: str,
        min_value: float,
        inclusive: bool,
        context: str
    ) -> None:
        """Validate that a setting's value meets a minimum threshold."""
        if key in settings:
            value = settings[key]
            if inclusive and value < min_value:
                raise ValueError(
                    f"{context}: {key} must be >= {min_value}, got {value}"
                )
            elif not inclusive and value <= min_value:
                raise ValueError(
                    f"{context}: {key} must be > {min_value}, got {value}"
                )

    def _validate_publication(self, settings: Dict[str, Any], context: str) -> None:
        if not (settings.get("topic") or settings.get("data_type")):
            raise ValueError(f"{context}: topic or data_type is required")
        self._validate_enum(settings, "make_channels", ["create", "validate", "assume"], context)

    def _validate_subscription(self, settings: Dict[str, Any], context: str) -> None:
        if not settings.get("data_type"):
            for key in ("name", "channel_name", "routing_key"):
                if not settings.get(key) and not (key == "routing_key" and settings.get("topic")):
                    raise ValueError(f"{context}: {key} is required when data_type is not set")

        self._validate_min(settings, "buffer_size", 1, inclusive=True, context=context)
        self._validate_min(settings, "number_of_performers", 1, inclusive=True, context=context)
        self._validate_min(settings, "requeue_count", -1, inclusive=True, context=context)
        self._validate_min(settings, "unacceptable_message_limit", 0, inclusive=True, context=context)
        self._validate_enum(settings, "message_pump_type", ["proactor", "reactor"], context)
        self._validate_enum(settings, "make_channels", ["create", "validate", "assume"], context)

    def _validate_kafka(self, section: Dict[str, Any]) -> None:
        connection = section["connection"]
        if not connection.get("bootstrap_servers"):
            raise ValueError("bootstrap_servers is required in kafka.connection section")
        self._validate_enum(
            connection,
            "security_protocol",
            ["PLAINTEXT", "SSL", "SASL_PLAINTEXT", "SASL_SSL"],
            "kafka.connection",
        )

        for slot in STORE_SLOTS:
            if section.get(slot):
                raise ValueError(f"kafka: {slot} is not supported by the Kafka provider")

        for index, publication in enumerate(section.get("publications") or []):
            context = f"kafka.publications[{index}]"
            self._validate_enum(publication, "replication", ["0", "1", "all", 0, 1], context)
            self._validate_min(publication, "linger_ms", 0, inclusive=True, context=context)

        for index, subscription in enumerate(section.get("subscriptions") or []):
            context = f"kafka.subscriptions[{index}]"
            self._validate_enum(subscription, "offset_default", ["earliest", "latest"], context)
            self._validate_enum(
                subscription,
                "partition_assignment_strategy",
                ["roundrobin", "range", "sticky"],
                context,
            )
            if "session_timeout" in subscription and "max_poll_interval" in subscription:
                session_timeout = subscription["session_timeout"]
                max_poll_interval = subscription["max_poll_interval"]
                if session_timeout >= max_poll_interval:
                    raise ValueError(
                        f"{context}: session_timeout ({session_timeout}) must be < "
                        f"max_poll_interval ({max_poll_interval})"
                    )

    def _validate_eventhub(self, section: Dict[str, Any]) -> None:
        connection = section["connection"]
        if not connection.get("connection_string"):
            raise ValueError("connection_string is required in eventhub.connection section")
        self._validate_enum(
            connection, "transport_type", ["Amqp", "AmqpOverWebsocket"], "eventhub.connection"
        )

        if section.get("outbox"):
            raise ValueError("eventhub: outbox is not supported by the Event Hub provider")

        for slot in ("inbox", "distributed_lock"):
            store = section.get(slot)
            if not store:
                continue
            store = store if isinstance(store, dict) else {}
            if not (store.get("storage_connection_string") or connection.get("storage_connection_string")):
                raise ValueError(
                    f"eventhub.{slot} requires storage_connection_string "
                    "(in eventhub.connection or the store section)"
                )

        lock = section.get("distributed_lock")
        if isinstance(lock, dict) and "lease_duration" in lock:
            lease = lock["lease_duration"]
            if lease != -1 and not 15 <= lease <= 60:
                raise ValueError(
                    f"eventhub.distributed_lock: lease_duration must be between 15 and 60 "
                    f"or -1, got {lease}"
                )

    def _validate_postgres(self, section: Dict[str, Any]) -> None:
        if not section["connection"].get("connection_string"):
            raise ValueError("connection_string is required in postgres.connection section")

        for index, subscription in enumerate(section.get("subscriptions") or []):
            self._validate_min(
                subscription, "visible_timeout", 0, inclusive=True,
                context=f"postgres.subscriptions[{index}]",
            )


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> PipelineConfig:
    """Load pipeline configuration from config.yaml file.

    Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\n" f"Expected file: config/config.yaml"
        )

    logger.info(f"Loading configuration from file: {config_path}")
    yaml_data = load_yaml(config_path)
    yaml_data = _expand_env_vars(yaml_data)

    if "pipeline" not in yaml_data:
        raise ValueError(
            "Invalid config file: missing 'pipeline:' section\n"
            "See src/config/config.yaml for correct structure"
        )

    pipeline_config = yaml_data["pipeline"] or {}

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        pipeline_config = _deep_merge(pipeline_config, overrides)

    unknown = set(pipeline_config) - PIPELINE_KEYS
    if unknown:
        raise ValueError(
            f"Invalid config file: unknown keys in 'pipeline:' section: {sorted(unknown)}"
        )

    config = PipelineConfig(
        kafka=pipeline_config.get("kafka") or {},
        eventhub=pipeline_config.get("eventhub") or {},
        postgres=pipeline_config.get("postgres") or {},
        strict_slots=bool(pipeline_config.get("strict_slots", False)),
    )

    logger.debug(f"Configuration loaded successfully:")
    logger.debug(f"  - Providers configured: {config.providers}")
    logger.debug(f"  - Strict slots: {config.strict_slots}")

    logger.debug("Validating configuration...")
    config.validate()
    logger.debug("Configuration validation passed")

    return config


_pipeline_config: Optional[PipelineConfig] = None


def get_config() -> PipelineConfig:
    """Get or load the singleton pipeline config instance."""
    global _pipeline_config
    if _pipeline_config is None:
        _pipeline_config = load_config()
    return _pipeline_config


def set_config(config: PipelineConfig) -> None:
    """Set the singleton pipeline config instance (useful for testing)."""
    global _pipeline_config
    _pipeline_config = config


def reset_config() -> None:
    """Reset the singleton config instance (forces reload on next get_config() call)."""
    global _pipeline_config
    _pipeline_config = None


# =============================================================================
# Composition
# =============================================================================


def apply_settings(builder: Any, settings: Dict[str, Any], context: str) -> Any:
    """Call builder.set_<key>(value) for every setting.

    data_type is applied first. List values are passed as separate
    arguments (set_bootstrap_servers("a:9092", "b:9092")).

    Raises:
        InvalidArgumentError: the builder has no setter for a key
    """
    settings = dict(settings)
    data_type = settings.pop("data_type", None)
    if data_type is not None:
        builder.set_data_type(data_type)

    for key, value in settings.items():
        setter = getattr(builder, f"set_{key}", None)
        if setter is None:
            raise InvalidArgumentError(
                key, f"{context}: {type(builder).__name__} has no setting '{key}'"
            )
        if isinstance(value, list):
            setter(*value)
        else:
            setter(value)
    return builder


def _configure_provider(
    configurator: ProviderConfigurator, section: Dict[str, Any], provider: str
) -> None:
    configurator.set_connection(
        lambda builder: apply_settings(builder, section["connection"], f"{provider}.connection")
    )

    publications = section.get("publications") or []
    if publications:

        def add_publications(producers):
            for index, settings in enumerate(publications):
                context = f"{provider}.publications[{index}]"
                producers.add_publication(
                    lambda builder, s=settings, c=context: apply_settings(builder, s, c)
                )

        configurator.use_publications(add_publications)

    subscriptions = section.get("subscriptions") or []
    if subscriptions:

        def add_subscriptions(consumers):
            for index, settings in enumerate(subscriptions):
                context = f"{provider}.subscriptions[{index}]"
                consumers.add_subscription(
                    lambda builder, s=settings, c=context: apply_settings(builder, s, c)
                )

        configurator.use_subscriptions(add_subscriptions)

    for slot in STORE_SLOTS:
        store = section.get(slot)
        if not store:
            continue
        use_store = getattr(configurator, f"use_{slot}")
        if isinstance(store, dict):
            use_store(
                lambda builder, s=store, c=f"{provider}.{slot}": apply_settings(builder, s, c)
            )
        else:
            use_store()


def compose_from_config(config: Optional[PipelineConfig] = None) -> PipelineComposer:
    """Create a PipelineComposer with one configurator per provider section.

    Nothing is finalized here; call build() on the result.
    """
    if config is None:
        config = get_config()

    composer = PipelineComposer(strict_slots=config.strict_slots)
    for provider in config.providers:
        configurator = create_configurator(provider)
        _configure_provider(configurator, getattr(config, provider), provider)
        composer.using(configurator)

    logger.info(
        "Composed pipeline from configuration",
        extra={"configurator_count": len(config.providers)},
    )
    return composer


def _cli_main() -> int:
    """CLI entry point for config validation and debugging."""
    import argparse

    from dotenv import load_dotenv

    parser = argparse.ArgumentParser(
        description="Pipeline Configuration Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate configuration
  python -m config.config --validate

  # Show merged configuration
  python -m config.config --show-merged

  # Compose and build the pipeline registration (no connections are opened)
  python -m config.config --compose

  # Use custom config file and .env file
  python -m config.config --config /path/to/config.yaml --env-file .env.dev --validate

  # JSON output for automation
  python -m config.config --validate --json

  # Enable debug logging
  python -m config.config --validate --verbose
        """,
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration structure and completeness",
    )
    parser.add_argument(
        "--show-merged",
        action="store_true",
        help="Display merged configuration as YAML",
    )
    parser.add_argument(
        "--compose",
        action="store_true",
        help="Compose the pipeline and build its registration",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.yaml file (default: src/config/config.yaml)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Path to .env file (default: search from the working directory)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format instead of human-readable",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
    )

    if not (args.validate or args.show_merged or args.compose):
        parser.print_help()
        return 0

    if args.env_file:
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    try:
        config = load_config(config_path=args.config)
        output = {}

        if args.validate:
            # Validation happens during load_config(), if we got here it passed
            if args.json:
                output["validation"] = {
                    "passed": True,
                    "errors": [],
                }
            else:
                print("✓ Configuration validation passed")
                for provider in config.providers:
                    print(f"  - {provider}: OK")

        if args.show_merged:
            if args.json:
                output["merged_config"] = asdict(config)
            else:
                print("\nConfiguration:")
                print("=" * 80)
                print(yaml.dump({"pipeline": asdict(config)}, default_flow_style=False, sort_keys=False))
                print("=" * 80)

        if args.compose:
            registration = compose_from_config(config).build()
            summary = {
                "producers": len(registration.producers),
                "publications": [p.topic for p in registration.publications],
                "subscriptions": [s.name for s in registration.subscriptions],
                "outbox": repr(registration.outbox) if registration.outbox else None,
                "inbox": repr(registration.inbox) if registration.inbox else None,
                "distributed_lock": (
                    repr(registration.distributed_lock) if registration.distributed_lock else None
                ),
            }
            if args.json:
                output["registration"] = summary
            else:
                print("\nPipeline registration:")
                print(yaml.dump(summary, default_flow_style=False, sort_keys=False))

        if args.json:
            print(json.dumps(output, indent=2, default=json_serializer))

        return 0

    except FileNotFoundError as e:
        if args.json:
            print(json.dumps({"error": str(e)}))
        else:
            print(f"✗ Error: {e}", file=sys.stderr)
        return 1

    except (ValueError, ConfigurationError) as e:
        if args.json:
            print(json.dumps({"error": str(e)}))
        else:
            print(f"✗ Validation error: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        if args.json:
            print(json.dumps({"error": f"Unexpected error: {e}"}))
        else:
            print(f"✗ Unexpected error: {e}", file=sys.stderr)
            if args.verbose:
                import traceback

                traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(_cli_main())
