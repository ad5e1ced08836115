"""PostgreSQL builders."""

import os
from collections.abc import Callable
from typing import Any

from core.errors.exceptions import InvalidArgumentError, MissingRequiredFieldError
from pipeline.common.builders import (
    ProducerFactoryBuilder,
    PublicationBuilder,
    SubscriptionBuilder,
    SubscriptionConfigurator,
    require_optional_min,
    require_text,
)
from pipeline.common.types import MessagePumpType
from pipeline.postgres.factories import PostgresProducerFactory
from pipeline.postgres.types import (
    DEFAULT_DATABASE_NAME,
    DEFAULT_INBOX_TABLE,
    DEFAULT_OUTBOX_TABLE,
    DEFAULT_QUEUE_TABLE,
    PostgresInboxConfig,
    PostgresLockConfig,
    PostgresOutboxConfig,
    PostgresPublication,
    PostgresSubscription,
    RelationalDatabaseConfiguration,
)


class RelationalDatabaseConfigurationBuilder:
    entity = "RelationalDatabaseConfiguration"

    def __init__(self):
        self._connection_string: str | None = None
        self._database_name = DEFAULT_DATABASE_NAME
        self._outbox_table_name = DEFAULT_OUTBOX_TABLE
        self._inbox_table_name = DEFAULT_INBOX_TABLE
        self._queue_store_table = DEFAULT_QUEUE_TABLE
        self._schema_name: str | None = None
        self._binary_message_payload = False

    def set_connection_string(self, connection_string: str | None) -> "RelationalDatabaseConfigurationBuilder":
        self._connection_string = connection_string
        return self

    def set_database_name(self, database_name: str) -> "RelationalDatabaseConfigurationBuilder":
        self._database_name = require_text("database_name", database_name)
        return self

    def set_outbox_table_name(self, table_name: str) -> "RelationalDatabaseConfigurationBuilder":
        self._outbox_table_name = require_text("outbox_table_name", table_name)
        return self

    def set_inbox_table_name(self, table_name: str) -> "RelationalDatabaseConfigurationBuilder":
        self._inbox_table_name = require_text("inbox_table_name", table_name)
        return self

    def set_queue_store_table(self, table_name: str) -> "RelationalDatabaseConfigurationBuilder":
        self._queue_store_table = require_text("queue_store_table", table_name)
        return self

    def set_schema_name(self, schema_name: str | None) -> "RelationalDatabaseConfigurationBuilder":
        self._schema_name = schema_name
        return self

    def set_binary_message_payload(self, enabled: bool) -> "RelationalDatabaseConfigurationBuilder":
        self._binary_message_payload = enabled
        return self

    def enable_binary_message_payload(self) -> "RelationalDatabaseConfigurationBuilder":
        return self.set_binary_message_payload(True)

    def disable_binary_message_payload(self) -> "RelationalDatabaseConfigurationBuilder":
        return self.set_binary_message_payload(False)

    def build(self) -> RelationalDatabaseConfiguration:
        if not self._connection_string:
            raise MissingRequiredFieldError("connection_string", self.entity)

        return RelationalDatabaseConfiguration(
            connection_string=self._connection_string,
            database_name=self._database_name,
            outbox_table_name=self._outbox_table_name,
            inbox_table_name=self._inbox_table_name,
            queue_store_table=self._queue_store_table,
            schema_name=self._schema_name,
            binary_message_payload=self._binary_message_payload,
        )


class PostgresPublicationBuilder(PublicationBuilder):
    entity = "PostgresPublication"
    publication_class = PostgresPublication

    def __init__(self, identity_resolver=None):
        super().__init__(identity_resolver)
        self._schema_name: str | None = None
        self._queue_store_table: str | None = None
        self._binary_message_payload: bool | None = None

    def set_schema_name(self, schema_name: str | None) -> "PostgresPublicationBuilder":
        self._schema_name = schema_name
        return self

    def set_queue_store_table(self, table_name: str | None) -> "PostgresPublicationBuilder":
        self._queue_store_table = table_name
        return self

    def set_binary_message_payload(self, enabled: bool | None) -> "PostgresPublicationBuilder":
        self._binary_message_payload = enabled
        return self

    def _publication_fields(self) -> dict:
        fields = super()._publication_fields()
        fields.update(
            schema_name=self._schema_name,
            queue_store_table=self._queue_store_table,
            binary_message_payload=self._binary_message_payload,
        )
        return fields


class PostgresSubscriptionBuilder(SubscriptionBuilder):
    """Postgres subscriptions poll a table: reactor pump, one performer per CPU."""

    entity = "PostgresSubscription"
    subscription_class = PostgresSubscription
    default_message_pump = MessagePumpType.REACTOR
    default_no_of_performers = os.cpu_count() or 1

    def __init__(self, identity_resolver=None):
        super().__init__(identity_resolver)
        self._schema_name: str | None = None
        self._queue_store_table: str | None = None
        self._binary_message_payload: bool | None = None
        self._visible_timeout_ms: int | None = None
        self._table_with_large_message = False

    def set_schema_name(self, schema_name: str | None) -> "PostgresSubscriptionBuilder":
        self._schema_name = schema_name
        return self

    def set_queue_store_table(self, table_name: str | None) -> "PostgresSubscriptionBuilder":
        self._queue_store_table = table_name
        return self

    def set_binary_message_payload(self, enabled: bool | None) -> "PostgresSubscriptionBuilder":
        self._binary_message_payload = enabled
        return self

    def set_visible_timeout(self, timeout_ms: int | None) -> "PostgresSubscriptionBuilder":
        self._visible_timeout_ms = require_optional_min("visible_timeout_ms", timeout_ms)
        return self

    def set_table_with_large_message(self, enabled: bool) -> "PostgresSubscriptionBuilder":
        self._table_with_large_message = enabled
        return self

    def enable_table_with_large_message(self) -> "PostgresSubscriptionBuilder":
        return self.set_table_with_large_message(True)

    def disable_table_with_large_message(self) -> "PostgresSubscriptionBuilder":
        return self.set_table_with_large_message(False)

    def _subscription_fields(self) -> dict:
        fields = super()._subscription_fields()
        fields.update(
            schema_name=self._schema_name,
            queue_store_table=self._queue_store_table,
            binary_message_payload=self._binary_message_payload,
            visible_timeout_ms=self._visible_timeout_ms,
            table_with_large_message=self._table_with_large_message,
        )
        return fields


class PostgresProducerFactoryBuilder(ProducerFactoryBuilder):
    entity = "PostgresProducerFactory"
    publication_builder_class = PostgresPublicationBuilder
    producer_factory_class = PostgresProducerFactory


class PostgresSubscriptionConfigurator(SubscriptionConfigurator):
    subscription_builder_class = PostgresSubscriptionBuilder


# =============================================================================
# Outbox, inbox, distributed lock
# =============================================================================


class _RelationalStoreBuilder:
    entity = "PostgresStore"
    config_class: type = PostgresOutboxConfig

    def __init__(self, configuration: RelationalDatabaseConfiguration | None = None):
        self._configuration = configuration

    @property
    def configuration(self) -> RelationalDatabaseConfiguration | None:
        return self._configuration

    def set_configuration(
        self,
        configuration: RelationalDatabaseConfiguration
        | Callable[[RelationalDatabaseConfigurationBuilder], Any]
        | None,
    ):
        """Set the configuration, or build one with a configure callback."""
        if configuration is None or isinstance(configuration, RelationalDatabaseConfiguration):
            self._configuration = configuration
        elif callable(configuration):
            builder = RelationalDatabaseConfigurationBuilder()
            configuration(builder)
            self._configuration = builder.build()
        else:
            raise InvalidArgumentError(
                "configuration",
                f"expected RelationalDatabaseConfiguration or a callable, "
                f"got {type(configuration).__name__}",
            )
        return self

    def build(self) -> Any:
        if self._configuration is None:
            raise MissingRequiredFieldError("configuration", self.entity)
        return self.config_class(self._configuration)


class PostgresOutboxBuilder(_RelationalStoreBuilder):
    entity = "PostgresOutbox"
    config_class = PostgresOutboxConfig


class PostgresInboxBuilder(_RelationalStoreBuilder):
    entity = "PostgresInbox"
    config_class = PostgresInboxConfig


class PostgresDistributedLockBuilder(_RelationalStoreBuilder):
    entity = "PostgresDistributedLock"
    config_class = PostgresLockConfig

    def set_configuration_if_missing(
        self, configuration: RelationalDatabaseConfiguration
    ) -> "PostgresDistributedLockBuilder":
        if self._configuration is None:
            self._configuration = configuration
        return self


__all__ = [
    "RelationalDatabaseConfigurationBuilder",
    "PostgresPublicationBuilder",
    "PostgresSubscriptionBuilder",
    "PostgresProducerFactoryBuilder",
    "PostgresSubscriptionConfigurator",
    "PostgresOutboxBuilder",
    "PostgresInboxBuilder",
    "PostgresDistributedLockBuilder",
]
