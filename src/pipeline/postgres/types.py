"""PostgreSQL configuration, entity and store values.

Every Postgres value carries a RelationalDatabaseConfiguration. Store
configs open their own asyncpg pool through create_pool(); nothing here
connects until that coroutine is awaited.
"""

from dataclasses import dataclass
from typing import Any

from pipeline.common.types import Publication, Subscription

DEFAULT_DATABASE_NAME = "pipeline"
DEFAULT_OUTBOX_TABLE = "Outbox"
DEFAULT_INBOX_TABLE = "Inbox"
DEFAULT_QUEUE_TABLE = "Queue"


@dataclass(frozen=True)
class RelationalDatabaseConfiguration:
    connection_string: str
    database_name: str = DEFAULT_DATABASE_NAME
    outbox_table_name: str = DEFAULT_OUTBOX_TABLE
    inbox_table_name: str = DEFAULT_INBOX_TABLE
    queue_store_table: str = DEFAULT_QUEUE_TABLE
    schema_name: str | None = None
    binary_message_payload: bool = False

    def pool_kwargs(self) -> dict[str, Any]:
        """asyncpg.create_pool() arguments; the schema goes on the search path."""
        kwargs: dict[str, Any] = {"dsn": self.connection_string}
        if self.schema_name:
            kwargs["server_settings"] = {"search_path": f"{self.schema_name},public"}
        return kwargs

    def __repr__(self) -> str:
        return (
            f"RelationalDatabaseConfiguration(database_name={self.database_name!r}, "
            f"schema_name={self.schema_name!r})"
        )


async def create_pool(configuration: RelationalDatabaseConfiguration, **kwargs: Any) -> Any:
    import asyncpg

    return await asyncpg.create_pool(**configuration.pool_kwargs(), **kwargs)


@dataclass(frozen=True)
class PostgresConnection:
    configuration: RelationalDatabaseConfiguration


@dataclass(frozen=True)
class PostgresPublication(Publication):
    schema_name: str | None = None
    queue_store_table: str | None = None
    binary_message_payload: bool | None = None


@dataclass(frozen=True)
class PostgresSubscription(Subscription):
    schema_name: str | None = None
    queue_store_table: str | None = None
    binary_message_payload: bool | None = None
    visible_timeout_ms: int | None = None
    table_with_large_message: bool = False


@dataclass(frozen=True)
class PostgresOutboxConfig:
    configuration: RelationalDatabaseConfiguration

    @property
    def table_name(self) -> str:
        return self.configuration.outbox_table_name

    async def create_pool(self, **kwargs: Any) -> Any:
        return await create_pool(self.configuration, **kwargs)


@dataclass(frozen=True)
class PostgresInboxConfig:
    configuration: RelationalDatabaseConfiguration

    @property
    def table_name(self) -> str:
        return self.configuration.inbox_table_name

    async def create_pool(self, **kwargs: Any) -> Any:
        return await create_pool(self.configuration, **kwargs)


@dataclass(frozen=True)
class PostgresLockConfig:
    """Advisory-lock based distributed lock."""

    configuration: RelationalDatabaseConfiguration

    async def create_pool(self, **kwargs: Any) -> Any:
        return await create_pool(self.configuration, **kwargs)


__all__ = [
    "DEFAULT_DATABASE_NAME",
    "DEFAULT_OUTBOX_TABLE",
    "DEFAULT_INBOX_TABLE",
    "DEFAULT_QUEUE_TABLE",
    "RelationalDatabaseConfiguration",
    "create_pool",
    "PostgresConnection",
    "PostgresPublication",
    "PostgresSubscription",
    "PostgresOutboxConfig",
    "PostgresInboxConfig",
    "PostgresLockConfig",
]
