"""Registry of Notion database connections — exactly one is active."""

from __future__ import annotations

import logging
import uuid

from .config import get_config
from .models.inputs import TargetConnection
from .models.schema import FieldSchema

logger = logging.getLogger(__name__)

ENV_CONNECTION_NAME = "Default (environment)"


class ConnectionRegistry:
    """In-memory connections plus each connection's fetched schema."""

    def __init__(self) -> None:
        self._connections: dict[str, TargetConnection] = {}
        self._schemas: dict[str, dict[str, FieldSchema]] = {}
        self.active_id: str | None = None

    def add(
        self,
        name: str,
        api_key: str,
        database_id: str,
        system_prompt: str | None = None,
    ) -> TargetConnection:
        """Register a connection and make it the active one."""
        connection = TargetConnection(
            id=uuid.uuid4().hex[:12],
            name=name,
            api_key=api_key,
            database_id=database_id,
            system_prompt=system_prompt or None,
        )
        self._connections[connection.id] = connection
        self.active_id = connection.id
        logger.info("Added connection %s (%s)", connection.id, name)
        return connection

    def get(self, connection_id: str) -> TargetConnection:
        """Look up a connection.

        Raises:
            KeyError: Unknown connection ID.
        """
        try:
            return self._connections[connection_id]
        except KeyError:
            raise KeyError(f"Connection {connection_id} not found") from None

    def activate(self, connection_id: str) -> TargetConnection:
        connection = self.get(connection_id)
        self.active_id = connection_id
        return connection

    def remove(self, connection_id: str) -> TargetConnection | None:
        """Drop a connection. Returns the connection that is active afterwards.

        Removing the active connection activates the first remaining one.
        """
        self.get(connection_id)
        del self._connections[connection_id]
        self._schemas.pop(connection_id, None)
        if self.active_id == connection_id:
            self.active_id = next(iter(self._connections), None)
        return self.active

    @property
    def active(self) -> TargetConnection | None:
        if self.active_id is None:
            return None
        return self._connections.get(self.active_id)

    def resolve(self, connection_id: str | None = None) -> TargetConnection:
        """Return the named connection, or the active one.

        Raises:
            KeyError: Unknown ID, or no connection configured at all.
        """
        if connection_id:
            return self.get(connection_id)
        connection = self.active
        if connection is None:
            raise KeyError("No Notion connection configured. Use notion_connect first.")
        return connection

    def list(self) -> list[TargetConnection]:
        return list(self._connections.values())

    def set_schema(self, connection_id: str, schema: dict[str, FieldSchema]) -> None:
        self._schemas[connection_id] = schema

    def schema(self, connection_id: str) -> dict[str, FieldSchema] | None:
        return self._schemas.get(connection_id)

    def seed_from_env(self) -> TargetConnection | None:
        """Register ``NOTION_API_KEY``/``NOTION_DATABASE_ID`` if both are set."""
        cfg = get_config()
        if not cfg.notion_api_key or not cfg.notion_database_id:
            return None
        for connection in self._connections.values():
            if connection.database_id == cfg.notion_database_id:
                return connection
        return self.add(ENV_CONNECTION_NAME, cfg.notion_api_key, cfg.notion_database_id)

    def __len__(self) -> int:
        return len(self._connections)


# Module-level singleton
connection_registry = ConnectionRegistry()
