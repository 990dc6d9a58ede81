"""Token store readiness check backing the `/health` endpoint."""

from typing import Final

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from ringcentral_fax.domain import HealthStatus

from .interfaces import DatabaseHealthPort

# Selecting from the table, not `SELECT 1`, so an unapplied migration reports as down.
_TOKEN_TABLE_PROBE_SQL: Final[str] = "SELECT 1 FROM ringcentral_token LIMIT 1"


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Verify that the `ringcentral_token` table is reachable and migrated."""

    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the token store URL with the password masked."""

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Read from the token table once.

        Returns:
            HealthStatus: `ok` when the table answers; detail says whether a token is stored.

        Raises:
            ConnectionError: Raised when the database is unreachable or the table is missing.
        """

        try:
            with self._engine.connect() as connection:
                stored_row = connection.execute(text(_TOKEN_TABLE_PROBE_SQL)).first()
        except SQLAlchemyError as error:
            raise ConnectionError(
                "token store check failed: ringcentral_token is unreachable or not migrated"
            ) from error

        if stored_row is None:
            return HealthStatus(status="ok", detail="token store ready; no token stored")
        return HealthStatus(status="ok", detail="token store ready; token stored")
