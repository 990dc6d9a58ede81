"""Database service for RingCentral token persistence."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from ringcentral_fax.domain import TokenSet

from .interfaces import TokenStorePort


class SQLAlchemyTokenStoreService(TokenStorePort):
    """SQLAlchemy implementation of the `ringcentral_token` table operations."""

    def __init__(self, engine: Engine):
        """Initialize token store service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when engine is invalid.
        """

        if engine is None:
            raise ValueError("engine must not be None")

        self._engine = engine

    def db_token_load(self, client_id: str) -> TokenSet | None:
        """Return the stored token set for one client id.

        Args:
            client_id: RingCentral application client id.

        Returns:
            TokenSet | None: Stored token set, or None when nothing is stored.

        Raises:
            ValueError: Raised when client id is blank.
            RuntimeError: Raised when the read fails.
        """

        normalized_client_id = self._db_token_validate_client_id(client_id)
        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        "SELECT access_token, refresh_token, token_type, expires_in, "
                        "refresh_token_expires_in, scope, owner_id "
                        "FROM ringcentral_token WHERE client_id = :client_id"
                    ),
                    {"client_id": normalized_client_id},
                ).mappings().fetchone()
        except SQLAlchemyError as error:
            raise RuntimeError("ringcentral token load failed") from error

        if row is None:
            return None
        return self._db_token_map_row(row)

    def db_token_save(self, client_id: str, token_set: TokenSet) -> None:
        """Insert or replace the stored token set for one client id.

        Args:
            client_id: RingCentral application client id.
            token_set: Token material to persist.

        Returns:
            None: Writes the row as a side effect.

        Raises:
            ValueError: Raised when client id is blank.
            RuntimeError: Raised when the write fails.
        """

        normalized_client_id = self._db_token_validate_client_id(client_id)
        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO ringcentral_token ("
                        "client_id, access_token, refresh_token, token_type, expires_in, "
                        "refresh_token_expires_in, scope, owner_id, updated_at_utc"
                        ") VALUES ("
                        ":client_id, :access_token, :refresh_token, :token_type, :expires_in, "
                        ":refresh_token_expires_in, :scope, :owner_id, CURRENT_TIMESTAMP"
                        ") "
                        "ON CONFLICT (client_id) DO UPDATE SET "
                        "access_token = excluded.access_token, "
                        "refresh_token = excluded.refresh_token, "
                        "token_type = excluded.token_type, "
                        "expires_in = excluded.expires_in, "
                        "refresh_token_expires_in = excluded.refresh_token_expires_in, "
                        "scope = excluded.scope, "
                        "owner_id = excluded.owner_id, "
                        "updated_at_utc = CURRENT_TIMESTAMP"
                    ),
                    {"client_id": normalized_client_id, **token_set.to_payload()},
                )
        except SQLAlchemyError as error:
            raise RuntimeError("ringcentral token save failed") from error

    def db_token_delete(self, client_id: str) -> bool:
        """Delete the stored token set for one client id.

        Args:
            client_id: RingCentral application client id.

        Returns:
            bool: True when a row was deleted.

        Raises:
            ValueError: Raised when client id is blank.
            RuntimeError: Raised when the delete fails.
        """

        normalized_client_id = self._db_token_validate_client_id(client_id)
        try:
            with self._engine.begin() as connection:
                result = connection.execute(
                    text("DELETE FROM ringcentral_token WHERE client_id = :client_id"),
                    {"client_id": normalized_client_id},
                )
        except SQLAlchemyError as error:
            raise RuntimeError("ringcentral token delete failed") from error
        return result.rowcount > 0

    def _db_token_validate_client_id(self, client_id: str) -> str:
        normalized_client_id = (client_id or "").strip()
        if not normalized_client_id:
            raise ValueError("client_id must not be blank")
        return normalized_client_id

    def _db_token_map_row(self, row: Mapping[str, Any]) -> TokenSet:
        return TokenSet(
            access_token=str(row["access_token"]),
            refresh_token=row["refresh_token"],
            token_type=str(row["token_type"]),
            expires_in=row["expires_in"],
            refresh_token_expires_in=row["refresh_token_expires_in"],
            scope=row["scope"],
            owner_id=row["owner_id"],
        )
