"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules.
"""

from typing import Protocol

from ringcentral_fax.domain import HealthStatus, TokenSet


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


class TokenStorePort(Protocol):
    """Port definition for persisting the latest RingCentral token set per client."""

    def db_token_load(self, client_id: str) -> TokenSet | None:
        """Return the stored token set for a client id, if any.

        Raises:
            RuntimeError: Raised when the read fails.
        """

    def db_token_save(self, client_id: str, token_set: TokenSet) -> None:
        """Insert or replace the stored token set for a client id.

        Raises:
            RuntimeError: Raised when the write fails.
        """

    def db_token_delete(self, client_id: str) -> bool:
        """Delete the stored token set; return whether a row existed.

        Raises:
            RuntimeError: Raised when the delete fails.
        """
