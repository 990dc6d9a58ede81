"""Database layer package for all SQL and persistence boundaries."""

from .health import SQLAlchemyDatabaseHealthService
from .interfaces import DatabaseHealthPort, TokenStorePort
from .session import db_create_engine
from .token_store import SQLAlchemyTokenStoreService

__all__ = [
	"DatabaseHealthPort",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyTokenStoreService",
	"TokenStorePort",
	"db_create_engine",
]
