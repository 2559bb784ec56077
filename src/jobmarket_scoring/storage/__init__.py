"""Storage layer — the persistence collaborator and its SQLAlchemy adapter."""

from jobmarket_scoring.storage.repository import MarketplaceRepository
from jobmarket_scoring.storage.sql import SqlMarketplaceRepository

__all__ = ["MarketplaceRepository", "SqlMarketplaceRepository"]
