"""Persistence collaborator interface.

The scoring engine owns no storage.  Digest generation reads saved
searches and the active job pool through this interface and hands the
finished rows back to it.  Implementations raise
:class:`~jobmarket_scoring.errors.ActionableError` with
``ErrorType.UPSTREAM`` when data cannot be read or written.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from jobmarket_scoring.digest.generator import Digest, DigestRow
    from jobmarket_scoring.models import JobPosting, SavedSearch


class MarketplaceRepository(ABC):
    """Read access to searches and jobs, write access for digests."""

    @abstractmethod
    def get_saved_search(self, search_id: str) -> SavedSearch | None:
        """Return the saved search, or ``None`` if it does not exist."""

    @abstractmethod
    def list_saved_searches(self) -> list[SavedSearch]:
        """Return every saved search, oldest first."""

    @abstractmethod
    def active_jobs(self) -> list[JobPosting]:
        """Return the active job pool in a stable order."""

    @abstractmethod
    def record_digest(
        self,
        search: SavedSearch,
        rows: Sequence[DigestRow],
        generated_at: datetime,
    ) -> Digest:
        """Store a new digest and set ``search.last_run_at`` to *generated_at*.

        Both writes happen in one transaction: on failure neither is
        visible.
        """

    @abstractmethod
    def list_digests(self, search_id: str) -> list[Digest]:
        """Return the digests stored for *search_id*, oldest first."""
