"""
Refresh loop state: fetch a snapshot batch, recompute the summary, keep the
last good one.

A failed refresh never clears or alters the stored summary. Each refresh
takes a sequence number when it starts; a refresh that finishes after a
newer one has already been applied is discarded, so a slow response cannot
overwrite fresher data. Refreshes are not coalesced: concurrent calls each
issue their own request.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Mapping, Optional

from mvx_governance.aggregate_votes import aggregate_events
from mvx_governance.fetch_governance_events import FetchError, GovernanceEventsClient
from mvx_governance.models import VoteSummary
from mvx_governance.ranking import Ranker
from mvx_governance.settings import DEFAULT_EVENT_LIMIT

logger = logging.getLogger(__name__)


class GovernanceTally:
    """Holds the latest successfully computed VoteSummary."""

    def __init__(
        self,
        client: GovernanceEventsClient,
        delegation_labels: Optional[Mapping[str, str]] = None,
        ranker: Optional[Ranker] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.delegation_labels = delegation_labels
        self.ranker = ranker or Ranker()
        self.clock = clock
        self._lock = threading.Lock()
        self._issued = 0
        self._applied = 0
        self._summary: Optional[VoteSummary] = None
        self.last_error: Optional[FetchError] = None
        self.last_refreshed_at: Optional[float] = None

    @property
    def summary(self) -> Optional[VoteSummary]:
        return self._summary

    def refresh(self, limit: int = DEFAULT_EVENT_LIMIT) -> Optional[VoteSummary]:
        """
        Fetch events and replace the stored summary.

        Returns:
            The stored summary after this refresh; when a newer refresh was
            applied first, that newer summary

        Raises:
            FetchError: If the upstream request fails; the previous summary
                is kept
        """
        with self._lock:
            self._issued += 1
            seq = self._issued

        try:
            hits = self.client.fetch_events(limit)
        except FetchError as e:
            with self._lock:
                if seq > self._applied:
                    self.last_error = e
            logger.error(f"Refresh #{seq} failed, keeping previous summary: {e}")
            raise

        summary = aggregate_events(hits, self.delegation_labels, self.ranker)

        with self._lock:
            if seq <= self._applied:
                logger.warning(
                    f"Discarding refresh #{seq}; refresh #{self._applied} already applied")
                return self._summary
            self._applied = seq
            self._summary = summary
            self.last_error = None
            self.last_refreshed_at = self.clock()
        return summary


__all__ = ["GovernanceTally"]
