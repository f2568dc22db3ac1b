"""
Elasticsearch client for MultiversX governance vote events.

This module fetches the `vote` and `delegateVote` events logged by the
governance contract from the public events index, in one request per
refresh, optionally through a RequestCache.

Usage:
    from mvx_governance.fetch_governance_events import GovernanceEventsClient

    client = GovernanceEventsClient()
    hits = client.fetch_events(limit=10000)
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import backoff
import requests

from mvx_governance.events import VOTE_IDENTIFIERS
from mvx_governance.request_cache import RequestCache
from mvx_governance.settings import (
    DEFAULT_ES_URL,
    DEFAULT_EVENT_LIMIT,
    DEFAULT_FETCH_MAX_TRIES,
    DEFAULT_FETCH_TIMEOUT,
    GOVERNANCE_SC,
    validate_limit,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = (429, 502, 503, 504)


class FetchError(RuntimeError):
    """Upstream request failed or returned an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _giveup(exc: Exception) -> bool:
    response = getattr(exc, "response", None)
    if response is not None:
        return response.status_code not in RETRYABLE_STATUSES
    return not isinstance(exc, (requests.ConnectionError, requests.Timeout))


class GovernanceEventsClient:
    """Client for the governance contract's vote events."""

    def __init__(
        self,
        es_url: str = DEFAULT_ES_URL,
        governance_address: str = GOVERNANCE_SC,
        cache: Optional[RequestCache] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        max_tries: int = DEFAULT_FETCH_MAX_TRIES,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the events client.

        Args:
            es_url: Events index search endpoint
            governance_address: Governance contract whose events are queried
            cache: Optional response cache shared between refreshes
            timeout: Request timeout in seconds
            max_tries: Attempts per request; transient failures (429, 502,
                503, 504, connection errors) are retried with exponential
                backoff when greater than 1
            session: requests session to reuse (a new one by default)
        """
        if max_tries < 1:
            raise ValueError("max_tries must be at least 1")
        self.es_url = es_url
        self.governance_address = governance_address
        self.cache = cache
        self.timeout = timeout
        self.max_tries = max_tries
        # Reuse HTTP connections
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self._post_with_retry = backoff.on_exception(
            backoff.expo,
            requests.RequestException,
            max_tries=max_tries,
            giveup=_giveup,
            jitter=backoff.full_jitter,
        )(self._post)

    def build_query(self, limit: int = DEFAULT_EVENT_LIMIT, offset: int = 0) -> Dict[str, Any]:
        """search body for vote events of the governance contract, oldest first"""
        return {
            "from": offset,
            "size": limit,
            "sort": [{"timestamp": {"order": "asc"}}],
            "query": {
                "bool": {
                    "must": [
                        {
                            "bool": {
                                "should": [
                                    {"term": {"address": self.governance_address}},
                                    {"term": {"logAddress": self.governance_address}},
                                ],
                            },
                        },
                        {"terms": {"identifier": list(VOTE_IDENTIFIERS)}},
                    ],
                },
            },
        }

    def _post(self, body: Dict[str, Any]) -> Any:
        response = self.session.post(self.es_url, json=body, timeout=self.timeout)
        if response.status_code != 200:
            logger.error(f"HTTP {response.status_code} from {self.es_url}: {response.text[:200]}")
        response.raise_for_status()
        return response.json()

    def _search_uncached(self, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            data = self._post_with_retry(body)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FetchError(f"HTTP {status}", status_code=status) from e
        except requests.RequestException as e:
            # includes invalid json bodies (requests.JSONDecodeError)
            raise FetchError(f"Request to {self.es_url} failed: {e}") from e

        hits = data.get("hits") if isinstance(data, dict) else None
        if not isinstance(hits, dict) or not isinstance(hits.get("hits"), list):
            raise FetchError("Response has no hits.hits list")
        return data

    def search(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run one search request, through the cache when one is configured.

        Raises:
            FetchError: On non-success status, network failure or bad body
        """
        if self.cache is None:
            return self._search_uncached(body)
        return self.cache.get_or_fetch(self.es_url, body, lambda: self._search_uncached(body))

    def fetch_events(self, limit: int = DEFAULT_EVENT_LIMIT) -> List[Dict[str, Any]]:
        """
        Fetch up to `limit` vote events as raw elasticsearch hits.

        Args:
            limit: Batch size, 100 to 50000

        Returns:
            List of hits, each with the event record under `_source`
        """
        limit = validate_limit(limit)
        start_time = time.time()
        logger.info(f"Fetching up to {limit} governance events for {self.governance_address}")
        data = self.search(self.build_query(limit))
        hits = data["hits"]["hits"]
        elapsed = time.time() - start_time
        logger.info(f"Fetched {len(hits)} events in {elapsed:.2f}s")
        if len(hits) >= limit:
            logger.warning(
                f"Result size reached the limit ({limit}); later events are not included")
        return hits


__all__ = ["FetchError", "GovernanceEventsClient", "RETRYABLE_STATUSES"]
