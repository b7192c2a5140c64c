"""Latest-known record snapshot shared between fetches and the engine.

The host fetches each data domain (transactions, budgets, goals,
contributions) independently and possibly concurrently.  Each fetch takes a
token from :meth:`SnapshotStore.begin` before it starts; when it finishes,
:meth:`SnapshotStore.complete` applies the records unless a fetch that
started later has already landed.  The engine always reads a whole
:class:`Snapshot`, never a half-applied one, and recomputes from scratch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Dict, Iterable, Mapping, Optional, Tuple

from .errors import FinanceStatsError
from .models import Budget, Contribution, Goal, Transaction, coerce_records

logger = logging.getLogger(__name__)

DOMAIN_TYPES = {
    "transactions": Transaction,
    "budgets": Budget,
    "goals": Goal,
    "contributions": Contribution,
}

Fetcher = Callable[[], Awaitable[Iterable]]


@dataclass(frozen=True)
class Snapshot:
    transactions: Tuple[Transaction, ...] = ()
    budgets: Tuple[Budget, ...] = ()
    goals: Tuple[Goal, ...] = ()
    contributions: Tuple[Contribution, ...] = ()


class SnapshotStore:
    """Holds the current :class:`Snapshot` and arbitrates racing refreshes."""

    def __init__(self, snapshot: Optional[Snapshot] = None):
        self._snapshot = snapshot or Snapshot()
        self._issued: Dict[str, int] = {domain: 0 for domain in DOMAIN_TYPES}
        self._applied: Dict[str, int] = {domain: 0 for domain in DOMAIN_TYPES}

    @staticmethod
    def _check(domain: str) -> None:
        if domain not in DOMAIN_TYPES:
            raise FinanceStatsError(f"Unknown data domain {domain!r}; expected one of {sorted(DOMAIN_TYPES)}")

    def snapshot(self) -> Snapshot:
        return self._snapshot

    def begin(self, domain: str) -> int:
        """Issue the token for a refresh of ``domain`` that is about to start."""
        self._check(domain)
        self._issued[domain] += 1
        return self._issued[domain]

    def complete(self, domain: str, token: int, records: Iterable) -> bool:
        """Apply a finished refresh.

        Returns:
            ``True`` if the records replaced the domain, ``False`` if a newer
            refresh had already been applied and these were discarded.

        Raises:
            MalformedRecordError: If any record is malformed; nothing is applied.
        """
        self._check(domain)
        if token <= self._applied[domain]:
            logger.warning("Discarding stale %s refresh #%d (already at #%d)", domain, token, self._applied[domain])
            return False
        materialised = tuple(coerce_records(DOMAIN_TYPES[domain], records))
        self._snapshot = replace(self._snapshot, **{domain: materialised})
        self._applied[domain] = token
        logger.debug("Applied %s refresh #%d with %d records", domain, token, len(materialised))
        return True

    def replace(self, domain: str, records: Iterable) -> Snapshot:
        """Synchronously swap a domain's records in, as a refresh that cannot be superseded."""
        self.complete(domain, self.begin(domain), records)
        return self._snapshot


async def refresh_all(store: SnapshotStore, fetchers: Mapping[str, Fetcher]) -> Dict[str, bool]:
    """Run one fetch task per domain concurrently and apply each as it finishes.

    Args:
        store: Snapshot store to update.
        fetchers: Domain name to zero-argument coroutine function returning records.

    Returns:
        Domain name to whether its result was applied.

    Fetch errors propagate to the caller; retrying is the host's decision.
    """

    async def run(domain: str, fetch: Fetcher) -> Tuple[str, bool]:
        token = store.begin(domain)
        records = await fetch()
        return domain, store.complete(domain, token, records)

    results = await asyncio.gather(*(run(domain, fetch) for domain, fetch in fetchers.items()))
    return dict(results)
