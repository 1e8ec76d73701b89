"""Dashboard domain service."""

import logging
from typing import Optional

from freeboard.database.base import Database
from freeboard.domain.entities import DashboardData, VatSettings
from freeboard.domain.errors import StoreError
from freeboard.domain.metrics import MetricsAggregator
from freeboard.utils.cache import TTLCache


logger = logging.getLogger(__name__)


class DashboardService:
    """Serve dashboard snapshots, cached per user and hour."""

    def __init__(
        self,
        db: Database,
        cache: Optional[TTLCache] = None,
        aggregator: Optional[MetricsAggregator] = None,
    ):
        """Initialize dashboard service.

        Args:
            db: Database instance
            cache: Snapshot cache (defaults to a fresh TTLCache)
            aggregator: Metrics aggregator (defaults to one on the system clock)
        """
        self.db = db
        self.aggregator = aggregator or MetricsAggregator()
        self.cache = cache if cache is not None else TTLCache(clock=self.aggregator.clock)

    def cache_key(self, user_id: str) -> tuple[str, str]:
        """Cache key for a user's snapshot in the current hour."""
        return user_id, self.aggregator.clock.now().strftime("%Y-%m-%dT%H")

    def get_dashboard(self, user_id: str, force_refresh: bool = False) -> DashboardData:
        """Return the user's dashboard snapshot.

        A store failure is logged and answered with the empty snapshot, the
        same result a user with no transactions gets. Fallback snapshots are
        not cached.

        Args:
            user_id: User to build the dashboard for
            force_refresh: Ignore any cached snapshot

        Returns:
            DashboardData
        """
        key = self.cache_key(user_id)
        if not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Dashboard cache hit for %s", user_id)
                return cached

        settings: Optional[VatSettings] = None
        try:
            settings = self.db.get_vat_settings(user_id)
            transactions = self.db.list_all_transactions(user_id)
        except StoreError:
            logger.exception("Could not load dashboard data for %s", user_id)
            return self.aggregator.empty(settings)

        snapshot = self.aggregator.build(transactions, settings)
        # keys from earlier hours are never read again
        self.prune()
        self.cache.set(key, snapshot)
        return snapshot

    def invalidate(self, user_id: str) -> int:
        """Drop every cached snapshot of a user. Returns the count."""
        removed = self.cache.invalidate(lambda key: key[0] == user_id)
        if removed:
            logger.debug("Invalidated %d dashboard snapshot(s) for %s", removed, user_id)
        return removed

    def prune(self) -> int:
        """Drop expired snapshots."""
        return self.cache.prune()
