"""Tests for DashboardService caching and fallback."""

from datetime import date
from decimal import Decimal

from freeboard.domain.dashboard import DashboardService
from freeboard.domain.errors import StoreError
from freeboard.utils.cache import TTLCache

USER = "user-1"


class FailingDatabase:
    """Store stub whose reads always fail."""

    def __init__(self):
        self.calls = 0

    def get_vat_settings(self, user_id):
        self.calls += 1
        raise StoreError("Could not load VAT settings: connection refused")

    def list_all_transactions(self, user_id, filters=None):
        raise StoreError("Could not list transactions: connection refused")


class CountingDatabase:
    """Wrap a database and count transaction fetches."""

    def __init__(self, db):
        self.db = db
        self.fetches = 0

    def get_vat_settings(self, user_id):
        return self.db.get_vat_settings(user_id)

    def list_all_transactions(self, user_id, filters=None):
        self.fetches += 1
        return self.db.list_all_transactions(user_id, filters)


def test_dashboard_reflects_transactions(dashboard_service, sample_transactions):
    """The snapshot is built from the user's transactions."""
    data = dashboard_service.get_dashboard(USER)

    assert data.kpis.total_revenue == Decimal("3000")
    assert data.kpis.total_expenses == Decimal("500")
    assert data.kpis.revenue_growth == 50.0
    assert data.vat_metrics.current_year_revenue == Decimal("5000")
    assert len(data.recent_transactions) == 3
    assert len(data.monthly_data) == 12


def test_store_failure_returns_empty_snapshot(aggregator, caplog):
    """A failing store gives the empty snapshot and logs the failure."""
    service = DashboardService(FailingDatabase(), aggregator=aggregator)

    data = service.get_dashboard(USER)

    assert data == aggregator.empty()
    assert data.alerts == ()
    assert len(data.monthly_data) == 12
    assert "Could not load dashboard data" in caplog.text


def test_fallback_snapshot_is_not_cached(aggregator):
    """Every call retries the store after a failure."""
    db = FailingDatabase()
    service = DashboardService(db, aggregator=aggregator)

    service.get_dashboard(USER)
    service.get_dashboard(USER)

    assert db.calls == 2
    assert len(service.cache) == 0


def test_snapshot_is_cached_within_ttl(temp_db, clock, aggregator, sample_transactions):
    """A second call in the same hour and TTL reuses the snapshot."""
    db = CountingDatabase(temp_db)
    service = DashboardService(db, cache=TTLCache(ttl_seconds=300, clock=clock), aggregator=aggregator)

    first = service.get_dashboard(USER)
    second = service.get_dashboard(USER)

    assert first is second
    assert db.fetches == 1

    clock.advance(seconds=301)
    service.get_dashboard(USER)
    assert db.fetches == 2


def test_force_refresh_bypasses_cache(temp_db, clock, aggregator):
    """force_refresh always rebuilds."""
    db = CountingDatabase(temp_db)
    service = DashboardService(db, cache=TTLCache(clock=clock), aggregator=aggregator)

    service.get_dashboard(USER)
    service.get_dashboard(USER, force_refresh=True)

    assert db.fetches == 2


def test_cache_key_uses_hour_bucket(dashboard_service, clock):
    """Keys change when the hour changes."""
    assert dashboard_service.cache_key(USER) == (USER, "2024-06-15T12")
    clock.advance(minutes=59)
    assert dashboard_service.cache_key(USER) == (USER, "2024-06-15T12")
    clock.advance(minutes=1)
    assert dashboard_service.cache_key(USER) == (USER, "2024-06-15T13")


def test_invalidate_only_touches_one_user(dashboard_service):
    """Invalidation drops the user's entries and keeps the others."""
    dashboard_service.get_dashboard(USER)
    dashboard_service.get_dashboard("other")

    assert dashboard_service.invalidate(USER) == 1
    assert len(dashboard_service.cache) == 1
    assert dashboard_service.invalidate(USER) == 0


def test_prune_removes_expired(dashboard_service, clock):
    """Expired snapshots are pruned."""
    dashboard_service.get_dashboard(USER)
    clock.advance(minutes=10)

    assert dashboard_service.prune() == 1
    assert len(dashboard_service.cache) == 0


def test_cache_stays_bounded_across_hours(dashboard_service, clock):
    """Hourly rebuilds in a long-lived process drop the stale snapshots."""
    for _ in range(48):
        dashboard_service.get_dashboard(USER)
        clock.advance(hours=1)

    assert len(dashboard_service.cache) == 1


def test_dashboard_uses_stored_threshold(dashboard_service, transaction_service, vat_service):
    """The VAT threshold comes from the user's settings."""
    vat_service.update_settings(USER, annual_revenue_threshold=Decimal("10000"))
    transaction_service.create_transaction(USER, date(2024, 6, 1), Decimal("9500"), "income", "Prestation")

    data = dashboard_service.get_dashboard(USER)

    assert data.vat_metrics.vat_threshold == Decimal("10000")
    assert "vat-threshold" in {alert.id for alert in data.alerts}
