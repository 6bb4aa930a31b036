"""
Tests for component wiring, reports and the event logger

These exercise the pieces together the way a host application does.
"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

from pocketledger.app import create_app_components, create_ledger, create_storage
from pocketledger.audit import EventLogger
from pocketledger.config import LedgerSettings, Settings, get_settings
from pocketledger.models import BudgetStatus, LedgerEventBuilder, Transaction
from pocketledger.stats import LedgerReports
from pocketledger.storage import InMemorySnapshotStorage, JsonFileSnapshotStorage


@pytest.fixture
def memory_settings(monkeypatch) -> Settings:
    monkeypatch.setenv("POCKETLEDGER_STORAGE_BACKEND", "memory")
    monkeypatch.setenv("POCKETLEDGER_LOG_JSON_LOGS", "false")
    get_settings.cache_clear()
    yield Settings()
    get_settings.cache_clear()


class TestFactory:
    """Tests for create_ledger / create_app_components."""

    def test_create_storage_follows_settings(self, memory_settings, monkeypatch, tmp_path):
        assert isinstance(create_storage(memory_settings), InMemorySnapshotStorage)

        monkeypatch.setenv("POCKETLEDGER_STORAGE_BACKEND", "file")
        monkeypatch.setenv("POCKETLEDGER_STORAGE_PATH", str(tmp_path / "ledger.json"))
        storage = create_storage(Settings())
        assert isinstance(storage, JsonFileSnapshotStorage)
        assert storage.path == tmp_path / "ledger.json"

    def test_create_ledger_seeds_default_wallets(self, memory_settings):
        store = create_ledger(memory_settings)
        assert [w.name for w in store.wallets()] == ["Hand Cash", "Main Bank"]

    def test_seeding_can_be_disabled(self, memory_settings, monkeypatch):
        monkeypatch.setenv("POCKETLEDGER_SEED_DEFAULT_WALLETS", "false")
        store = create_ledger(Settings(), storage=InMemorySnapshotStorage())
        assert store.wallets() == []

    def test_app_components(self, memory_settings):
        components = create_app_components(memory_settings)
        cash = components.store.wallets()[0].id

        components.store.add_income(100, cash)
        assert components.reports.totals("day").income == Decimal("100")

        state = components.sync.sync(components.store)
        assert state.last_sync is not None

        components.detach_event_logger()


class TestLedgerReports:
    """Tests for the pull-based reports facade."""

    def test_reports_reflect_latest_state(self, store, two_wallets, ref):
        """Test that reports are recomputed after every mutation."""
        a, _ = two_wallets
        reports = LedgerReports(store)
        tx_id = store.add_expense(300, a, category="Food", created_at=ref)
        assert reports.totals("month", ref).expense == Decimal("300")

        store.delete_transaction(tx_id)
        assert reports.totals("month", ref).expense == Decimal("0")
        assert reports.categories("month", ref) == []

    def test_budget_usage_uses_configured_threshold(self, store, two_wallets, ref, monkeypatch):
        a, _ = two_wallets
        monkeypatch.setenv("POCKETLEDGER_BUDGET_WARNING_PERCENT", "50")
        reports = LedgerReports(store, LedgerSettings())
        store.set_budget("Food", 100)
        store.add_expense(60, a, category="Food", created_at=ref)

        [usage] = reports.budget_usage(now=ref)
        assert usage.percent == 60
        assert usage.status == BudgetStatus.WARNING

    def test_chart_and_spending_ratio(self, store, two_wallets, ref):
        a, _ = two_wallets
        reports = LedgerReports(store)
        store.add_income(1000, a, created_at=ref)
        store.add_expense(250, a, created_at=ref)

        assert reports.chart("week", ref)[2].income == Decimal("1000")
        assert reports.spending_ratio("week", ref) == 25
        assert reports.spending_ratio("year", datetime(2020, 1, 1)) == 0

    def test_spending_ratio_capped_at_100(self, store, two_wallets, ref):
        """Test that expenses with no income (or above income) read as 100."""
        a, _ = two_wallets
        reports = LedgerReports(store)
        store.add_expense(500, a, created_at=ref)
        assert reports.spending_ratio("month", ref) == 100

        store.add_income(200, a, created_at=ref)
        assert reports.spending_ratio("month", ref) == 100


class TestEventLogger:
    """Tests for the structured event logger."""

    def test_changed_events_logged_at_info(self):
        logger = MagicMock()
        event = LedgerEventBuilder.budget_removed("Food")
        EventLogger(logger).log(event)

        logger.info.assert_called_once()
        args, kwargs = logger.info.call_args
        assert args == ("ledger_event",)
        assert kwargs["operation"] == "budget_removed"
        assert kwargs["entity_id"] == "Food"

    def test_deleted_events_logged_at_warning(self):
        logger = MagicMock()
        tx = Transaction(type="income", amount=Decimal("5"), wallet_id="w1")
        EventLogger(logger).log(LedgerEventBuilder.deleted(tx))

        logger.warning.assert_called_once()
        assert logger.warning.call_args.kwargs["kind"] == "deleted"

    def test_attach_and_detach(self, store):
        logger = MagicMock()
        detach = EventLogger(logger).attach(store.subscribe)

        store.add_wallet("A", "cash")
        detach()
        store.add_wallet("B", "cash")

        assert logger.info.call_count == 1
