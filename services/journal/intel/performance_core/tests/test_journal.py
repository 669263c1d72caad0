"""TradeJournal: copy-on-write CRUD and the analytics facade."""

import io
from datetime import date, datetime, timezone

import pytest

from services.journal.intel.performance_core import TradeJournal, ViewMode
from services.journal.intel.performance_core.models import AnalyticsConfig, TradeStatus
from shared.logutil import LogUtil

CREATED = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _logger():
    stream = io.StringIO()
    logger = LogUtil("journal-test", stream=stream)
    logger.configure_from_config({"LOG_LEVEL": "DEBUG"})
    return logger, stream


def _journal(**config) -> TradeJournal:
    logger, _ = _logger()
    return TradeJournal(AnalyticsConfig(**config), logger)


def _add(journal: TradeJournal, day: int, exit_price: float, **kwargs):
    fields = dict(
        date=datetime(2024, 3, day, 15, 0, tzinfo=timezone.utc),
        symbol="ES",
        side="long",
        quantity=1,
        entry_price=4500,
        exit_price=exit_price,
        now=CREATED,
    )
    fields.update(kwargs)
    return journal.add_trade(**fields)


class TestCrud:

    def test_add_and_get(self):
        journal = _journal()
        t = _add(journal, 1, 4502)
        assert t.pnl == 100
        assert journal.get_trade(t.id) is t
        assert journal.trades == (t,)

    def test_copy_on_write(self):
        journal = _journal()
        _add(journal, 1, 4502)
        snapshot = journal.trades
        _add(journal, 2, 4499)
        assert len(snapshot) == 1
        assert len(journal.trades) == 2

    def test_update_recomputes_pnl_and_bumps_updated_at(self):
        journal = _journal()
        t = _add(journal, 1, 4502)
        updated = journal.update_trade(t.id, exit_price=4510, quantity=2)
        assert updated.pnl == 1000
        assert updated.created_at == CREATED
        assert updated.updated_at > CREATED
        assert journal.get_trade(t.id) is updated

    def test_close_open_trade(self):
        journal = _journal()
        t = _add(journal, 1, None, status="open")
        assert t.pnl is None
        closed = journal.update_trade(t.id, status="closed", exit_price=4490)
        assert closed.status is TradeStatus.CLOSED
        assert closed.pnl == -500

    def test_reopen_clears_pnl(self):
        journal = _journal()
        t = _add(journal, 1, 4502)
        reopened = journal.update_trade(t.id, status="open", exit_price=None)
        assert reopened.pnl is None

    def test_update_validation(self):
        journal = _journal()
        t = _add(journal, 1, 4502)
        with pytest.raises(ValueError, match="pnl"):
            journal.update_trade(t.id, pnl=5)
        with pytest.raises(ValueError, match="exit_price"):
            journal.update_trade(t.id, exit_price=None)
        with pytest.raises(KeyError):
            journal.update_trade("missing", exit_price=1)
        assert journal.get_trade(t.id) is t

    def test_delete(self):
        journal = _journal()
        t = _add(journal, 1, 4502)
        assert journal.delete_trade(t.id) is True
        assert journal.delete_trade(t.id) is False
        assert journal.trades == ()
        with pytest.raises(KeyError):
            journal.get_trade(t.id)

    def test_unlisted_symbol_warns(self):
        logger, stream = _logger()
        journal = TradeJournal(None, logger)
        t = journal.add_trade(
            date=CREATED, symbol="ZZZ", side="long", quantity=3,
            entry_price=100, exit_price=110,
        )
        assert t.pnl == 30
        assert "No contract spec for ZZZ" in stream.getvalue()

    def test_accepts_config_dict(self):
        journal = TradeJournal({"JOURNAL_ACCOUNT_BALANCE": "5000"}, _logger()[0])
        assert journal.config.account_balance == 5000.0


class TestFromRecords:

    def test_loads_and_skips_invalid(self):
        logger, stream = _logger()
        records = [
            {"id": "a", "date": "2024-03-01T15:00:00Z", "symbol": "ES", "side": "long",
             "quantity": 1, "entryPrice": 4500, "exitPrice": 4502},
            {"id": "b", "date": "not a date", "symbol": "ES", "side": "long",
             "quantity": 1, "entryPrice": 4500},
        ]
        journal = TradeJournal.from_records(records, AnalyticsConfig(), logger)
        assert [t.id for t in journal.trades] == ["a"]
        assert "Skipped 1 invalid" in stream.getvalue()

    def test_non_finite_quantity_does_not_abort_load(self):
        logger, _ = _logger()
        records = [
            {"id": "a", "date": "2024-03-01T15:00:00Z", "symbol": "ES", "side": "long",
             "quantity": "inf", "entryPrice": 4500, "exitPrice": 4502},
            {"id": "b", "date": "2024-03-02T15:00:00Z", "symbol": "ES", "side": "long",
             "quantity": 1, "entryPrice": 4500, "exitPrice": "nan"},
            {"id": "c", "date": "2024-03-03T15:00:00Z", "symbol": "ES", "side": "long",
             "quantity": 1, "entryPrice": 4500, "exitPrice": 4501},
        ]
        journal = TradeJournal.from_records(records, AnalyticsConfig(), logger)
        assert [t.id for t in journal.trades] == ["c"]
        assert journal.summary().total_pnl == 50


class TestAnalyticsFacade:

    def setup_method(self):
        self.journal = _journal(account_balance=10000)
        _add(self.journal, 1, 4502)     # +100
        _add(self.journal, 3, 4499)     # -50
        _add(self.journal, 12, 4504)    # +200

    def test_summary_by_view(self):
        s = self.journal.summary(ViewMode.MONTHLY, date(2024, 3, 20))
        assert s.period == "March 2024"
        assert s.total_pnl == 250
        week = self.journal.summary(ViewMode.WEEKLY, date(2024, 3, 1))
        assert week.period == "Week of March 1st, 2024"
        assert week.total_trades == 2
        assert self.journal.summary().period == "All time"

    def test_calendar(self):
        result = self.journal.calendar(date(2024, 3, 1))
        assert result.monthly_summary.pnl == 250
        assert result.monthly_summary.trades == 3

    def test_report(self):
        report = self.journal.report(ViewMode.DAILY, date(2024, 3, 12))
        assert report.version == "1.0.0"
        assert report.summary.period == "March 12th, 2024"
        assert report.summary.total_trades == 1
        assert report.equity_curve[0].equity == 10000
        assert report.equity_curve[-1].equity == 10200

    def test_dashboard(self):
        d = self.journal.dashboard(datetime(2024, 3, 21, 15, 0, tzinfo=timezone.utc))
        assert d.total_trades == 3
        assert d.trade_frequency == pytest.approx(3 / 20)
        assert 0 <= d.nbs_score <= 100
