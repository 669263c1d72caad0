"""
Calendar grid tests

Covers:
    - Grid shape (full weeks, one cell per real day)
    - Filler flags and cumulative carry
    - Running cumulative PnL and the March 2024 walkthrough
    - Weekly summary closure (Saturday or month end, exactly once)
    - Monthly summary formulas
"""

import calendar
from datetime import date, datetime, timezone

import pytest

from services.journal.intel.performance_core.calendar_engine import (
    CalendarEngine,
    sunday_weekday,
)
from services.journal.intel.performance_core.models import SessionType, Trade


def _trade(idx: int, day: date, pnl, hour: int = 14) -> Trade:
    return Trade(
        id=f"t{idx}",
        date=datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc),
        symbol="ES",
        side="long",
        status="closed" if pnl is not None else "open",
        quantity=1,
        entry_price=4500,
        exit_price=4501 if pnl is not None else None,
        pnl=pnl,
    )


def _real(result):
    return [c for c in result.calendar_data if not c.is_filler]


class TestGridShape:

    def setup_method(self):
        self.engine = CalendarEngine()

    @pytest.mark.parametrize("year", [2023, 2024, 2025])
    @pytest.mark.parametrize("month", range(1, 13))
    def test_full_weeks_and_every_day(self, year, month):
        result = self.engine.generate([], date(year, month, 1))
        days_in_month = calendar.monthrange(year, month)[1]
        assert len(result.calendar_data) % 7 == 0
        assert len(_real(result)) == days_in_month
        assert result.calendar_data[0].day_of_week == 0
        assert result.calendar_data[-1].day_of_week == 6

    def test_month_starting_sunday_has_no_leading_filler(self):
        # February 2026: Sunday the 1st through Saturday the 28th
        result = self.engine.generate([], date(2026, 2, 10))
        assert len(result.calendar_data) == 28
        assert not any(c.is_filler for c in result.calendar_data)

    def test_missing_anchor_raises(self):
        with pytest.raises(ValueError):
            self.engine.generate([], None)

    def test_sunday_weekday(self):
        assert sunday_weekday(date(2024, 3, 3)) == 0   # Sunday
        assert sunday_weekday(date(2024, 3, 1)) == 5   # Friday
        assert sunday_weekday(date(2024, 3, 2)) == 6   # Saturday


class TestMarch2024:
    """March 2024 starts on a Friday and ends on a Sunday."""

    def setup_method(self):
        trades = [
            _trade(0, date(2024, 3, 1), 100.0),
            _trade(1, date(2024, 3, 3), -50.0),
        ]
        self.result = CalendarEngine().generate(trades, "2024-03-15")
        self.cells = self.result.calendar_data

    def test_leading_filler(self):
        lead = self.cells[:5]
        assert [c.date for c in lead] == [date(2024, 2, d) for d in range(25, 30)]
        for cell in lead:
            assert cell.is_filler
            assert cell.is_market_holiday
            assert not cell.is_market_open
            assert cell.trade_count == 0
            assert cell.cumulative_pnl == 0.0

    def test_running_cumulative(self):
        mar1, mar2, mar3 = self.cells[5:8]
        assert (mar1.date, mar1.net_pnl, mar1.cumulative_pnl) == (date(2024, 3, 1), 100.0, 100.0)
        assert (mar2.date, mar2.net_pnl, mar2.cumulative_pnl) == (date(2024, 3, 2), 0.0, 100.0)
        assert (mar3.date, mar3.net_pnl, mar3.cumulative_pnl) == (date(2024, 3, 3), -50.0, 50.0)
        assert self.result.monthly_summary.pnl == 50.0

    def test_day_flags(self):
        mar1, mar2 = self.cells[5], self.cells[6]
        assert mar1.day_of_week == 5
        assert mar1.is_market_open and not mar1.is_weekend
        assert mar1.session_type is SessionType.REGULAR
        assert mar2.is_weekend and not mar2.is_market_open
        assert mar2.session_type is SessionType.HOLIDAY
        assert not mar2.is_market_holiday

    def test_day_carries_its_trades(self):
        assert [t.id for t in self.cells[5].trades] == ["t0"]
        assert self.cells[5].trade_count == 1

    def test_trailing_filler_carries_final_cumulative(self):
        trail = self.cells[-6:]
        assert trail[0].date == date(2024, 4, 1)
        for cell in trail:
            assert cell.is_filler
            assert not cell.is_market_open
            assert not cell.is_market_holiday
            assert cell.cumulative_pnl == 50.0

    def test_weekly_summaries(self):
        weeks = self.result.weekly_summaries
        # Saturdays 2, 9, 16, 23, 30 plus Sunday the 31st
        assert len(weeks) == 6
        first, second = weeks[0], weeks[1]
        assert (first.week, first.pnl, first.cumulative_pnl) == (1, 100.0, 100.0)
        assert (first.trades, first.winning_trades, first.win_rate) == (1, 1, 100.0)
        assert first.max_profit == 100.0 and first.max_drawdown == 0.0
        assert (second.week, second.pnl, second.cumulative_pnl) == (2, -50.0, 50.0)
        assert (second.trades, second.winning_trades, second.win_rate) == (1, 0, 0.0)
        assert second.max_drawdown == -50.0
        assert weeks[-1].cumulative_pnl == 50.0
        assert weeks[-1].trades == 0

    def test_monthly_summary(self):
        m = self.result.monthly_summary
        assert m.trades == 2
        assert m.winning_trades == 1
        assert m.win_rate == 50.0
        assert m.max_drawdown == -50.0
        assert m.max_profit == 100.0
        assert m.avg_daily_pnl == pytest.approx(50.0 / 31)
        assert m.avg_trade_pnl == 25.0
        assert m.cumulative_pnl == 50.0


class TestAggregationRules:

    def setup_method(self):
        self.engine = CalendarEngine()

    def test_week_closing_on_last_saturday_emitted_once(self):
        # February 2026 ends on Saturday the 28th
        result = self.engine.generate([_trade(0, date(2026, 2, 28), 10.0)], date(2026, 2, 1))
        assert len(result.weekly_summaries) == 4
        assert result.weekly_summaries[-1].pnl == 10.0

    def test_other_months_and_fillers_excluded(self):
        trades = [
            _trade(0, date(2024, 2, 29), 500.0),
            _trade(1, date(2024, 3, 10), 20.0),
            _trade(2, date(2024, 4, 1), 700.0),
        ]
        result = self.engine.generate(trades, date(2024, 3, 1))
        assert result.monthly_summary.pnl == 20.0
        assert result.monthly_summary.trades == 1
        assert all(c.trade_count == 0 for c in result.calendar_data if c.is_filler)

    def test_utc_day_boundaries(self):
        late = Trade(
            id="late",
            date="2024-03-04T23:30:00-05:00",  # 04:30 UTC on the 5th
            symbol="ES", side="long", status="closed",
            quantity=1, entry_price=4500, exit_price=4501, pnl=40.0,
        )
        result = self.engine.generate([late], date(2024, 3, 1))
        by_date = {c.date: c for c in _real(result)}
        assert by_date[date(2024, 3, 4)].trade_count == 0
        assert by_date[date(2024, 3, 5)].net_pnl == 40.0

    def test_missing_pnl_counts_as_zero(self):
        trades = [_trade(0, date(2024, 3, 5), None), _trade(1, date(2024, 3, 5), 30.0)]
        result = self.engine.generate(trades, date(2024, 3, 1))
        cell = {c.date: c for c in _real(result)}[date(2024, 3, 5)]
        assert cell.trade_count == 2
        assert cell.net_pnl == 30.0

    def test_last_cumulative_matches_month_pnl(self):
        trades = [
            _trade(i, date(2024, 7, d), p)
            for i, (d, p) in enumerate([(1, 120.0), (3, -40.0), (15, 75.5), (31, -10.25)])
        ]
        result = self.engine.generate(trades, date(2024, 7, 20))
        assert _real(result)[-1].cumulative_pnl == result.monthly_summary.pnl
        assert result.monthly_summary.pnl == pytest.approx(145.25)

    def test_empty_month(self):
        m = self.engine.generate([], date(2024, 3, 1)).monthly_summary
        assert (m.pnl, m.trades, m.win_rate, m.avg_trade_pnl) == (0.0, 0, 0.0, 0.0)

    def test_idempotent(self):
        trades = [_trade(0, date(2024, 3, 5), 10.0), _trade(1, date(2024, 3, 6), -4.0)]
        assert self.engine.generate(trades, date(2024, 3, 1)) == self.engine.generate(trades, date(2024, 3, 1))
