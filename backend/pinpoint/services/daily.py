import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, List, Optional

from ..models.daily import Countdown, DailyResult, Streak
from ..models.game import Puzzle
from .puzzles import PuzzleGenerator
from .storage import (
    DAILY_PLAYED_KEY, DAILY_RESULTS_KEY, KeyValueStore, load_models, load_value, save_models
)

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def _parse_day(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def compute_streak(results: List[DailyResult], today: str) -> Streak:
    """
    Current and best runs of consecutive played days.

    The current run counts back from today, or from yesterday when today has
    not been played yet. Entries with unparseable dates are ignored.
    """
    ordered = sorted(
        (r for r in results if _parse_day(r.date) is not None),
        key=lambda r: r.date,
        reverse=True,
    )
    if not ordered:
        return Streak(current=0, best=0)

    check = date.fromisoformat(today)
    if not any(r.date == today for r in ordered):
        check -= ONE_DAY

    current = 0
    for result in ordered:
        expected = check.isoformat()
        if result.date == expected:
            current += 1
            check -= ONE_DAY
        elif result.date < expected:
            break

    best = max(current, 1)
    run = 1
    for previous, result in zip(ordered, ordered[1:]):
        if (date.fromisoformat(previous.date) - ONE_DAY).isoformat() == result.date:
            run += 1
            best = max(best, run)
        else:
            run = 1

    return Streak(current=current, best=best)


class DailyPuzzleScheduler:
    """
    Daily puzzle lookup plus the played / streak state kept in local history.

    "Played today" is derived from the clock and the history; nothing resets
    at midnight, the date simply changes.
    """

    def __init__(
        self,
        generator: PuzzleGenerator,
        store: KeyValueStore,
        retention_days: int = 30,
        now: Callable[[], datetime] = datetime.now
    ):
        self.generator = generator
        self.store = store
        self.retention_days = retention_days
        self._now = now

    def today(self) -> str:
        """Local calendar date as 'YYYY-MM-DD'."""
        return self._now().date().isoformat()

    async def puzzle_for(self, date_str: str) -> Puzzle:
        if _parse_day(date_str) is None:
            raise ValueError(f"Not an ISO date: {date_str!r}")
        return await self.generator.daily(date_str)

    async def results(self) -> List[DailyResult]:
        """Retained daily results, newest first."""
        results = await load_models(self.store, DAILY_RESULTS_KEY, DailyResult)
        return sorted(results, key=lambda r: r.date, reverse=True)

    async def result_for(self, date_str: str) -> Optional[DailyResult]:
        for result in await self.results():
            if result.date == date_str:
                return result
        return None

    async def has_played(self, date_str: Optional[str] = None) -> bool:
        date_str = date_str or self.today()
        if await load_value(self.store, DAILY_PLAYED_KEY) == date_str:
            return True
        return await self.result_for(date_str) is not None

    async def record_result(self, result: DailyResult):
        """Store a result, replacing any earlier one for the same date."""
        if _parse_day(result.date) is None:
            raise ValueError(f"Not an ISO date: {result.date!r}")

        results = [r for r in await self.results() if r.date != result.date]
        results.append(result)
        results.sort(key=lambda r: r.date, reverse=True)
        dropped = results[self.retention_days:]
        if dropped:
            logger.debug(f"Evicting {len(dropped)} daily results older than {results[self.retention_days - 1].date}")
        await save_models(self.store, DAILY_RESULTS_KEY, results[:self.retention_days])

        if result.date == self.today():
            await self.store.set(DAILY_PLAYED_KEY, result.date)

    async def streak(self) -> Streak:
        return compute_streak(await self.results(), self.today())

    def time_until_next(self) -> timedelta:
        """Elapsed time until the next local midnight, across DST changes."""
        now = self._now()
        if now.tzinfo is None:
            # Naive clocks read local wall time
            now = now.astimezone()
            midnight = datetime.combine(now.date() + ONE_DAY, time(0)).astimezone()
        else:
            midnight = datetime.combine(now.date() + ONE_DAY, time(0), tzinfo=now.tzinfo)
        # Same-tzinfo subtraction ignores offsets, so compare in UTC
        return midnight.astimezone(timezone.utc) - now.astimezone(timezone.utc)

    def countdown(self) -> Countdown:
        remaining = self.time_until_next()
        total = int(remaining.total_seconds())
        return Countdown(
            hours=total // 3600,
            minutes=(total % 3600) // 60,
            seconds=total % 60,
            total_seconds=remaining.total_seconds(),
        )
