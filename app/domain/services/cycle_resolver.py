"""
CYCLE RESOLVER
Maps a day-of-month onto a plan's schedule.

All functions are pure integer functions. The day passed in must already be
projected into the plan's timezone (see app.utils.time.today_in_timezone).
"""

from typing import Iterable, List

from app.domain.errors import CycleResolutionError


def _sorted_days(days: Iterable[int]) -> List[int]:
    return sorted(set(days))


def is_run_day(days: Iterable[int], today: int) -> bool:
    return today in set(days)


def cycle_index(days: Iterable[int], today: int) -> int:
    """
    1-based position of ``today`` within the ascending schedule.

    Raises:
        CycleResolutionError: if today is not a scheduled day
    """
    ordered = _sorted_days(days)
    if today not in ordered:
        raise CycleResolutionError(
            f"Day {today} is not a scheduled run day",
            {"today": today, "days": ordered},
        )
    return ordered.index(today) + 1


def force_cycle_index(days: Iterable[int], today: int) -> int:
    """
    Cycle index for forced (on-demand) runs.

    Scheduled day -> its own index. Otherwise the index of the next upcoming
    day this month. Past every scheduled day -> 1.
    """
    ordered = _sorted_days(days)
    if today in ordered:
        return ordered.index(today) + 1
    for position, day in enumerate(ordered, start=1):
        if day > today:
            return position
    # TODO: decide whether this should roll into next month's year-month
    return 1


def next_run_day(days: Iterable[int], today: int) -> int:
    """Smallest scheduled day after today; wraps to the first day of next month."""
    ordered = _sorted_days(days)
    if not ordered:
        raise CycleResolutionError("Schedule has no run days", {"days": []})
    for day in ordered:
        if day > today:
            return day
    return ordered[0]
