from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from core.models import Season, Week


@dataclass(frozen=True)
class IndexedWeek:
    block_id: str
    week: Week
    global_index: int

    @property
    def week_id(self) -> str:
        return self.week.week_id


def flatten(season: Season) -> list[IndexedWeek]:
    """Concatenate every block's weeks in declared order, numbering from 0.

    Derived on every call and never stored on blocks or weeks; season markers
    are the only records that refer to these positions.
    """
    out: list[IndexedWeek] = []
    for block in season.blocks:
        for week in block.weeks:
            out.append(IndexedWeek(block_id=block.block_id, week=week, global_index=len(out)))
    return out


def total_weeks(season: Season) -> int:
    return sum(len(block.weeks) for block in season.blocks)


def week_ids_in_order(season: Season) -> list[str]:
    return [entry.week_id for entry in flatten(season)]


def global_index_of(season: Season, week_id: str) -> Optional[int]:
    for entry in flatten(season):
        if entry.week_id == week_id:
            return entry.global_index
    return None


def week_start(season: Season, global_index: int) -> Optional[date]:
    start = season.start
    if start is None:
        return None
    return start + timedelta(days=7 * global_index)


def calendar(season: Season) -> list[dict]:
    rows: list[dict] = []
    for entry in flatten(season):
        starts_on = week_start(season, entry.global_index)
        rows.append(
            {
                "globalIndex": entry.global_index,
                "blockId": entry.block_id,
                "weekId": entry.week_id,
                "weekStart": starts_on.isoformat() if starts_on else None,
                "markers": [m.label for m in season.season_markers if m.week_index == entry.global_index],
            }
        )
    return rows
