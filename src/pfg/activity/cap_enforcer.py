"""Daily cap enforcement.

reserve_daily_headroom() must run inside the same transaction that appends
the receipt. It takes a row lock on the (address, game, day) counter, so a
second submission for the same pair blocks until the first commits and then
sees the first receipt when it re-sums the ledger. Pairs never contend with
each other.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from pfg.activity.games import Game
from pfg.activity.ledger import sum_credited
from pfg.activity.rules import rules_for
from pfg.activity.windows import day_start, local_day, next_day_start
from pfg.db.models import DailyRewardCounter

logger = structlog.get_logger()


@dataclass(frozen=True)
class CapReservation:
    amount: int
    daily_cap: int
    credited_before: int

    @property
    def remaining_after(self) -> int:
        return max(0, self.daily_cap - self.credited_before - self.amount)


async def _lock_counter(db: AsyncSession, address: str, game: Game, now: datetime) -> None:
    day = local_day(now)
    await db.execute(
        pg_insert(DailyRewardCounter)
        .values(address=address, game=game.value, day=day, credited=0, updated_at=now)
        .on_conflict_do_nothing(index_elements=["address", "game", "day"])
    )
    await db.execute(
        select(DailyRewardCounter.credited)
        .where(
            DailyRewardCounter.address == address,
            DailyRewardCounter.game == game.value,
            DailyRewardCounter.day == day,
        )
        .with_for_update()
    )


async def reserve_daily_headroom(
    db: AsyncSession,
    address: str,
    game: Game,
    provisional: int,
    now: datetime,
) -> CapReservation:
    """Clamp a provisional amount to today's remaining headroom and reserve it.

    amount = max(0, min(provisional, daily_cap - credited_today)), where
    credited_today is summed from the ledger while the counter row is locked.
    The lock is released when the caller commits or rolls back.
    """
    rules = rules_for(game)
    await _lock_counter(db, address, game, now)

    credited_before, _ = await sum_credited(db, address, game, day_start(now), next_day_start(now))
    headroom = max(0, rules.daily_cap - credited_before)
    amount = max(0, min(int(provisional), headroom))

    await db.execute(
        update(DailyRewardCounter)
        .where(
            DailyRewardCounter.address == address,
            DailyRewardCounter.game == game.value,
            DailyRewardCounter.day == local_day(now),
        )
        .values(credited=credited_before + amount, updated_at=now)
    )

    reservation = CapReservation(
        amount=amount,
        daily_cap=rules.daily_cap,
        credited_before=credited_before,
    )
    if provisional > amount:
        logger.info(
            "daily_cap_reached",
            address=address,
            game=game.value,
            provisional=provisional,
            granted=amount,
            daily_cap=rules.daily_cap,
        )
    return reservation
