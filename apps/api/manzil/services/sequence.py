"""Human-readable sequential identifiers (``AM1000``, ``P1000``, ...).

Numbers are handed out from a row in ``id_counters`` that is locked for the
duration of the caller's transaction. The first allocation for a prefix seeds
the counter by scanning the IDs already stored, so databases populated before
the counter existed continue from their highest number.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable

from sqlalchemy import insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from ..models.counter import IdCounter
from ..models.listing import Listing
from ..models.project import Project

logger = logging.getLogger(__name__)

FIRST_NUMBER = 1000

LISTING_PREFIX = "AM"
# legacy listings were numbered M1000, M1001, ...
LISTING_ID_PATTERN = re.compile(r"^(?:M|AM)(\d+)$", re.IGNORECASE)

PROJECT_PREFIX = "P"
PROJECT_ID_PATTERN = re.compile(r"^P(\d+)$")


def highest_number(existing: Iterable[str | None], pattern: re.Pattern[str]) -> int:
    """Return the largest numeric suffix >= 1000 among ``existing``, or 999."""

    highest = FIRST_NUMBER - 1
    for value in existing:
        if not isinstance(value, str):
            continue
        match = pattern.match(value)
        if not match:
            continue
        number = int(match.group(1))
        if number >= FIRST_NUMBER and number > highest:
            highest = number
    return highest


def next_in_sequence(existing: Iterable[str | None], pattern: re.Pattern[str], prefix: str) -> str:
    """Compute the ID following the highest one in ``existing``."""

    return f"{prefix}{max(highest_number(existing, pattern) + 1, FIRST_NUMBER)}"


async def _scan(session: AsyncSession, column: InstrumentedAttribute[str]) -> list[str]:
    result = await session.execute(select(column))
    return list(result.scalars().all())


def _insert_ignoring_conflict(session: AsyncSession, prefix: str, seed: int):
    values = {"prefix": prefix, "last_value": seed}
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(IdCounter).values(**values).on_conflict_do_nothing(index_elements=[IdCounter.prefix])
    if dialect == "sqlite":
        return sqlite.insert(IdCounter).values(**values).on_conflict_do_nothing()
    return insert(IdCounter).values(**values)


async def allocate(
    session: AsyncSession,
    *,
    prefix: str,
    pattern: re.Pattern[str],
    column: InstrumentedAttribute[str],
) -> str:
    """Reserve the next ID for ``prefix`` inside the current transaction.

    A missing counter row is inserted with conflicts ignored and then locked,
    so two first allocations racing for the same prefix both end up on the
    one row instead of failing on its primary key.
    """

    stmt = select(IdCounter).where(IdCounter.prefix == prefix).with_for_update()
    counter = (await session.execute(stmt)).scalar_one_or_none()
    if counter is None:
        seed = highest_number(await _scan(session, column), pattern)
        result = await session.execute(_insert_ignoring_conflict(session, prefix, seed))
        if result.rowcount:
            logger.info("Seeded %s counter at %s", prefix, seed)
        counter = (await session.execute(stmt.execution_options(populate_existing=True))).scalar_one()

    counter.last_value = max(counter.last_value + 1, FIRST_NUMBER)
    await session.flush()
    return f"{prefix}{counter.last_value}"


async def next_property_id(session: AsyncSession) -> str:
    return await allocate(session, prefix=LISTING_PREFIX, pattern=LISTING_ID_PATTERN, column=Listing.property_id)


async def next_project_id(session: AsyncSession) -> str:
    return await allocate(session, prefix=PROJECT_PREFIX, pattern=PROJECT_ID_PATTERN, column=Project.project_id)
