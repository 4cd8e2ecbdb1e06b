"""Sequential human-readable IDs."""
from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy import insert

from manzil.models import IdCounter, Listing
from manzil.services import sequence


def test_next_follows_highest_existing_number():
    assert sequence.next_in_sequence(["AM1000", "AM1005"], sequence.LISTING_ID_PATTERN, "AM") == "AM1006"


def test_next_starts_at_first_number():
    assert sequence.next_in_sequence([], sequence.LISTING_ID_PATTERN, "AM") == "AM1000"
    assert sequence.next_in_sequence(["AM12", "X2000", None], sequence.LISTING_ID_PATTERN, "AM") == "AM1000"


def test_legacy_listing_prefix_counts():
    assert sequence.next_in_sequence(["M1010", "AM1003"], sequence.LISTING_ID_PATTERN, "AM") == "AM1011"


def test_project_ids():
    assert sequence.next_in_sequence(["P1000", "P1002", "AM5000"], sequence.PROJECT_ID_PATTERN, "P") == "P1003"


async def _insert_listing(db, property_id: str) -> None:
    async with db() as session:
        async with session.begin():
            session.add(
                Listing(
                    id=str(uuid4()),
                    property_id=property_id,
                    title="Seeded",
                    description="",
                    price=1,
                    location={},
                    image_urls=[],
                    created_by="seed",
                )
            )


@pytest.mark.asyncio
async def test_counter_is_seeded_from_existing_ids(db):
    await _insert_listing(db, "AM1000")
    await _insert_listing(db, "AM1005")

    async with db() as session:
        async with session.begin():
            first = await sequence.next_property_id(session)
        async with session.begin():
            second = await sequence.next_property_id(session)
        counter = await session.get(IdCounter, sequence.LISTING_PREFIX)

    assert (first, second) == ("AM1006", "AM1007")
    assert counter.last_value == 1007


@pytest.mark.asyncio
async def test_prefixes_have_independent_counters(db):
    async with db() as session:
        async with session.begin():
            listing_id = await sequence.next_property_id(session)
            project_id = await sequence.next_project_id(session)

    assert listing_id == "AM1000"
    assert project_id == "P1000"


@pytest.mark.asyncio
async def test_counter_created_concurrently_is_reused(db, monkeypatch):
    async def scan_while_another_writer_seeds(session, column):
        await session.execute(insert(IdCounter).values(prefix=sequence.LISTING_PREFIX, last_value=1020))
        return []

    monkeypatch.setattr(sequence, "_scan", scan_while_another_writer_seeds)

    async with db() as session:
        async with session.begin():
            property_id = await sequence.next_property_id(session)

    assert property_id == "AM1021"
