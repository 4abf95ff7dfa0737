"""Unit tests for wishlist service."""

import pytest
from sqlalchemy import func, select

from tour_booking.core.exceptions import NotFoundError
from tour_booking.models import WishlistEntry
from tour_booking.services.wishlist_service import WishlistService


async def _entry_count(session) -> int:
    return (await session.execute(select(func.count(WishlistEntry.id)))).scalar_one()


@pytest.mark.asyncio
async def test_save_tour(test_session, tour_id, user_id):
    service = WishlistService(test_session)

    result = await service.save_tour(user_id, tour_id)

    assert result.created is True
    assert result.entry.tour_id == tour_id
    assert result.entry.user_id == user_id
    assert result.entry.added_date is not None


@pytest.mark.asyncio
async def test_save_tour_twice_keeps_one_entry(test_session, tour_id, user_id):
    """Saving an already saved tour is a no-op that returns the existing entry."""
    service = WishlistService(test_session)

    first = await service.save_tour(user_id, tour_id)
    second = await service.save_tour(user_id, tour_id)

    assert second.created is False
    assert second.entry.id == first.entry.id
    assert await _entry_count(test_session) == 1


@pytest.mark.asyncio
async def test_save_unknown_tour(test_session, user_id):
    service = WishlistService(test_session)

    with pytest.raises(NotFoundError):
        await service.save_tour(user_id, 4040)

    assert await _entry_count(test_session) == 0


@pytest.mark.asyncio
async def test_remove_tour(test_session, tour_id, user_id):
    service = WishlistService(test_session)
    await service.save_tour(user_id, tour_id)

    assert await service.remove_tour(user_id, tour_id) is True
    assert await service.get_entry(user_id, tour_id) is None
    # Removing again is not an error
    assert await service.remove_tour(user_id, tour_id) is False


@pytest.mark.asyncio
async def test_entries_are_per_user(test_session, tour_id, user_factory):
    service = WishlistService(test_session)
    alice = await user_factory()
    bob = await user_factory()

    await service.save_tour(alice, tour_id)
    await service.save_tour(bob, tour_id)
    await service.remove_tour(alice, tour_id)

    assert await service.get_entry(alice, tour_id) is None
    assert await service.get_entry(bob, tour_id) is not None
