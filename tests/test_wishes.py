from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from activid.db.models import Wish, WishLock
from activid.db.repo import create_wish_once, get_wish_by_name_key, list_wishes, wish_lock_id
from activid.services.wishes import WishValidationError, parse_wish_payload, serialize_wish

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_parse_wish_payload_trims_fields():
    body = {"invitationId": " inv ", "name": " Ann ", "nameKey": " ann ", "message": " hi "}
    assert parse_wish_payload(body) == ("inv", "Ann", "ann", "hi")


@pytest.mark.parametrize(
    "body, error",
    [
        (None, "Missing invitationId, name, nameKey, or message"),
        ([], "Missing invitationId, name, nameKey, or message"),
        ({"invitationId": "inv", "name": "Ann", "nameKey": "ann"}, "Missing invitationId, name, nameKey, or message"),
        ({"invitationId": "inv", "name": "Ann", "nameKey": "ann", "message": 5}, "Missing invitationId, name, nameKey, or message"),
        ({"invitationId": "inv", "name": "   ", "nameKey": "ann", "message": "hi"}, "Missing invitationId, name, nameKey, or message"),
        ({"invitationId": "i" * 256, "name": "Ann", "nameKey": "ann", "message": "hi"}, "invitationId is too long"),
        ({"invitationId": "inv", "name": "x" * 81, "nameKey": "ann", "message": "hi"}, "Name is too long"),
        ({"invitationId": "inv", "name": "Ann", "nameKey": "k" * 121, "message": "hi"}, "nameKey is too long"),
        ({"invitationId": "inv", "name": "Ann", "nameKey": "ann", "message": "m" * 801}, "Message is too long"),
    ],
)
def test_parse_wish_payload_rejects(body, error):
    with pytest.raises(WishValidationError, match=error):
        parse_wish_payload(body)


def test_parse_wish_payload_accepts_limits():
    body = {"invitationId": "i" * 255, "name": "x" * 80, "nameKey": "k" * 120, "message": "m" * 800}
    assert parse_wish_payload(body)[1] == "x" * 80


def test_serialize_naive_timestamp_as_utc():
    wish = Wish(id="w1", invitation_id="inv", name="Ann", name_key="ann", message="hi",
                created_at=T0.replace(tzinfo=None))
    assert serialize_wish(wish) == {
        "id": "w1",
        "invitationId": "inv",
        "name": "Ann",
        "nameKey": "ann",
        "message": "hi",
        "createdAt": int(T0.timestamp() * 1000),
    }


@pytest.mark.asyncio
async def test_create_wish_once(sessionmaker):
    async with sessionmaker() as session:
        wish, created = await create_wish_once(session, "inv", "Ann", "ann", "Congrats!", T0)
        assert created
        assert wish.id

        again, created_again = await create_wish_once(session, "inv", "Ann B.", "ann", "Second try", T0)
        assert not created_again
        assert again.id == wish.id
        assert again.message == "Congrats!"

        locks = (await session.execute(select(WishLock))).scalars().all()
        assert [lock.id for lock in locks] == [wish_lock_id("inv", "ann")]
        wishes = (await session.execute(select(Wish))).scalars().all()
        assert len(wishes) == 1


@pytest.mark.asyncio
async def test_same_name_key_on_other_invitation_is_separate(sessionmaker):
    async with sessionmaker() as session:
        _, first = await create_wish_once(session, "inv-a", "Ann", "ann", "hi", T0)
        _, second = await create_wish_once(session, "inv-b", "Ann", "ann", "hi", T0)
        assert first and second


@pytest.mark.asyncio
async def test_dangling_lock_reports_no_wish(sessionmaker):
    async with sessionmaker() as session:
        session.add(WishLock(id=wish_lock_id("inv", "ann"), invitation_id="inv", name_key="ann",
                             wish_id="missing", created_at=T0))
        await session.commit()

        wish, created = await create_wish_once(session, "inv", "Ann", "ann", "hi", T0)
        assert wish is None
        assert not created
        assert await get_wish_by_name_key(session, "inv", "ann") is None


@pytest.mark.asyncio
async def test_list_wishes_newest_first(sessionmaker):
    async with sessionmaker() as session:
        await create_wish_once(session, "inv", "Ann", "ann", "first", T0)
        await create_wish_once(session, "inv", "Bob", "bob", "second", T0 + timedelta(minutes=5))
        await create_wish_once(session, "other", "Cid", "cid", "elsewhere", T0 + timedelta(minutes=10))

        wishes = await list_wishes(session, "inv")
        assert [w.message for w in wishes] == ["second", "first"]

        found = await get_wish_by_name_key(session, "inv", "bob")
        assert found.message == "second"
        assert await get_wish_by_name_key(session, "inv", "nobody") is None
