from __future__ import annotations

from datetime import datetime
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from activid.db.models import Wish, WishLock

def wish_lock_id(invitation_id: str, name_key: str) -> str:
    return f"{invitation_id}_{name_key}"

# --- Wish ---
async def get_wish(session: AsyncSession, wish_id: str) -> Wish | None:
    res = await session.execute(select(Wish).where(Wish.id == wish_id))
    return res.scalar_one_or_none()

async def list_wishes(session: AsyncSession, invitation_id: str) -> list[Wish]:
    res = await session.execute(
        select(Wish).where(Wish.invitation_id == invitation_id).order_by(Wish.created_at.desc(), Wish.id.asc())
    )
    return list(res.scalars().all())

async def get_wish_lock(session: AsyncSession, invitation_id: str, name_key: str) -> WishLock | None:
    res = await session.execute(select(WishLock).where(WishLock.id == wish_lock_id(invitation_id, name_key)))
    return res.scalar_one_or_none()

async def get_wish_by_name_key(session: AsyncSession, invitation_id: str, name_key: str) -> Wish | None:
    lock = await get_wish_lock(session, invitation_id, name_key)
    if not lock or not lock.wish_id:
        return None
    return await get_wish(session, lock.wish_id)

async def create_wish_once(
    session: AsyncSession,
    invitation_id: str,
    name: str,
    name_key: str,
    message: str,
    created_at: datetime,
) -> tuple[Wish | None, bool]:
    """Insert a wish unless this guest already posted one.

    Returns ``(wish, created)``. When ``created`` is False the wish is the one
    already on record, or None if its lock points at a missing row.
    """
    existing = await get_wish_lock(session, invitation_id, name_key)
    if existing:
        return await get_wish(session, existing.wish_id), False

    wish = Wish(
        invitation_id=invitation_id,
        name=name,
        name_key=name_key,
        message=message,
        created_at=created_at,
    )
    session.add(wish)
    await session.flush()
    session.add(WishLock(
        id=wish_lock_id(invitation_id, name_key),
        invitation_id=invitation_id,
        name_key=name_key,
        wish_id=wish.id,
        created_at=created_at,
    ))
    try:
        await session.commit()
    except IntegrityError:
        # another request took the lock between our read and commit
        await session.rollback()
        return await get_wish_by_name_key(session, invitation_id, name_key), False
    return wish, True
