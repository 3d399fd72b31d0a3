"""
Set-valued field primitives over association tables.

Each set member is one row, so adding or removing a member is a single
statement whose row count doubles as the modification count: 0 means the
member was already present (add) or absent (pull).
"""

import uuid
from typing import Any, Iterable, Set, Type

from sqlalchemy import delete, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.kernel.models.base import Base


def _insert_for(session: AsyncSession, model: Type[Base]):
    """Dialect insert construct, which supports ``ON CONFLICT DO NOTHING``."""
    if session.bind.dialect.name == "postgresql":
        return postgresql.insert(model)
    return sqlite.insert(model)


async def add_to_set(session: AsyncSession, model: Type[Base], **row: Any) -> int:
    """
    Insert ``row`` unless an identical member already exists.

    A concurrent insert of the same member is absorbed by the conflict
    clause instead of failing on the key.

    Returns:
        1 if the member was added, 0 if it was already present
    """
    result = await session.execute(_insert_for(session, model).values(**row).on_conflict_do_nothing())
    return result.rowcount or 0


async def add_many_to_set(session: AsyncSession, model: Type[Base], rows: Iterable[dict]) -> int:
    """Insert several members known to be absent (e.g. on a fresh record)."""
    rows = list(rows)
    if not rows:
        return 0
    await session.execute(insert(model), rows)
    return len(rows)


async def pull_from_set(session: AsyncSession, model: Type[Base], *criteria: Any) -> int:
    """
    Delete the member rows matching ``criteria``.

    Returns:
        Number of rows removed
    """
    result = await session.execute(delete(model).where(*criteria))
    return result.rowcount or 0


async def read_set(session: AsyncSession, column: Any, *criteria: Any) -> Set[uuid.UUID]:
    """Read one column of the matching member rows as a set."""
    result = await session.execute(select(column).where(*criteria))
    return set(result.scalars().all())
