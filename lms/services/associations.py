"""Helpers for the many-to-many association tables.

Replacing a set deletes every existing row for the owner and inserts the new
targets. Callers run these inside ``atomic`` so the swap commits as one unit.
"""

from typing import Iterable, Set

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..errors import NotFoundError


def lock_owner(db: Session, model, owner_id: int):
    """Load the owning row with ``FOR UPDATE`` so concurrent replacements serialize.

    SQLite has no row locks; its single-writer transactions already serialize.
    """
    owner = db.scalars(select(model).where(model.id == owner_id).with_for_update()).first()
    if owner is None:
        raise NotFoundError(model.__name__, owner_id)
    return owner


def require_existing(db: Session, model, ids: Iterable[int]) -> Set[int]:
    """Return ``ids`` as a set, raising NotFoundError if any row is missing."""
    wanted = set(ids)
    if not wanted:
        return wanted
    found = set(db.scalars(select(model.id).where(model.id.in_(sorted(wanted)))).all())
    missing = wanted - found
    if missing:
        raise NotFoundError(model.__name__, sorted(missing)[0], f"{model.__name__} ids not found: {sorted(missing)}")
    return wanted


def current_targets(db: Session, link_model, owner_column: str, owner_id: int, target_column: str) -> Set[int]:
    stmt = select(getattr(link_model, target_column)).where(getattr(link_model, owner_column) == owner_id)
    return set(db.scalars(stmt).all())


def replace_links(
    db: Session,
    link_model,
    owner_column: str,
    owner_id: int,
    target_column: str,
    target_ids: Iterable[int],
) -> Set[int]:
    """Replace every ``link_model`` row for ``owner_id`` with ``target_ids``."""
    targets = set(target_ids)
    db.execute(
        delete(link_model)
        .where(getattr(link_model, owner_column) == owner_id)
        .execution_options(synchronize_session="fetch")
    )
    for target_id in sorted(targets):
        db.add(link_model(**{owner_column: owner_id, target_column: target_id}))
    db.flush()
    return targets


def add_links(
    db: Session,
    link_model,
    owner_column: str,
    owner_id: int,
    target_column: str,
    target_ids: Iterable[int],
) -> Set[int]:
    """Add the missing ``link_model`` rows; existing rows are left alone.

    Returns the ids that were newly linked.
    """
    existing = current_targets(db, link_model, owner_column, owner_id, target_column)
    added = set(target_ids) - existing
    for target_id in sorted(added):
        db.add(link_model(**{owner_column: owner_id, target_column: target_id}))
    db.flush()
    return added
