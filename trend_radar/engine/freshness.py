"""Age filter for canonical entities."""

from __future__ import annotations

from typing import Iterable

from .entity import CanonicalEntity
from .entity import now_ms as current_ms

DEFAULT_MAX_AGE_MS = 3 * 60 * 60 * 1000


def is_fresh(entity: CanonicalEntity, max_age_ms: int, now_ms: int) -> bool:
    # unknown creation time counts as brand new
    return entity.age_ms(now_ms) < max_age_ms


def keep_fresh(
    entities: Iterable[CanonicalEntity],
    max_age_ms: int = DEFAULT_MAX_AGE_MS,
    now_ms: int | None = None,
) -> list[CanonicalEntity]:
    """Return entities younger than ``max_age_ms``, preserving order."""

    if now_ms is None:
        now_ms = current_ms()
    return [entity for entity in entities if is_fresh(entity, max_age_ms, now_ms)]


__all__ = ["DEFAULT_MAX_AGE_MS", "is_fresh", "keep_fresh"]
