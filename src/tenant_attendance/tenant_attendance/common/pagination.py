from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, Tuple, TypeVar

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .validators import require_int

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def normalize_page(page, limit) -> Tuple[int, int, int]:
    """Returns (page, limit, offset) after range checks."""
    page = require_int(page if page is not None else 1, "page", minimum=1)
    limit = require_int(limit if limit is not None else DEFAULT_PAGE_SIZE, "limit", minimum=1, maximum=MAX_PAGE_SIZE)
    return page, limit, (page - 1) * limit
