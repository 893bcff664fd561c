"""
List requests → bounded, deterministic pages of an ordered SELECT.

Used identically by the status update listing and the comment listing:

  params = PageParams.from_raw(page, page_size)
  stmt   = text_filter(stmt, Model.body, q)
  stmt   = since_filter(stmt, Model.created_at, since)
  stmt   = enum_filter(stmt, Model.mood, MOOD, mood)
  page   = await paginate(db, stmt.order_by(...), params)

Malformed input never raises: out-of-range or unparsable pagination values
are clamped to defaults and unparsable or out-of-vocabulary filter values are
dropped.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from status_feed import vocabulary
from status_feed.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

LIKE_ESCAPE = "\\"
# Largest OFFSET a signed 64-bit bind parameter can carry
MAX_OFFSET = 2**63 - 1


def _to_int(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    page_size: int = 25

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def from_raw(
        cls,
        page: Any = None,
        page_size: Any = None,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
    ) -> "PageParams":
        """Clamp raw query values: page in [1, MAX_OFFSET // size], page_size in [1, max]."""
        default_size = default_page_size or settings.default_page_size
        max_size = max_page_size or settings.max_page_size

        page_num = _to_int(page)
        if page_num is None or page_num < 1:
            page_num = 1

        size = _to_int(page_size)
        if size is None or size <= 0:
            size = default_size
        size = min(size, max_size)
        page_num = min(page_num, MAX_OFFSET // size)

        return cls(page=page_num, page_size=size)


@dataclass
class Page(Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total_count: int


def escape_like(term: str) -> str:
    """Neutralise LIKE wildcards so user text only matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def parse_since(raw: Optional[str]) -> Optional[datetime]:
    """ISO-8601 → naive UTC datetime, or None when absent/unparsable."""
    if not raw or not raw.strip():
        return None
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    except (ValueError, OverflowError):
        logger.debug("Ignoring unparsable since=%r", raw)
        return None
    return parsed


def text_filter(stmt: Select, column, term: Optional[str]) -> Select:
    """Case-insensitive substring match against ``column``."""
    if term is None or not term.strip():
        return stmt
    pattern = f"%{escape_like(term.strip())}%"
    return stmt.where(column.ilike(pattern, escape=LIKE_ESCAPE))


def since_filter(stmt: Select, column, raw: Optional[str]) -> Select:
    """Keep rows created at or after ``raw``."""
    since = parse_since(raw)
    if since is None:
        return stmt
    return stmt.where(column >= since)


def enum_filter(stmt: Select, column, set_name: str, value: Optional[str]) -> Select:
    """Equality filter, silently skipped for values outside the vocabulary."""
    if not vocabulary.is_valid(set_name, value):
        if value:
            logger.debug("Ignoring %s filter with unknown value %r", set_name, value)
        return stmt
    return stmt.where(column == value)


async def paginate(db: AsyncSession, stmt: Select, params: PageParams) -> Page:
    """
    Run ``stmt`` for one page.

    ``stmt`` must already carry a total ORDER BY (ending in a unique column)
    so that identical requests against unchanged data return identical pages.
    ``total_count`` is computed over the filtered statement.
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total_count = (await db.execute(count_stmt)).scalar_one()

    rows = await db.execute(stmt.offset(params.offset).limit(params.page_size))
    items = list(rows.scalars().all())

    return Page(
        items=items,
        page=params.page,
        page_size=params.page_size,
        total_count=total_count,
    )
