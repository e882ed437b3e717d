"""Parsing of Management API list responses.

Auth0 returns lists either as a bare array or, when totals are requested,
as an object holding the array under a named key next to the paging
fields. Both are folded into a ``ListPage``; anything else becomes a
``ShapeMismatch``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class ListShape(str, Enum):
    """Recognized list response shapes."""
    BARE_ARRAY = "bare_array"
    PAGINATED = "paginated"


@dataclass
class ListPage:
    """A page of items with whatever paging information was available."""
    items: list[dict[str, Any]]
    total: int
    page: int
    per_page: int
    shape: ListShape

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 1
        return max(1, -(-self.total // self.per_page))


@dataclass
class ShapeMismatch:
    """The response matched none of the known list shapes."""
    reason: str


ListParseResult = Union[ListPage, ShapeMismatch]


def as_count(value: Any) -> Optional[int]:
    """Coerce a non-negative integer parameter. Accepts 5, 5.0 and "5"."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if isinstance(value, int) and value >= 0:
        return value
    return None


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    return default


def parse_list_response(
    data: Any,
    key: str,
    params: Optional[dict[str, Any]] = None
) -> ListParseResult:
    """
    Parse a list response.

    Args:
        data: Decoded JSON body
        key: Name of the array field in the paginated shape ("clients")
        params: Paging parameters that were sent, used when the body has none

    Returns:
        ``ListPage`` on success, ``ShapeMismatch`` otherwise
    """
    params = params or {}
    requested_page = as_count(params.get("page")) or 0

    if isinstance(data, list):
        items = [item for item in data if isinstance(item, dict)]
        if len(items) != len(data):
            return ShapeMismatch(reason="array contains non-object entries")
        per_page = as_count(params.get("per_page")) or len(items)
        return ListPage(
            items=items,
            total=len(items),
            page=requested_page,
            per_page=per_page,
            shape=ListShape.BARE_ARRAY,
        )

    if isinstance(data, dict):
        items = data.get(key)
        if not isinstance(items, list):
            return ShapeMismatch(reason=f'the "{key}" array is missing or invalid')
        if not all(isinstance(item, dict) for item in items):
            return ShapeMismatch(reason=f'the "{key}" array contains non-object entries')

        # Logs use start/limit instead of page/per_page
        per_page = _as_int(
            data.get("per_page", data.get("limit")),
            as_count(params.get("per_page")) or len(items)
        ) or len(items)
        page = _as_int(data.get("page"), requested_page)
        if "page" not in data and "start" in data and per_page:
            page = _as_int(data.get("start"), 0) // per_page

        return ListPage(
            items=items,
            total=_as_int(data.get("total"), len(items)),
            page=page,
            per_page=per_page,
            shape=ListShape.PAGINATED,
        )

    return ShapeMismatch(reason=f"expected a list or an object, got {type(data).__name__}")
