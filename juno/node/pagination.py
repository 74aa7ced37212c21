"""Height checks and paging of transaction search results."""

from __future__ import annotations

import base64
import hashlib
from collections.abc import Iterable, Mapping
from typing import Any

DEFAULT_PER_PAGE = 30
MAX_PER_PAGE = 100


class PaginationError(ValueError):
    """Raised when a requested height, page or ordering is out of range."""


def validate_per_page(per_page: int | None) -> int:
    """Return the page size to use, clamped to [1, MAX_PER_PAGE]."""
    if per_page is None or per_page < 1:
        return DEFAULT_PER_PAGE
    if per_page > MAX_PER_PAGE:
        return MAX_PER_PAGE
    return per_page


def validate_page(page: int | None, per_page: int, total_count: int) -> int:
    """Return the requested page, checking it lies within the available pages."""
    if per_page < 1:
        raise ValueError(f"zero or negative perPage: {per_page}")
    if page is None:
        return 1
    pages = max(1, -(-total_count // per_page)) if total_count > 0 else 1
    if page <= 0 or page > pages:
        raise PaginationError(f"page should be within [1, {pages}] range, given {page}")
    return page


def validate_skip_count(page: int, per_page: int) -> int:
    """Return how many results precede the given page, never negative."""
    return max(0, (page - 1) * per_page)


def get_height(latest_height: int, height: int | None, base: int) -> int:
    """Return the height to query, checking it against the stored range."""
    if height is None:
        return latest_height
    if height <= 0:
        raise PaginationError(f"height must be greater than 0, but got {height}")
    if height > latest_height:
        raise PaginationError(
            f"height {height} must be less than or equal to the current "
            f"blockchain height {latest_height}"
        )
    if height < base:
        raise PaginationError(f"height {height} is not available, lowest height is {base}")
    return height


def _tx_bytes(raw: Any) -> bytes:
    if raw is None:
        return b""
    if isinstance(raw, str):
        return base64.b64decode(raw)
    return bytes(raw)


def _position(result: Mapping[str, Any]) -> tuple[int, int]:
    return int(result["height"]), int(result["index"])


def sort_and_paginate(
    results: Iterable[Mapping[str, Any]],
    page: int | None,
    per_page: int | None,
    order_by: str,
) -> dict[str, Any]:
    """Order indexed transactions by position and return the requested page.

    Each result holds "height", "index", "tx" (raw bytes or base64 text) and
    optionally "result".
    """
    if order_by == "desc":
        ordered = sorted(results, key=_position, reverse=True)
    elif order_by in ("asc", ""):
        ordered = sorted(results, key=_position)
    else:
        raise PaginationError("expected order_by to be either `asc` or `desc` or empty")

    total_count = len(ordered)
    size = validate_per_page(per_page)
    current = validate_page(page, size, total_count)
    skip = validate_skip_count(current, size)

    txs = []
    for result in ordered[skip:skip + size]:
        raw = _tx_bytes(result.get("tx"))
        txs.append(
            {
                "hash": hashlib.sha256(raw).hexdigest().upper(),
                "height": int(result["height"]),
                "index": int(result["index"]),
                "tx_result": result.get("result"),
                "tx": raw,
            }
        )
    return {"txs": txs, "total_count": total_count}