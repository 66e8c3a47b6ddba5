# backend/fomo/services/analytics/pagination.py
"""
Exhaustive paging over capped queries.

The hosted API returns at most 1000 rows per request. Counting only the
first page silently undercounts every metric, so all readers go through
fetch_all_paginated(), which keeps asking until a page comes back short.
A page of exactly page_size rows always triggers one more request.
"""

import logging
from typing import Callable, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000

T = TypeVar("T")

PageFetcher = Callable[[int, int], Sequence[T]]


class QueryCancelled(Exception):
    """The caller abandoned the query; no partial result is returned."""


def fetch_all_paginated(
    page_fetcher: PageFetcher,
    page_size: int = DEFAULT_PAGE_SIZE,
    is_cancelled: Optional[Callable[[], bool]] = None,
) -> list[T]:
    """
    Drain a paged source.

    Args:
        page_fetcher: called as page_fetcher(offset, limit)
        page_size: rows per request (the source's cap)
        is_cancelled: checked before every request; when it returns True
                      QueryCancelled is raised and fetched rows are dropped
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")

    rows: list[T] = []
    offset = 0
    pages = 0

    while True:
        if is_cancelled is not None and is_cancelled():
            logger.info(f"Paged fetch cancelled after {pages} pages")
            raise QueryCancelled()

        page = page_fetcher(offset, page_size)
        pages += 1
        rows.extend(page)

        if len(page) < page_size:
            break
        offset += len(page)

    if pages > 1:
        logger.debug(f"Paged fetch drained {len(rows)} rows in {pages} pages")
    return rows
