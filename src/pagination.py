"""
Paginated listing of Katapult collections.
"""

import logging
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from katapult.models import ListOptions, Pagination

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (options) -> (items on the page, pagination metadata)
ListPage = Callable[[Optional[ListOptions]], Awaitable[Tuple[List[T], Pagination]]]


async def list_all(list_page: ListPage) -> List[T]:
    """
    Fetch every page of a collection, in page order.

    The first page is requested with the default page size; the remaining
    pages are requested one at a time using the total page count it reports.
    Any failure propagates and no partial listing is returned.

    Args:
        list_page: Coroutine function returning one page of the collection

    Returns:
        All items of the collection
    """
    items, pagination = await list_page(None)
    collected = list(items)

    for page in range(2, pagination.total_pages + 1):
        logger.debug(f"Fetching page {page} of {pagination.total_pages}")
        page_items, _ = await list_page(ListOptions(page=page))
        collected.extend(page_items)

    return collected
