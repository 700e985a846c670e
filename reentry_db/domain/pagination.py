# SPDX-License-Identifier: Apache-2.0

"""
Page slicing for directory listings.
"""

import math
from dataclasses import dataclass, field
from typing import Generic, List, Sequence, TypeVar

T = TypeVar('T')

DEFAULT_PAGE_SIZE = 10


@dataclass
class PageResult(Generic[T]):
    """One page of an ordered result set."""
    items: List[T]
    page: int
    page_size: int
    total: int
    total_pages: int
    start_index: int = 0
    end_index: int = 0
    has_previous: bool = field(init=False)
    has_next: bool = field(init=False)
    
    def __post_init__(self):
        self.has_previous = self.page > 1
        self.has_next = self.page < self.total_pages


def count_pages(total: int, page_size: int) -> int:
    """Number of pages needed for ``total`` items; never less than one."""
    return max(1, math.ceil(total / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp a requested page into ``[1, total_pages]``."""
    return min(max(1, page), total_pages)


def paginate(records: Sequence[T], page: int, page_size: int = DEFAULT_PAGE_SIZE) -> PageResult[T]:
    """
    Slice an ordered sequence into a page.
    
    Args:
        records: Ordered records
        page: Requested page number; clamped rather than trusted
        page_size: Items per page, must be positive
        
    Returns:
        PageResult with the page items and 1-based display indices
        
    Raises:
        ValueError: If page_size is not positive
    """
    if page_size <= 0:
        raise ValueError("page_size must be a positive integer")
    
    total = len(records)
    total_pages = count_pages(total, page_size)
    page = clamp_page(page, total_pages)
    
    offset = (page - 1) * page_size
    items = list(records[offset:offset + page_size])
    
    return PageResult(
        items=items,
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
        start_index=min(offset + 1, total),
        end_index=min(offset + page_size, total)
    )
