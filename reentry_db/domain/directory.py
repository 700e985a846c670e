# SPDX-License-Identifier: Apache-2.0

"""
Directory view state and the filter -> sort -> paginate pipeline.

Any change to a filter or the sort resets the view to page 1, since the
previous page offset no longer refers to the same result set.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable

from ..models.entities import ProgramRecord
from ..models.enums import FilterKey
from .filters import FilterState, apply_filters
from .pagination import DEFAULT_PAGE_SIZE, PageResult, clamp_page, count_pages, paginate
from .sorting import SortState, apply_sort, toggle_sort


@dataclass(frozen=True)
class DirectoryView:
    """Immutable snapshot of what the directory listing is showing."""
    filters: FilterState = field(default_factory=FilterState)
    sort: SortState = field(default_factory=SortState)
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def with_search(self, term: str) -> "DirectoryView":
        return replace(self, filters=replace(self.filters, search=term), page=1)

    def with_filter(self, key: FilterKey, value: str) -> "DirectoryView":
        """Select a value for an exact-match filter."""
        key = FilterKey(key)
        return replace(self, filters=replace(self.filters, **{key.value: value}), page=1)

    def with_sort(self, field_name: str) -> "DirectoryView":
        """Apply a column header click."""
        return replace(self, sort=toggle_sort(self.sort, field_name), page=1)

    def with_page(self, page: int, total: int) -> "DirectoryView":
        """Move to ``page``, clamped to the pages available for ``total`` results."""
        return replace(self, page=clamp_page(page, count_pages(total, self.page_size)))

    def run(self, records: Iterable[ProgramRecord]) -> PageResult[ProgramRecord]:
        """Run the full query pipeline for this view."""
        return run_query(records, self.filters, self.sort, self.page, self.page_size)


def run_query(
    records: Iterable[ProgramRecord],
    filters: FilterState,
    sort: SortState,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE
) -> PageResult[ProgramRecord]:
    """
    Filter, sort and paginate program records.

    Args:
        records: Full record set
        filters: Filter criteria
        sort: Sort field and direction
        page: Requested page (clamped)
        page_size: Items per page

    Returns:
        PageResult for the requested page
    """
    filtered = apply_filters(records, filters)
    ordered = apply_sort(filtered, sort)
    return paginate(ordered, page, page_size)
