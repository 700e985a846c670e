# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the directory view state and query pipeline.
"""

from reentry_db.domain.directory import DirectoryView, run_query
from reentry_db.domain.filters import FilterState
from reentry_db.domain.sorting import SortState
from reentry_db.models.enums import FilterKey, SortDirection


class TestDirectoryView:
    """State transitions reset or clamp the page."""

    def test_search_resets_page(self):
        view = DirectoryView(page=3).with_search("boston")

        assert view.page == 1
        assert view.filters.search == "boston"

    def test_filter_resets_page(self):
        view = DirectoryView(page=2).with_filter(FilterKey.CITY, "Boston")

        assert view.page == 1
        assert view.filters.city == "Boston"

    def test_filter_accepts_key_value(self):
        view = DirectoryView().with_filter("gender", "Male")

        assert view.filters.gender == "Male"

    def test_sort_click_resets_page_and_toggles(self):
        view = DirectoryView(page=4, sort=SortState("city")).with_sort("city")

        assert view.page == 1
        assert view.sort.sort_direction == SortDirection.DESC

    def test_with_page_clamps_to_available_pages(self):
        view = DirectoryView(page_size=10).with_page(7, total=25)

        assert view.page == 3

    def test_run_applies_filter_sort_and_page(self, sample_programs):
        view = DirectoryView(
            filters=FilterState(gender="Male"),
            sort=SortState("programName", SortDirection.DESC),
            page_size=1
        )

        page = view.run(sample_programs)

        assert [record.id for record in page.items] == ["r3"]
        assert page.total == 2
        assert page.total_pages == 2


class TestRunQuery:

    def test_boston_search_scenario(self, sample_programs):
        page = run_query(sample_programs, FilterState(search="boston"), SortState())

        assert [record.id for record in page.items] == ["r1"]
        assert page.total_pages == 1

    def test_no_match_gives_empty_single_page(self, sample_programs):
        page = run_query(sample_programs, FilterState(search="nantucket"), SortState(), page=5)

        assert page.items == []
        assert page.page == 1
        assert page.total_pages == 1
