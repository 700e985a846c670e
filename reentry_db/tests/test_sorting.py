# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for directory sorting.
"""

import pytest

from reentry_db.domain.sorting import (
    SortState,
    apply_sort,
    compare_values,
    resolve_accessor,
    toggle_sort
)
from reentry_db.models.enums import SortDirection


def _ids(records):
    return [record.id for record in records]


class TestApplySort:
    """Ordering by field and direction."""

    def test_sort_by_name_ascending(self, sample_programs):
        result = apply_sort(sample_programs, SortState("programName"))

        assert _ids(result) == ["r2", "r3", "r1"]

    def test_sort_by_name_descending(self, sample_programs):
        result = apply_sort(sample_programs, SortState("programName", SortDirection.DESC))

        assert _ids(result) == ["r1", "r3", "r2"]

    def test_numeric_field_uses_numeric_order(self, make_program):
        records = [
            make_program(id="a", availableBeds=10),
            make_program(id="b", availableBeds=9),
            make_program(id="c", availableBeds=100)
        ]

        assert _ids(apply_sort(records, SortState("availableBeds"))) == ["b", "a", "c"]

    def test_contact_sorts_by_person(self, make_program):
        records = [
            make_program(id="a", contact={"person": "Zoe"}),
            make_program(id="b", contact={"person": "adam"}),
            make_program(id="c", contact={"person": "Mia"})
        ]

        assert _ids(apply_sort(records, SortState("contact"))) == ["b", "c", "a"]

    def test_snake_case_field_names_are_accepted(self, sample_programs):
        assert _ids(apply_sort(sample_programs, SortState("program_name"))) == ["r2", "r3", "r1"]

    def test_equal_keys_keep_input_order_ascending(self, make_program):
        records = [
            make_program(id="a", city="Lowell"),
            make_program(id="b", city="Boston"),
            make_program(id="c", city="Lowell"),
            make_program(id="d", city="Boston")
        ]

        assert _ids(apply_sort(records, SortState("city"))) == ["b", "d", "a", "c"]

    def test_equal_keys_keep_input_order_descending(self, make_program):
        records = [
            make_program(id="a", city="Lowell"),
            make_program(id="b", city="Boston"),
            make_program(id="c", city="Lowell"),
            make_program(id="d", city="Boston")
        ]

        result = apply_sort(records, SortState("city", SortDirection.DESC))

        assert _ids(result) == ["a", "c", "b", "d"]

    def test_accents_and_case_do_not_split_groups(self, make_program):
        records = [
            make_program(id="a", programName="Zeta"),
            make_program(id="b", programName="éclair"),
            make_program(id="c", programName="Echo")
        ]

        assert _ids(apply_sort(records, SortState("programName"))) == ["c", "b", "a"]

    def test_unknown_field_leaves_order_unchanged(self, sample_programs):
        assert apply_sort(sample_programs, SortState("doesNotExist")) == sample_programs

    def test_sort_returns_new_list(self, sample_programs):
        original = list(sample_programs)

        apply_sort(sample_programs, SortState("city", SortDirection.DESC))

        assert sample_programs == original

    def test_direction_accepts_plain_string(self):
        assert SortState("city", "desc").sort_direction == SortDirection.DESC


class TestCompareValues:
    """Pairwise comparison rules."""

    def test_numbers_compare_by_difference(self):
        assert compare_values(2, 10) < 0
        assert compare_values(10, 2) > 0
        assert compare_values(3, 3) == 0

    def test_mixed_types_compare_equal(self):
        assert compare_values("5", 5) == 0
        assert compare_values(None, "a") == 0

    def test_accessor_for_created_at_is_epoch_millis(self, boston_program):
        assert resolve_accessor("createdAt")(boston_program) == boston_program.created_at_millis


class TestToggleSort:
    """Column header clicks."""

    def test_same_field_flips_direction(self):
        state = toggle_sort(SortState("city"), "city")

        assert state == SortState("city", SortDirection.DESC)

    def test_double_toggle_restores_state(self, make_program):
        records = [
            make_program(id="a", capacity=8),
            make_program(id="b", capacity=4),
            make_program(id="c", capacity=8),
            make_program(id="d", capacity=4),
            make_program(id="e", capacity=12)
        ]
        state = SortState("capacity", SortDirection.ASC)

        toggled_twice = toggle_sort(toggle_sort(state, "capacity"), "capacity")

        assert toggled_twice == state
        assert apply_sort(records, toggled_twice) == apply_sort(records, state)
        assert _ids(apply_sort(records, toggled_twice)) == ["b", "d", "a", "c", "e"]

    def test_new_field_sorts_ascending(self):
        state = toggle_sort(SortState("city", SortDirection.DESC), "county")

        assert state == SortState("county", SortDirection.ASC)

    @pytest.mark.parametrize("field_name", ["program_name", "programName"])
    def test_alias_counts_as_same_field(self, field_name):
        state = toggle_sort(SortState("programName"), field_name)

        assert state.sort_direction == SortDirection.DESC
