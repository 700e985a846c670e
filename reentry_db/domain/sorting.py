# SPDX-License-Identifier: Apache-2.0

"""
Directory sort logic.

Sort keys come from an explicit accessor table rather than attribute
lookup by name, so composite fields (the contact block) resolve to a
single display value. Sorting is stable; descending order is derived from
the ascending result by reversing runs of equal keys, which keeps records
with equal keys in their input order in both directions.
"""

import unicodedata
from dataclasses import dataclass, replace
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, List, Tuple

from ..models.entities import ProgramRecord
from ..models.enums import SortDirection

DEFAULT_SORT_FIELD = "programName"

Accessor = Callable[[ProgramRecord], Any]

SORT_ACCESSORS: Dict[str, Accessor] = {
    "id": lambda record: record.id,
    "programName": lambda record: record.program_name,
    "city": lambda record: record.city,
    "county": lambda record: record.county,
    "programType": lambda record: record.program_type,
    "specialization": lambda record: record.specialization,
    "gender": lambda record: record.gender,
    "availableBeds": lambda record: record.available_beds,
    "capacity": lambda record: record.capacity,
    "contact": lambda record: record.contact.person,
    "notes": lambda record: record.notes,
    "createdAt": lambda record: record.created_at_millis,
}

# snake_case spellings accepted alongside the wire names
_FIELD_ALIASES = {
    "program_name": "programName",
    "program_type": "programType",
    "available_beds": "availableBeds",
    "created_at": "createdAt",
}


@dataclass(frozen=True)
class SortState:
    """Current sort field and direction."""
    sort_by: str = DEFAULT_SORT_FIELD
    sort_direction: SortDirection = SortDirection.ASC

    def __post_init__(self):
        # Accept plain strings from query strings and persisted state
        object.__setattr__(self, "sort_direction", SortDirection(self.sort_direction))


def canonical_field(field_name: str) -> str:
    """Map a requested sort field to its accessor table name."""
    return _FIELD_ALIASES.get(field_name, field_name)


def resolve_accessor(field_name: str) -> Accessor:
    """
    Look up the accessor for a sort field.

    Unknown fields sort every record as the empty string, which leaves
    the input order untouched.
    """
    return SORT_ACCESSORS.get(canonical_field(field_name), lambda record: "")


def text_sort_key(value: str) -> Tuple[str, str, str]:
    """
    Collation key approximating locale-aware comparison.

    Primary level ignores accents and case, secondary ignores case only,
    and the raw value breaks remaining ties.
    """
    folded = value.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base, folded, value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compare_values(left: Any, right: Any) -> int:
    """
    Compare two sort keys.

    Strings use text collation, numbers use their difference, and any
    other pairing (including mixed string/number) compares as equal.
    """
    if isinstance(left, str) and isinstance(right, str):
        left_key, right_key = text_sort_key(left), text_sort_key(right)
        return (left_key > right_key) - (left_key < right_key)

    if _is_number(left) and _is_number(right):
        difference = left - right
        return (difference > 0) - (difference < 0)

    return 0


def _reverse_runs(keyed: List[Tuple[Any, ProgramRecord]]) -> List[Tuple[Any, ProgramRecord]]:
    """Reverse the order of runs of equal keys, keeping each run's order."""
    runs: List[List[Tuple[Any, ProgramRecord]]] = []

    for item in keyed:
        if runs and compare_values(runs[-1][-1][0], item[0]) == 0:
            runs[-1].append(item)
        else:
            runs.append([item])

    return [item for run in reversed(runs) for item in run]


def apply_sort(records: Iterable[ProgramRecord], sort: SortState) -> List[ProgramRecord]:
    """
    Sort program records by the selected field and direction.

    Args:
        records: Records to sort
        sort: Sort field and direction

    Returns:
        New list in sorted order
    """
    accessor = resolve_accessor(sort.sort_by)
    keyed = [(accessor(record), record) for record in records]

    ordered = sorted(keyed, key=cmp_to_key(lambda a, b: compare_values(a[0], b[0])))

    if sort.sort_direction == SortDirection.DESC:
        ordered = _reverse_runs(ordered)

    return [record for _, record in ordered]


def toggle_sort(sort: SortState, field_name: str) -> SortState:
    """
    Apply a header click to the sort state.

    Re-selecting the current field flips the direction; choosing a new
    field sorts it ascending.
    """
    if canonical_field(field_name) == canonical_field(sort.sort_by):
        flipped = (
            SortDirection.DESC
            if sort.sort_direction == SortDirection.ASC
            else SortDirection.ASC
        )
        return replace(sort, sort_direction=flipped)

    return SortState(sort_by=field_name, sort_direction=SortDirection.ASC)
