# SPDX-License-Identifier: Apache-2.0

"""
Directory filter logic.

Every active predicate must pass (logical AND). The ``"all"`` sentinel on an
exact-match key means no constraint for that key.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List

from ..models.entities import ProgramRecord
from ..models.enums import ALL, FilterKey


@dataclass(frozen=True)
class FilterState:
    """Selected filter values for the directory listing."""
    search: str = ""
    city: str = ALL
    county: str = ALL
    program_type: str = ALL
    specialization: str = ALL
    gender: str = ALL

    def is_unconstrained(self) -> bool:
        """True when no predicate would reject any record."""
        return not self.search and all(
            getattr(self, key.value) == ALL for key in FilterKey
        )


def matches_search(record: ProgramRecord, search_term: str) -> bool:
    """
    Case-insensitive substring match over name, city and county.
    
    Args:
        record: Program record to test
        search_term: Free-text term; empty always matches
        
    Returns:
        True if the record matches
    """
    if not search_term:
        return True
    
    haystack = f"{record.program_name} {record.city} {record.county}".lower()
    return search_term.lower() in haystack


def matches_exact(record: ProgramRecord, key: FilterKey, selected: str) -> bool:
    """Exact, case-sensitive comparison unless the sentinel is selected."""
    return selected == ALL or getattr(record, key.value) == selected


def matches_filters(record: ProgramRecord, filters: FilterState) -> bool:
    """Check a record against every predicate in ``filters``."""
    if not matches_search(record, filters.search):
        return False
    
    return all(
        matches_exact(record, key, getattr(filters, key.value))
        for key in FilterKey
    )


def apply_filters(
    records: Iterable[ProgramRecord],
    filters: FilterState
) -> List[ProgramRecord]:
    """
    Filter program records, preserving input order.
    
    Args:
        records: Records to filter
        filters: Filter criteria
        
    Returns:
        Filtered list of records
    """
    return [record for record in records if matches_filters(record, filters)]


def build_filter_options(records: Iterable[ProgramRecord]) -> Dict[str, List[str]]:
    """
    Build the selectable values for each exact-match filter.
    
    Each list starts with the ``"all"`` sentinel followed by the distinct
    record values in sorted order.
    """
    records = list(records)
    options = {}
    
    for key in FilterKey:
        values = {getattr(record, key.value) for record in records}
        options[key.value] = [ALL, *sorted(values)]
    
    return options
