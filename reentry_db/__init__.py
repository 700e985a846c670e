# SPDX-License-Identifier: Apache-2.0

"""
Reentry housing directory.

Searchable directory of reentry housing programs with team updates,
discussion threads and a recent-activity feed.
"""

__version__ = "1.0.0"
