# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the reentry housing directory.

This package contains pure query functions (filter, sort, paginate) and
domain events. Nothing here touches persistence.
"""
