# SPDX-License-Identifier: Apache-2.0

"""
API blueprints for the directory.
"""

from .activity import activity_bp
from .programs import programs_bp
from .threads import threads_bp

__all__ = ['activity_bp', 'programs_bp', 'threads_bp']
