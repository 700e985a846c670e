# SPDX-License-Identifier: Apache-2.0

"""
Recent activity endpoint.
"""

from flask import current_app, jsonify
from flask_openapi3 import APIBlueprint, Tag

from ..models.requests import ActivityQuery

activity_tag = Tag(name="Activity", description="Recent directory activity")
activity_bp = APIBlueprint(
    'activity',
    __name__,
    url_prefix='/api/activity',
    abp_tags=[activity_tag]
)


@activity_bp.get('')
def list_activity(query: ActivityQuery):
    """
    Recent activity, newest first.

    Seeds the feed from the current programs the first time it is read.
    """
    entries = current_app.directory_service.activity_feed(query.limit)
    return jsonify(current_app.hal_formatter.format_activity(entries)), 200
