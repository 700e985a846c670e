# SPDX-License-Identifier: Apache-2.0

"""
Team discussion threads.

Free-standing posts that are not tied to a single program.
"""

import logging

from flask import current_app, jsonify, request
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace

from ..models.requests import ThreadRequest
from ..services.errors import StorageWriteError, ValidationRejected
from ..services.identity import bearer_token, resolve_author

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

threads_tag = Tag(name="Threads", description="Team discussion threads")
threads_bp = APIBlueprint(
    'threads',
    __name__,
    url_prefix='/api/threads',
    abp_tags=[threads_tag]
)


@threads_bp.get('')
def list_threads():
    """Threads, newest first."""
    threads = current_app.directory_service.list_threads()
    return jsonify(current_app.hal_formatter.format_threads(threads)), 200


@threads_bp.post('')
def post_thread(body: ThreadRequest):
    """Start a thread. Topic and message are both required."""
    with tracer.start_as_current_span("threads.post"):
        directory = current_app.directory_service

        if not body.topic.strip() or not body.body.strip():
            raise ValidationRejected("Topic and message are required")

        author = resolve_author(
            directory.identity_provider,
            bearer_token(request.headers.get('Authorization')),
            body.author
        )

        thread = directory.post_thread(author, body.topic, body.body)
        if thread is None:
            raise StorageWriteError("Thread could not be saved")

        response = current_app.hal_formatter.format_threads(directory.list_threads())
        response['thread'] = thread.to_payload()
        return jsonify(response), 201
