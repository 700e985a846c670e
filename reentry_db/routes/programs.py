# SPDX-License-Identifier: Apache-2.0

"""
Program directory endpoints.

Listing, filter options, detail view, add/edit and team updates
(comments) for housing programs.
"""

import logging

from flask import current_app, jsonify, request
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace

from ..domain.filters import FilterState
from ..domain.sorting import SortState
from ..models.entities import ProgramRecord
from ..models.requests import CommentRequest, ProgramListQuery, ProgramPath, ProgramUpsertRequest
from ..services.errors import NotFound, StorageWriteError, ValidationRejected
from ..services.identity import bearer_token, resolve_author

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

programs_tag = Tag(name="Programs", description="Housing program directory")
programs_bp = APIBlueprint(
    'programs',
    __name__,
    url_prefix='/api/programs',
    abp_tags=[programs_tag]
)


def _directory():
    return current_app.directory_service


def _require_program(program_id: str):
    record = _directory().records.get(program_id)
    if record is None:
        raise NotFound(f"Program not found: {program_id}")
    return record


@programs_bp.get('')
def list_programs(query: ProgramListQuery):
    """
    List programs.

    Applies search and exact-match filters, sorts by the requested field
    and returns one page with navigation links.
    """
    with tracer.start_as_current_span("programs.list") as span:
        filters = FilterState(
            search=query.search,
            city=query.city,
            county=query.county,
            program_type=query.program_type,
            specialization=query.specialization,
            gender=query.gender
        )
        sort = SortState(sort_by=query.sort_by, sort_direction=query.sort_direction)

        page = _directory().query(filters, sort, query.page, query.page_size)

        span.set_attributes({
            "pagination.page": page.page,
            "pagination.total": page.total,
            "sort.field": sort.sort_by,
            "sort.direction": sort.sort_direction.value
        })

        link_params = query.model_dump(mode='json', exclude_defaults=True, exclude={'page', 'page_size'})
        return jsonify(current_app.hal_formatter.format_program_page(page, link_params)), 200


@programs_bp.get('/options')
def list_filter_options():
    """Selectable values for each exact-match filter."""
    return jsonify({
        'options': _directory().filter_options(),
        '_links': {
            'directory': current_app.hal_formatter.builder.link_builder.build_collection_link(
                '/api/programs'
            ).model_dump(exclude_none=True)
        }
    }), 200


@programs_bp.get('/<program_id>')
def get_program(path: ProgramPath):
    """Program detail with its team updates, newest first."""
    detail = _directory().program_detail(path.program_id)
    if detail is None:
        raise NotFound(f"Program not found: {path.program_id}")

    record, comments = detail
    return jsonify(current_app.hal_formatter.format_program(record, comments)), 200


@programs_bp.put('/<program_id>')
def save_program(path: ProgramPath, body: ProgramUpsertRequest):
    """
    Add or edit a program.

    An existing id is replaced; an unknown id adds the program to the
    front of the directory.
    """
    with tracer.start_as_current_span("programs.save") as span:
        existing = _directory().records.get(path.program_id)
        data = body.model_dump(exclude_none=True)

        if 'created_at' not in data and existing is not None:
            data['created_at'] = existing.created_at

        record = ProgramRecord(id=path.program_id, **data)
        saved, created = _directory().save_program(record)

        span.set_attribute("program.created", created)
        return jsonify(current_app.hal_formatter.format_program(saved)), 201 if created else 200


@programs_bp.get('/<program_id>/comments')
def list_comments(path: ProgramPath):
    """Team updates for a program, newest first."""
    _require_program(path.program_id)
    comments = _directory().comments.list_for(path.program_id)
    return jsonify(current_app.hal_formatter.format_comments(path.program_id, comments)), 200


@programs_bp.post('/<program_id>/comments')
def post_comment(path: ProgramPath, body: CommentRequest):
    """
    Post a team update.

    The author defaults to the signed-in user and falls back to "Guest".
    """
    with tracer.start_as_current_span("programs.post_comment") as span:
        span.set_attribute("program.id", path.program_id)
        _require_program(path.program_id)

        author = resolve_author(
            _directory().identity_provider,
            bearer_token(request.headers.get('Authorization')),
            body.author
        )

        if not body.body.strip():
            raise ValidationRejected("Update text is required")

        comment = _directory().post_comment(path.program_id, author, body.body)
        if comment is None:
            raise StorageWriteError("Update could not be saved")

        comments = _directory().comments.list_for(path.program_id)
        response = current_app.hal_formatter.format_comments(path.program_id, comments)
        response['comment'] = comment.to_payload()
        return jsonify(response), 201
