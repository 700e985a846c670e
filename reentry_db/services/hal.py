# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
HAL (Hypertext Application Language) response formatting utilities.
Builds directory responses with self, action and pagination links.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode, urljoin

from ..domain.pagination import PageResult
from ..models.entities import ActivityEntry, CommentEntry, ProgramRecord, ThreadEntry
from ..models.responses import HalLink

PROBLEM_BASE = "https://reentry-db.example.org/problems"


class HalLinkBuilder:
    """Builder for HAL links with proper URL construction."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/') + '/'

    def build_link(
        self,
        path: str,
        method: str = "GET",
        content_type: Optional[str] = None,
        title: Optional[str] = None,
        templated: bool = False
    ) -> HalLink:
        """Build a HAL link with proper URL construction."""
        href = urljoin(self.base_url, path.lstrip('/'))

        return HalLink(
            href=href,
            method=method,
            type=content_type,
            title=title,
            templated=templated or None
        )

    def build_self_link(self, resource_path: str) -> HalLink:
        """Build self link for a resource."""
        return self.build_link(resource_path, title="Self")

    def build_collection_link(self, collection_path: str) -> HalLink:
        """Build link to parent collection."""
        return self.build_link(collection_path, title="Collection")

    def build_action_link(
        self,
        path: str,
        method: str = "POST",
        title: Optional[str] = None
    ) -> HalLink:
        """Build a link that changes state."""
        return self.build_link(
            path,
            method=method,
            content_type="application/json",
            title=title
        )


class PaginationLinkBuilder:
    """Builder for pagination links in HAL collections."""

    def __init__(self, base_url: str):
        self.link_builder = HalLinkBuilder(base_url)

    def _page_link(self, base_path: str, params: Dict[str, Any], page: int, page_size: int, title: str) -> HalLink:
        query = urlencode({**params, 'page': page, 'page_size': page_size})
        return self.link_builder.build_link(f"{base_path}?{query}", title=title)

    def build_pagination_links(
        self,
        base_path: str,
        current_page: int,
        total_pages: int,
        page_size: int,
        query_params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, HalLink]:
        """Build pagination links for a collection."""
        params = query_params or {}
        links = {
            'self': self._page_link(base_path, params, current_page, page_size, "Current page")
        }

        if current_page > 1:
            links['first'] = self._page_link(base_path, params, 1, page_size, "First page")
            links['prev'] = self._page_link(base_path, params, current_page - 1, page_size, "Previous page")

        if current_page < total_pages:
            links['next'] = self._page_link(base_path, params, current_page + 1, page_size, "Next page")
            links['last'] = self._page_link(base_path, params, total_pages, page_size, "Last page")

        return links


def _dump_links(links: Dict[str, HalLink]) -> Dict[str, Dict[str, Any]]:
    return {rel: link.model_dump(exclude_none=True) for rel, link in links.items()}


class HalResponseBuilder:
    """HAL response builder for directory resources."""

    def __init__(self, base_url: str):
        self.link_builder = HalLinkBuilder(base_url)
        self.pagination_builder = PaginationLinkBuilder(base_url)

    def build_program_response(
        self,
        record: ProgramRecord,
        comments: Optional[List[CommentEntry]] = None
    ) -> Dict[str, Any]:
        """Program resource with links to its comments and edit action."""
        path = f"/api/programs/{record.id}"
        response = record.to_payload()

        links = {
            'self': self.link_builder.build_self_link(path),
            'comments': self.link_builder.build_link(f"{path}/comments", title="Team updates"),
            'post-comment': self.link_builder.build_action_link(f"{path}/comments", title="Post update"),
            'edit': self.link_builder.build_action_link(path, method="PUT", title="Edit program"),
            'collection': self.link_builder.build_collection_link("/api/programs")
        }

        if comments is not None:
            response['_embedded'] = {
                'comments': [comment.to_payload() for comment in comments]
            }
            response['commentCount'] = len(comments)

        response['_links'] = _dump_links(links)
        return response

    def build_program_collection_response(
        self,
        page: PageResult[ProgramRecord],
        query_params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Paged program listing with navigation links."""
        links = self.pagination_builder.build_pagination_links(
            "/api/programs",
            page.page,
            page.total_pages,
            page.page_size,
            query_params
        )

        return {
            'total': page.total,
            'page': page.page,
            'page_size': page.page_size,
            'total_pages': page.total_pages,
            'start_index': page.start_index,
            'end_index': page.end_index,
            '_links': _dump_links(links),
            '_embedded': {
                'programs': [self.build_program_response(record) for record in page.items]
            }
        }

    def build_list_response(
        self,
        items: List[Any],
        embedded_key: str,
        path: str,
        extra_links: Optional[Dict[str, HalLink]] = None
    ) -> Dict[str, Any]:
        """Unpaged collection of comments, activity entries or threads."""
        links = {'self': self.link_builder.build_self_link(path)}
        links.update(extra_links or {})

        return {
            'total': len(items),
            '_links': _dump_links(links),
            '_embedded': {
                embedded_key: [item.to_payload() for item in items]
            }
        }

    def build_error_response(
        self,
        error_type: str,
        title: str,
        status: int,
        detail: str,
        instance: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """Build RFC 7807 compliant error response with HAL links."""
        error_response = {
            'type': f"{PROBLEM_BASE}/{error_type}",
            'title': title,
            'status': status,
            'detail': detail,
            'instance': instance
        }

        if validation_errors:
            error_response['errors'] = validation_errors

        links = {
            'directory': self.link_builder.build_link("/api/programs", title="Program directory")
        }
        if error_type == "validation-error":
            links['schema'] = self.link_builder.build_link(
                "/openapi/openapi.json",
                title="API schema"
            )

        error_response['_links'] = _dump_links(links)
        return error_response


class HalFormatter:
    """High-level HAL formatter with convenience methods."""

    def __init__(self, base_url: str):
        self.builder = HalResponseBuilder(base_url)

    def format_program(self, record: ProgramRecord, comments: Optional[List[CommentEntry]] = None) -> Dict[str, Any]:
        return self.builder.build_program_response(record, comments)

    def format_program_page(self, page: PageResult[ProgramRecord], query_params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.builder.build_program_collection_response(page, query_params)

    def format_comments(self, record_id: str, comments: List[CommentEntry]) -> Dict[str, Any]:
        path = f"/api/programs/{record_id}/comments"
        return self.builder.build_list_response(
            comments,
            "comments",
            path,
            {'program': self.builder.link_builder.build_link(f"/api/programs/{record_id}", title="Program")}
        )

    def format_activity(self, entries: List[ActivityEntry]) -> Dict[str, Any]:
        return self.builder.build_list_response(entries, "activity", "/api/activity")

    def format_threads(self, threads: List[ThreadEntry]) -> Dict[str, Any]:
        return self.builder.build_list_response(
            threads,
            "threads",
            "/api/threads",
            {'post-thread': self.builder.link_builder.build_action_link("/api/threads", title="Start thread")}
        )

    def format_validation_error(self, detail: str, instance: str, errors: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        return self.builder.build_error_response("validation-error", "Validation Error", 422, detail, instance, errors)

    def format_not_found_error(self, detail: str, instance: str) -> Dict[str, Any]:
        return self.builder.build_error_response("resource-not-found", "Resource Not Found", 404, detail, instance)

    def format_server_error(self, detail: str, instance: str) -> Dict[str, Any]:
        return self.builder.build_error_response("internal-server-error", "Internal Server Error", 500, detail, instance)


def create_hal_formatter(base_url: str) -> HalFormatter:
    """Factory function to create HAL formatter."""
    return HalFormatter(base_url)
