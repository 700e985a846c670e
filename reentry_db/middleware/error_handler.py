# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with structured HAL responses.
Provides centralized error handling and formatting for the directory API.
"""

from typing import Any, Dict, Tuple

from flask import Flask, request
from opentelemetry import trace
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException
import logging

from ..services.errors import DirectoryError, NotFound, StorageError, ValidationRejected
from ..services.hal import HalFormatter

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware:
    """Centralized error handling middleware with HAL response formatting."""
    
    def __init__(self, app: Flask, hal_formatter: HalFormatter):
        self.app = app
        self.hal_formatter = hal_formatter
        self.register_error_handlers()
    
    def register_error_handlers(self):
        """Register error handlers with Flask application."""
        
        @self.app.errorhandler(400)
        def handle_bad_request(error):
            return self.handle_client_error(error, "bad-request", "Bad Request")
        
        @self.app.errorhandler(404)
        def handle_not_found(error):
            return self.handle_client_error(error, "resource-not-found", "Resource Not Found")
        
        @self.app.errorhandler(405)
        def handle_method_not_allowed(error):
            return self.handle_client_error(error, "method-not-allowed", "Method Not Allowed")
        
        @self.app.errorhandler(500)
        def handle_internal_server_error(error):
            return self.handle_server_error(error)
        
        @self.app.errorhandler(DirectoryError)
        def handle_directory_error(error):
            return self.handle_directory_error(error)
        
        @self.app.errorhandler(ValidationError)
        def handle_model_validation_error(error):
            return self.handle_model_validation_error(error)
        
        # Handle generic exceptions
        @self.app.errorhandler(Exception)
        def handle_generic_exception(error):
            return self.handle_unexpected_error(error)
    
    def handle_client_error(
        self, 
        error: HTTPException, 
        error_type: str, 
        title: str
    ) -> Tuple[Dict[str, Any], int]:
        """
        Handle client errors (4xx status codes).
        
        Args:
            error: HTTP exception
            error_type: Error type identifier
            title: Error title
            
        Returns:
            Tuple of (error response dict, status code)
        """
        with tracer.start_as_current_span("error_handler.client_error") as span:
            span.set_attributes({
                "error.type": error_type,
                "error.status": error.code,
                "http.method": request.method,
                "http.path": request.path
            })
            
            detail = str(error.description) if error.description else title
            
            logger.warning(
                f"Client error: {title}",
                extra={
                    "error_type": error_type,
                    "status_code": error.code,
                    "detail": detail,
                    "path": request.path,
                    "method": request.method
                }
            )
            
            if error_type == "resource-not-found":
                error_response = self.hal_formatter.format_not_found_error(detail, request.path)
            else:
                error_response = self.hal_formatter.builder.build_error_response(
                    error_type,
                    title,
                    error.code,
                    detail,
                    request.path
                )
            
            return error_response, error.code
    
    def handle_directory_error(self, error: DirectoryError) -> Tuple[Dict[str, Any], int]:
        """Map engine error kinds to HTTP problems."""
        with tracer.start_as_current_span("error_handler.directory_error") as span:
            span.set_attribute("error.kind", error.kind.value)
            
            logger.info(
                f"Request rejected: {error.kind.value}",
                extra={"error_kind": error.kind, "detail": str(error), "path": request.path}
            )
            
            if isinstance(error, NotFound):
                return self.hal_formatter.format_not_found_error(str(error), request.path), 404
            if isinstance(error, ValidationRejected):
                return self.hal_formatter.format_validation_error(str(error), request.path), 422
            if isinstance(error, StorageError):
                return self.hal_formatter.builder.build_error_response(
                    "service-unavailable",
                    "Service Unavailable",
                    503,
                    str(error),
                    request.path
                ), 503
            
            return self.hal_formatter.format_server_error(str(error), request.path), 500
    
    def handle_model_validation_error(self, error: ValidationError) -> Tuple[Dict[str, Any], int]:
        """Pydantic errors raised while building entities from request data."""
        errors = [
            {"field": ".".join(str(part) for part in item["loc"]), "message": item["msg"]}
            for item in error.errors()
        ]
        logger.info("Entity validation failed", extra={"path": request.path, "errors": errors})
        return self.hal_formatter.format_validation_error(
            "Request data failed validation",
            request.path,
            errors
        ), 422
    
    def handle_server_error(self, error: HTTPException) -> Tuple[Dict[str, Any], int]:
        """Handle 500 responses raised explicitly."""
        logger.error(
            "Server error",
            extra={"path": request.path, "method": request.method},
            exc_info=True
        )
        return self.hal_formatter.format_server_error("An internal server error occurred", request.path), 500
    
    def handle_unexpected_error(self, error: Exception) -> Tuple[Dict[str, Any], int]:
        """
        Handle unexpected exceptions not caught by specific handlers.
        
        Args:
            error: Unexpected exception
            
        Returns:
            Tuple of (error response dict, status code)
        """
        if isinstance(error, HTTPException):
            return self.handle_client_error(error, "http-error", error.name)
        
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)
            
            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    "path": request.path,
                    "method": request.method
                },
                exc_info=True
            )
            
            # Don't expose internal error details in production
            detail = "An unexpected error occurred"
            if self.app.config.get('ENVIRONMENT') != 'production':
                detail = f"{error.__class__.__name__}: {str(error)}"
            
            return self.hal_formatter.format_server_error(detail, request.path), 500
