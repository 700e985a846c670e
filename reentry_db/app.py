# SPDX-License-Identifier: Apache-2.0

"""
Reentry Housing Directory API - Flask Application Entry Point

This module builds the Flask application with OpenAPI 3.0 support,
configures observability and error handling, and wires the directory
stores to the configured key-value backend.
"""

import os
import logging
from typing import Any, Dict, Iterable, Optional

from flask import jsonify
from flask_openapi3 import OpenAPI, Info

from .middleware.error_handler import ErrorHandlerMiddleware
from .models.entities import ProgramRecord, utc_now
from .observability.config import setup_observability
from .observability.middleware import add_observability_middleware
from .services.directory import DirectoryService
from .services.errors import StorageError
from .services.hal import create_hal_formatter
from .services.identity import IdentityProvider, TokenIdentityProvider
from .services.records import load_records_json
from .services.redis_store import RedisKeyValueStore
from .services.storage import InMemoryKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)

info = Info(
    title="Reentry Housing Directory API",
    version="1.0.0",
    description="Searchable directory of reentry housing programs with team updates and activity feed"
)


def _optional_int(value: Optional[str]) -> Optional[int]:
    return int(value) if value else None


def load_config() -> Dict[str, Any]:
    """Read application settings from the environment."""
    environment = os.getenv('ENVIRONMENT', 'development')
    return {
        'ENVIRONMENT': environment,
        'DEBUG': environment == 'development',
        'STORAGE_BACKEND': os.getenv('STORAGE_BACKEND', 'memory').lower(),
        'REDIS_URL': os.getenv('REDIS_URL', 'redis://localhost:6379'),
        'STORAGE_NAMESPACE': os.getenv('STORAGE_NAMESPACE', ''),
        'RECORDS_PATH': os.getenv('RECORDS_PATH', ''),
        'PAGE_SIZE': int(os.getenv('PAGE_SIZE', '10')),
        'FEED_LIMIT': int(os.getenv('FEED_LIMIT', '25')),
        'FEED_MAX_PERSISTED': _optional_int(os.getenv('FEED_MAX_PERSISTED')),
        'JWT_SECRET': os.getenv('JWT_SECRET', ''),
        'BASE_URL': os.getenv('BASE_URL', 'http://localhost:5000'),
        'OTEL_ENABLED': os.getenv('OTEL_ENABLED', 'true').lower() == 'true'
    }


def build_storage(config: Dict[str, Any]) -> KeyValueStore:
    """Key-value backend named by ``STORAGE_BACKEND``."""
    backend = config['STORAGE_BACKEND']
    if backend == 'redis':
        logger.info("Using Redis storage backend")
        return RedisKeyValueStore(config['REDIS_URL'])
    if backend != 'memory':
        raise ValueError(f"Unknown storage backend: {backend}")

    logger.info("Using in-memory storage backend")
    return InMemoryKeyValueStore()


def build_identity_provider(config: Dict[str, Any]) -> Optional[IdentityProvider]:
    """Token provider when a signing secret is configured; otherwise everyone posts as Guest."""
    if not config['JWT_SECRET']:
        return None
    return TokenIdentityProvider(config['JWT_SECRET'])


def create_app(
    config: Optional[Dict[str, Any]] = None,
    storage: Optional[KeyValueStore] = None,
    records: Optional[Iterable[ProgramRecord]] = None,
    identity_provider: Optional[IdentityProvider] = None
) -> OpenAPI:
    """
    Build the directory application.

    Args:
        config: Overrides applied on top of the environment settings
        storage: Key-value backend; built from config when omitted
        records: Program records; loaded from ``RECORDS_PATH`` when omitted
        identity_provider: Identity source; built from ``JWT_SECRET`` when omitted

    Returns:
        Configured Flask application
    """
    settings = load_config()
    settings.update(config or {})

    setup_observability(settings['ENVIRONMENT'], settings['OTEL_ENABLED'])

    app = OpenAPI(__name__, info=info)
    app.config.update(settings)

    add_observability_middleware(app)

    if storage is None:
        storage = build_storage(app.config)
    if records is None:
        records = load_records_json(app.config['RECORDS_PATH']) if app.config['RECORDS_PATH'] else []
    if identity_provider is None:
        identity_provider = build_identity_provider(app.config)

    directory_service = DirectoryService(
        storage,
        records=records,
        namespace=app.config['STORAGE_NAMESPACE'],
        identity_provider=identity_provider,
        page_size=app.config['PAGE_SIZE'],
        feed_limit=app.config['FEED_LIMIT'],
        feed_max_persisted=app.config['FEED_MAX_PERSISTED']
    )
    hal_formatter = create_hal_formatter(app.config['BASE_URL'])
    ErrorHandlerMiddleware(app, hal_formatter)

    # Make services available to routes
    app.directory_service = directory_service
    app.hal_formatter = hal_formatter

    from .routes import activity_bp, programs_bp, threads_bp

    app.register_api(programs_bp)
    app.register_api(activity_bp)
    app.register_api(threads_bp)

    @app.route('/api/healthz')
    def health_check():
        """Liveness plus a storage check; Redis backends are pinged first."""
        storage = directory_service.storage
        checks = {'records': {'status': 'healthy', 'count': len(directory_service.records)}}
        status = 'healthy'

        try:
            if isinstance(storage, RedisKeyValueStore):
                storage.ping()
            storage.get(directory_service.activity.key)
            checks['storage'] = {'status': 'healthy', 'backend': app.config['STORAGE_BACKEND']}
        except StorageError as e:
            logger.warning(f"Storage health check failed: {str(e)}")
            checks['storage'] = {'status': 'unhealthy', 'error': str(e)}
            status = 'unhealthy'

        return jsonify({
            'status': status,
            'timestamp': utc_now().isoformat(),
            'version': info.version,
            'environment': app.config['ENVIRONMENT'],
            'checks': checks
        }), 200 if status == 'healthy' else 503

    return app


if __name__ == '__main__':
    application = create_app()
    application.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', '5000')),
        debug=application.config['DEBUG']
    )
