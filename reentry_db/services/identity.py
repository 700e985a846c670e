# SPDX-License-Identifier: Apache-2.0

"""
Identity lookup for attributing posts.

The directory never depends on sign-in: when no provider is configured,
no token is presented, or the provider fails, posts are attributed to
"Guest".
"""

import logging
from typing import Optional, Protocol

import jwt
from opentelemetry import trace

from ..models.entities import Identity
from .errors import AuthUnavailable

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

GUEST = "Guest"


class IdentityProvider(Protocol):
    """Opaque source of the signed-in user's display name."""

    def current_identity(self, token: Optional[str]) -> Optional[Identity]:
        """
        Resolve a bearer token to an identity.

        Returns None when no one is signed in; raises AuthUnavailable when
        the provider cannot answer.
        """
        ...


class TokenIdentityProvider:
    """
    Identity provider that reads display names from signed JWTs.

    The ``name`` claim is preferred, then ``preferred_username``, matching
    the account fields an OpenID Connect sign-in exposes.
    """

    def __init__(self, secret: str, algorithms: Optional[list] = None, audience: Optional[str] = None):
        self.secret = secret
        self.algorithms = algorithms or ["HS256"]
        self.audience = audience

    def current_identity(self, token: Optional[str]) -> Optional[Identity]:
        if not token:
            return None

        with tracer.start_as_current_span("identity.decode") as span:
            try:
                options = {} if self.audience else {"verify_aud": False}
                claims = jwt.decode(
                    token,
                    self.secret,
                    algorithms=self.algorithms,
                    audience=self.audience,
                    options=options
                )
            except jwt.PyJWTError as e:
                span.set_attribute("identity.result", "invalid")
                raise AuthUnavailable(f"Token could not be verified: {str(e)}") from e

            display_name = claims.get("name") or claims.get("preferred_username")
            span.set_attribute("identity.result", "resolved" if display_name else "anonymous")
            return Identity(display_name=display_name)


def bearer_token(authorization_header: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer ...`` header."""
    if not authorization_header:
        return None

    scheme, _, token = authorization_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_author(
    provider: Optional[IdentityProvider],
    token: Optional[str],
    requested: Optional[str] = None
) -> str:
    """
    Decide the name a post is attributed to.

    Args:
        provider: Identity provider, or None when sign-in is not configured
        token: Bearer token from the request, if any
        requested: Name typed by the poster; used when not blank

    Returns:
        Author display name, falling back to "Guest"
    """
    if requested and requested.strip():
        return requested.strip()

    if provider is None:
        return GUEST

    try:
        identity = provider.current_identity(token)
    except AuthUnavailable as e:
        logger.warning(f"Identity unavailable, posting as {GUEST}: {str(e)}", extra={"error_kind": e.kind})
        return GUEST

    if identity is None or not identity.display_name:
        return GUEST
    return identity.display_name
