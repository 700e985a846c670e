# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for identity lookup and post attribution.
"""

from unittest.mock import MagicMock

import jwt
import pytest

from reentry_db.models.entities import Identity
from reentry_db.services.errors import AuthUnavailable
from reentry_db.services.identity import (
    GUEST,
    TokenIdentityProvider,
    bearer_token,
    resolve_author
)

SECRET = "directory-test-signing-secret-0123456789"


def _token(claims, secret=SECRET):
    return jwt.encode(claims, secret, algorithm="HS256")


class TestTokenIdentityProvider:

    def test_name_claim_preferred(self):
        provider = TokenIdentityProvider(SECRET)

        identity = provider.current_identity(_token({"name": "Sam Rivera", "preferred_username": "srivera"}))

        assert identity.display_name == "Sam Rivera"

    def test_falls_back_to_preferred_username(self):
        provider = TokenIdentityProvider(SECRET)

        assert provider.current_identity(_token({"preferred_username": "srivera"})).display_name == "srivera"

    def test_no_token_means_signed_out(self):
        assert TokenIdentityProvider(SECRET).current_identity(None) is None

    def test_bad_signature_raises_auth_unavailable(self):
        provider = TokenIdentityProvider(SECRET)

        with pytest.raises(AuthUnavailable):
            provider.current_identity(_token({"name": "Sam"}, secret="another-signing-secret-abcdefghijklmnop"))


class TestResolveAuthor:

    def test_without_provider_posts_as_guest(self):
        assert resolve_author(None, "anything") == GUEST

    def test_requested_name_wins(self):
        assert resolve_author(None, None, "  Lee ") == "Lee"

    def test_signed_in_user(self):
        provider = TokenIdentityProvider(SECRET)

        assert resolve_author(provider, _token({"name": "Sam"})) == "Sam"

    def test_provider_failure_falls_back_to_guest(self):
        provider = MagicMock()
        provider.current_identity.side_effect = AuthUnavailable("directory offline")

        assert resolve_author(provider, "token") == GUEST

    def test_identity_without_name_is_guest(self):
        provider = MagicMock()
        provider.current_identity.return_value = Identity(display_name=None)

        assert resolve_author(provider, "token") == GUEST


class TestBearerToken:

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc.def", "abc.def"),
        ("bearer   abc", "abc"),
        ("Basic abc", None),
        ("Bearer ", None),
        (None, None)
    ])
    def test_extracts_token(self, header, expected):
        assert bearer_token(header) == expected
