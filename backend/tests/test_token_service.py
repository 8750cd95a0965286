"""
Storefront Backend - Token Issuer Unit Tests
==============================================
"""

from datetime import timedelta

import pytest
from jose import jwt

from app.exceptions import AuthenticationError, StorefrontError
from app.services.token_service import TokenIssuer, parse_ttl


class TestParseTTL:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("24h", timedelta(hours=24)),
            ("30m", timedelta(minutes=30)),
            ("7d", timedelta(days=7)),
            ("90s", timedelta(seconds=90)),
            ("120", timedelta(seconds=120)),
            (60, timedelta(seconds=60)),
            (timedelta(minutes=5), timedelta(minutes=5)),
        ],
    )
    def test_accepted_formats(self, value, expected):
        assert parse_ttl(value) == expected

    def test_rejects_garbage(self):
        with pytest.raises(ValueError, match="Invalid token lifetime"):
            parse_ttl("soon")


class TestTokenIssuer:
    def setup_method(self):
        self.issuer = TokenIssuer("secret", default_ttl="1h")

    def test_issue_and_verify(self):
        token = self.issuer.issue({"userId": "abc"})
        claims = self.issuer.verify(token)
        assert claims["userId"] == "abc"
        assert claims["exp"] - claims["iat"] == 3600

    def test_custom_ttl(self):
        claims = self.issuer.verify(self.issuer.issue({"userId": "abc"}, ttl="5m"))
        assert claims["exp"] - claims["iat"] == 300

    def test_expired_token_rejected(self):
        token = self.issuer.issue({"userId": "abc"}, ttl=timedelta(seconds=-10))
        with pytest.raises(AuthenticationError):
            self.issuer.verify(token)

    def test_token_signed_with_other_secret_rejected(self):
        forged = jwt.encode({"userId": "abc"}, "other-secret", algorithm="HS256")
        with pytest.raises(AuthenticationError, match="Invalid or expired token"):
            self.issuer.verify(forged)

    def test_issue_without_secret_fails(self):
        with pytest.raises(StorefrontError, match="not configured"):
            TokenIssuer("").issue({"userId": "abc"})
