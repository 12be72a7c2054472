"""
Unit tests for the Authorization header strategies.
"""

import base64
import dataclasses

import pytest

from api_client import BasicAuth, BearerAuth


class TestBasicAuth:

    def test_value_encodes_username_and_password(self):
        assert BasicAuth("alice", "secret").value() == "Basic YWxpY2U6c2VjcmV0"

    @pytest.mark.parametrize("username,password", [
        ("alice", "secret"),
        ("user@example.com", "p:ss:word"),
        ("jürgen", "pässwörd"),
    ])
    def test_payload_decodes_back_to_credentials(self, username, password):
        header = BasicAuth(username, password).value()

        scheme, payload = header.split(" ", 1)
        assert scheme == "Basic"
        assert base64.b64decode(payload).decode("utf-8") == f"{username}:{password}"

    def test_empty_credentials_are_not_validated(self):
        assert BasicAuth("", "").value() == "Basic Og=="

    def test_repr_hides_password(self):
        assert "secret" not in repr(BasicAuth("alice", "secret"))

    def test_is_immutable(self):
        auth = BasicAuth("alice", "secret")
        with pytest.raises(dataclasses.FrozenInstanceError):
            auth.password = "other"


class TestBearerAuth:

    def test_value_prefixes_token(self):
        assert BearerAuth("abc.def.ghi").value() == "Bearer abc.def.ghi"

    def test_empty_token_is_not_validated(self):
        assert BearerAuth("").value() == "Bearer "

    def test_repr_hides_token(self):
        assert "abc.def.ghi" not in repr(BearerAuth("abc.def.ghi"))
