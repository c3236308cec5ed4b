"""Tests for the Secret Manager client."""

from __future__ import annotations

import base64
from unittest.mock import MagicMock, patch

import httpx
import pytest

from gsauth.auth.base import TokenSource
from gsauth.backends.secret_manager import SecretManagerClient
from gsauth.exceptions import SecretAccessError
from gsauth.models import BackendKind, Token

VERSION = "projects/p/secrets/git-token/versions/latest"


class StaticSource(TokenSource):
    @property
    def kind(self) -> BackendKind:
        return BackendKind.APPLICATION_DEFAULT

    def fetch(self) -> Token:
        return Token(access_token="ambient-token")


def _mock_response(payload: object, status_code: int = 200) -> MagicMock:
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.json.return_value = payload
    response.text = str(payload)
    if status_code >= 400:
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            message=f"HTTP {status_code}",
            request=MagicMock(),
            response=response,
        )
    else:
        response.raise_for_status.return_value = None
    return response


def _payload(secret: bytes) -> dict[str, object]:
    return {"name": VERSION, "payload": {"data": base64.b64encode(secret).decode()}}


class TestSecretManagerClient:
    def test_access_secret_version(self) -> None:
        with patch(
            "gsauth.backends.secret_manager.client.httpx.get",
            return_value=_mock_response(_payload(b"s3cret")),
        ) as get:
            value = SecretManagerClient(StaticSource()).access_secret_version(VERSION)

        assert value == "s3cret"
        args, kwargs = get.call_args
        assert args[0] == f"https://secretmanager.googleapis.com/v1/{VERSION}:access"
        assert kwargs["headers"]["Authorization"] == "Bearer ambient-token"

    def test_custom_endpoint(self) -> None:
        with patch(
            "gsauth.backends.secret_manager.client.httpx.get",
            return_value=_mock_response(_payload(b"x")),
        ) as get:
            SecretManagerClient(StaticSource(), endpoint="http://localhost:9000/v1/").access_secret_version(
                VERSION
            )
        assert get.call_args[0][0] == f"http://localhost:9000/v1/{VERSION}:access"

    def test_http_error(self) -> None:
        with patch(
            "gsauth.backends.secret_manager.client.httpx.get",
            return_value=_mock_response({"error": "NOT_FOUND"}, status_code=404),
        ):
            with pytest.raises(SecretAccessError, match="404"):
                SecretManagerClient(StaticSource()).access_secret_version(VERSION)

    def test_transport_error(self) -> None:
        with patch(
            "gsauth.backends.secret_manager.client.httpx.get",
            side_effect=httpx.ConnectTimeout("timed out"),
        ):
            with pytest.raises(SecretAccessError, match="timed out"):
                SecretManagerClient(StaticSource()).access_secret_version(VERSION)

    @pytest.mark.parametrize(
        "payload",
        [{"name": VERSION}, {"payload": {}}, {"payload": {"data": "%%%"}}],
    )
    def test_bad_payload(self, payload: dict[str, object]) -> None:
        with patch(
            "gsauth.backends.secret_manager.client.httpx.get",
            return_value=_mock_response(payload),
        ):
            with pytest.raises(SecretAccessError):
                SecretManagerClient(StaticSource()).access_secret_version(VERSION)
