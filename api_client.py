# api_client.py - authenticated JSON HTTP client wrapper around requests
import base64
import dataclasses
import json
from dataclasses import dataclass

import requests
from requests import Request

from utils.logger import get_logger

DEFAULT_CONNECT_TIMEOUT_MS = 10000
DEFAULT_READ_TIMEOUT_MS = 10000
BODY_PREVIEW_LIMIT = 200

JSON_CONTENT_TYPE = "application/json"

logger = get_logger("api-client")


@dataclass(frozen=True)
class BasicAuth:
    username: str
    password: str = dataclasses.field(repr=False)

    def value(self) -> str:
        credentials = f"{self.username}:{self.password}"
        return "Basic " + base64.b64encode(credentials.encode("utf-8")).decode("ascii")


@dataclass(frozen=True)
class BearerAuth:
    token: str = dataclasses.field(repr=False)

    def value(self) -> str:
        return "Bearer " + self.token


def _preview(value, limit=BODY_PREVIEW_LIMIT):
    if value is None:
        return ""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    text = str(value)
    if len(text) > limit:
        return text[:limit] + "...(truncated)"
    return text


def _redact(headers):
    safe_headers = dict(headers)
    if "Authorization" in safe_headers:
        safe_headers["Authorization"] = safe_headers["Authorization"].split(" ", 1)[0] + " [REDACTED]"
    return safe_headers


def _as_url(target):
    # urllib.parse.ParseResult / SplitResult
    if hasattr(target, "geturl"):
        return target.geturl()
    return str(target)


def _build_object(response_type, data):
    if dataclasses.is_dataclass(response_type) and isinstance(data, dict):
        return response_type(**data)
    return response_type(data)


class APIClient:
    """Blocking JSON client that signs every request with one auth strategy.

    Network failures never raise: they are logged and the call returns None.
    A requests.Session is not guaranteed thread-safe, so use one client per
    thread when issuing requests concurrently.
    """

    def __init__(self, auth, connect_timeout_ms=DEFAULT_CONNECT_TIMEOUT_MS,
                 read_timeout_ms=DEFAULT_READ_TIMEOUT_MS, session=None):
        self._auth = auth
        self._timeout = (connect_timeout_ms / 1000.0, read_timeout_ms / 1000.0)
        self.session = session or requests.Session()

    @classmethod
    def with_basic_auth(cls, username, password, connect_timeout_ms=DEFAULT_CONNECT_TIMEOUT_MS,
                        read_timeout_ms=DEFAULT_READ_TIMEOUT_MS, session=None):
        return cls(BasicAuth(username, password), connect_timeout_ms, read_timeout_ms, session)

    @classmethod
    def with_bearer_token(cls, token, connect_timeout_ms=DEFAULT_CONNECT_TIMEOUT_MS,
                          read_timeout_ms=DEFAULT_READ_TIMEOUT_MS, session=None):
        return cls(BearerAuth(token), connect_timeout_ms, read_timeout_ms, session)

    @property
    def auth(self):
        return self._auth

    @property
    def timeout(self):
        """(connect, read) timeout in seconds, as passed to requests."""
        return self._timeout

    def _send(self, req: Request, context):
        try:
            prepared = self.session.prepare_request(req)
            logger.debug("%s %s", prepared.method, prepared.url)
            logger.debug("REQ-HEADERS: %s", _redact(prepared.headers))
            if prepared.body:
                logger.debug("REQ-BODY: %s", _preview(prepared.body))
            resp = self.session.send(prepared, timeout=self._timeout)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s (%s)", req.method, req.url, e, context)
            return None
        logger.debug("%s %s -> status %s", prepared.method, prepared.url, resp.status_code)
        return resp

    def get(self, target, params=None):
        """GET ``target`` and return the body as UTF-8 text, or None on failure.

        ``params`` may be a mapping or a sequence of ``(key, value)`` pairs; the
        pairs form keeps repeated keys. Entries are appended to any query string
        already present in ``target``.
        """
        req = Request("GET", _as_url(target), headers={"Authorization": self._auth.value()}, params=params or {})
        resp = self._send(req, "params: " + _preview(params))
        if resp is None:
            return None
        return resp.content.decode("utf-8", errors="replace")

    def get_for_object(self, target, response_type):
        """GET ``target`` and build ``response_type`` from the JSON body.

        Dataclasses receive a JSON object as keyword arguments; any other
        callable (``dict``, ``list``, a parser function) receives the decoded
        value. Returns None when the request fails or the body cannot be decoded.
        """
        body = self.get(target)
        if body is None:
            return None
        try:
            return _build_object(response_type, json.loads(body))
        except (ValueError, TypeError) as e:
            logger.error("Could not decode response from %s into %s: %s (body: %s)",
                         _as_url(target), getattr(response_type, "__name__", response_type), e, _preview(body))
            return None

    def post(self, url, json_payload):
        resp = self._exchange("POST", url, json_payload)
        if resp is None:
            return None
        return resp.content.decode("utf-8", errors="replace")

    def post_response(self, url, json_payload):
        return self._exchange("POST", url, json_payload)

    def put(self, url, json_payload):
        return self._exchange("PUT", url, json_payload)

    def delete(self, url, json_payload=None):
        return self._exchange("DELETE", url, json_payload)

    def _exchange(self, method, url, json_payload):
        url = _as_url(url)
        headers = {
            "Authorization": self._auth.value(),
            "Accept": JSON_CONTENT_TYPE,
            "Content-type": JSON_CONTENT_TYPE,
        }
        data = None
        if json_payload is not None and json_payload.strip():
            data = json_payload.encode("utf-8")
        req = Request(method, url, headers=headers, data=data)
        return self._send(req, "body: " + _preview(json_payload))

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
