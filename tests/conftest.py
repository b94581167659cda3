"""
Shared fixtures for editor pipeline tests.

Provides a signed-in auth collaborator, an editor session, real PNG bytes
built with Pillow, and a fake backend that plays the storage and article
endpoints through ``httpx.MockTransport``.
"""

from __future__ import annotations

import io
import json
from typing import Callable, Dict, List, Optional, Set, Tuple

import httpx
import pytest
from PIL import Image

from quillpress.auth import StaticTokenAuth, User
from quillpress.config.loader import EditorConfig
from quillpress.editor.registry import PendingFile
from quillpress.editor.session import EditorSession

SIGN_URL = "https://storage.test/sign"
CREATE_URL = "https://articles.test/create"
UPDATE_URL = "https://articles.test/update"


def png_bytes(color: Tuple[int, int, int] = (255, 0, 0), size: Tuple[int, int] = (2, 2)) -> bytes:
    """A real, tiny PNG image."""
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


class FakeBackend:
    """
    Storage and article endpoints in one MockTransport handler.

    - POST storage.test/sign  → signedUrl on bucket.test, publicUrl on cdn.test
    - PUT  bucket.test/upload/<filename>
    - POST articles.test/create, PUT articles.test/update?id=...
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.fail_sign: Set[str] = set()
        self.fail_put: Set[str] = set()
        self.malformed_sign: Set[str] = set()
        self.article_status = 201
        self.article_body: Dict = {"success": True, "articleId": "art_001"}
        self.on_request: Optional[Callable[[httpx.Request], None]] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request:
            self.on_request(request)

        host = request.url.host
        if host == "storage.test":
            name = json.loads(request.content)["filename"]
            if name in self.fail_sign:
                return httpx.Response(500, json={"error": "storage unavailable"})
            if name in self.malformed_sign:
                return httpx.Response(200, content=b"not json")
            return httpx.Response(200, json={
                "signedUrl": f"https://bucket.test/upload/{name}?sig=abc",
                "publicUrl": f"https://cdn.test/{name}",
            })
        if host == "bucket.test":
            name = request.url.path.rsplit("/", 1)[-1]
            if name in self.fail_put:
                return httpx.Response(403)
            return httpx.Response(200)
        if host == "articles.test":
            return httpx.Response(self.article_status, json=self.article_body)
        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def _to(self, host: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    @property
    def sign_requests(self) -> List[httpx.Request]:
        return self._to("storage.test")

    @property
    def put_requests(self) -> List[httpx.Request]:
        return self._to("bucket.test")

    @property
    def article_requests(self) -> List[httpx.Request]:
        return self._to("articles.test")


@pytest.fixture
def user():
    return User(uid="u_123", display_name="Ada Writer")


@pytest.fixture
def auth(user):
    """Signed-in auth collaborator."""
    return StaticTokenAuth("token-abc", user)


@pytest.fixture
def config():
    return EditorConfig(
        signed_upload_url=SIGN_URL,
        create_article_url=CREATE_URL,
        update_article_url=UPDATE_URL,
    )


@pytest.fixture
def errors():
    """Collects errors the session reports to the UI."""
    return []


@pytest.fixture
def session(auth, config, errors):
    return EditorSession(auth, config=config, on_error=errors.append)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def png():
    """Builder for real PNG bytes: ``png(color=(r, g, b))``."""
    return png_bytes


@pytest.fixture
def make_file():
    """Factory for staged PNG files with distinct contents."""
    counter = {"n": 0}

    def factory(name: Optional[str] = None) -> PendingFile:
        counter["n"] += 1
        n = counter["n"]
        return PendingFile(
            data=png_bytes((n * 40 % 256, 0, 0)),
            mime_type="image/png",
            filename=name or f"image_{n}.png",
        )

    return factory
