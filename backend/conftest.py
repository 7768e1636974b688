"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating test users.
  - ``admin_user`` fixture: a verified administrator.
  - ``auth_header`` fixture for authenticated requests (JWT).
  - ``media_upload`` factory for in-memory audio/video/image files.
  - an autouse fixture pointing ``MEDIA_ROOT`` at a temporary directory.
"""

from __future__ import annotations

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def _media_root(settings, tmp_path):
    """Keep uploaded test media out of the project tree."""
    settings.MEDIA_ROOT = str(tmp_path / "media")


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Usage::

        def test_something(create_user):
            user = create_user(username="alice")
            # or with all fields:
            user = create_user(
                username="bob",
                password="Str0ng!Pass",
                email="bob@example.com",
                user_type="admin",
                is_verified=False,
            )
    """
    from accounts.models import User

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        user_type: str = "user",
        is_verified: bool = True,
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if username is None:
            username = f"testuser{_counter}"
        if email is None:
            email = f"{username}@test.local"

        return User.objects.create_user(
            email=email,
            password=password,
            username=username,
            user_type=user_type,
            is_verified=is_verified,
            is_active=is_active,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def admin_user(create_user):
    """A verified administrator account."""
    return create_user(username="barangay_admin", user_type="admin")


@pytest.fixture()
def auth_header(create_user):
    """
    Returns a helper function that creates a user and returns an
    ``Authorization`` header dict with a valid JWT access token.

    Usage::

        def test_protected(auth_header, api_client):
            header = auth_header(username="alice")
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
            resp = api_client.get("/user/profile")
            assert resp.status_code == 200

    Pass ``user=`` to get a header for an existing account.
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(*, user=None, **user_kwargs) -> dict[str, str]:
        if user is None:
            user = create_user(**user_kwargs)
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture()
def media_upload():
    """
    Factory for small in-memory uploads.

    ``media_upload("audio")`` → ``clip.mp3`` with ``audio/mpeg``;
    ``media_upload("video")`` → ``clip.mp4`` with ``video/mp4``;
    ``media_upload("image")`` → ``photo.png`` with ``image/png``.
    """
    kinds = {
        "audio": ("clip.mp3", "audio/mpeg"),
        "video": ("clip.mp4", "video/mp4"),
        "image": ("photo.png", "image/png"),
        "text": ("notes.txt", "text/plain"),
    }

    def _make(kind: str = "audio") -> SimpleUploadedFile:
        name, content_type = kinds[kind]
        return SimpleUploadedFile(name, b"\x00\x01fake-bytes", content_type=content_type)

    return _make
