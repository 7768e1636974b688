"""
Integration tests — registration and email verification.

Endpoints under test:
    POST /auth/register            (named URL: auth:register)
    GET  /auth/verify-email        (named URL: auth:verify-email)
    POST /auth/resend-verification (named URL: auth:resend-verification)

Uses django.test.TestCase + rest_framework.test.APIClient for real
HTTP-layer calls; outgoing mail lands in ``django.core.mail.outbox``.
"""

from __future__ import annotations

import re
import tempfile
from pathlib import Path
from unittest import mock

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import IntegrityError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.services import EmailVerificationService

User = get_user_model()


def _registration_payload(**overrides) -> dict:
    base = {
        "username": "juan",
        "email": "juan@example.com",
        "password": "secret123",
    }
    base.update(overrides)
    return base


def _token_from_mail(message) -> str:
    match = re.search(r"token=([^\s]+)", message.body)
    assert match, message.body
    return match.group(1)


class TestRegistration(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.register_url = reverse("auth:register")

    def test_register_returns_201_with_user_payload(self):
        response = self.client.post(self.register_url, _registration_payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, msg=response.data)
        self.assertEqual(
            response.data["message"],
            "Registration successful! Please check your email to verify.",
        )
        user_data = response.data["user"]
        self.assertEqual(user_data["email"], "juan@example.com")
        self.assertEqual(user_data["username"], "juan")
        self.assertEqual(user_data["userType"], "user")
        self.assertNotIn("password", user_data)

    def test_new_account_is_unverified_with_hashed_password(self):
        self.client.post(self.register_url, _registration_payload(), format="json")

        user = User.objects.get(email="juan@example.com")
        self.assertFalse(user.is_verified)
        self.assertNotEqual(user.password, "secret123")
        self.assertTrue(user.check_password("secret123"))

    def test_default_profile_photo_is_assigned(self):
        response = self.client.post(self.register_url, _registration_payload(), format="json")

        self.assertTrue(response.data["user"]["profilePhoto"].endswith("default_profile.png"))

    def test_profile_photo_upload_is_stored(self):
        photo = SimpleUploadedFile("me.png", b"\x89PNG fake", content_type="image/png")
        payload = _registration_payload(profilePhoto=photo)

        response = self.client.post(self.register_url, payload, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, msg=response.data)
        self.assertIn("user-profiles/", response.data["user"]["profilePhoto"])

    def test_non_image_profile_photo_is_rejected(self):
        upload = SimpleUploadedFile("me.txt", b"hello", content_type="text/plain")
        payload = _registration_payload(profilePhoto=upload)

        response = self.client.post(self.register_url, payload, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("profilePhoto", response.data)

    def test_duplicate_email_returns_409(self):
        self.client.post(self.register_url, _registration_payload(), format="json")

        response = self.client.post(
            self.register_url,
            _registration_payload(username="other", email="JUAN@example.com"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["detail"], "User already exists")
        self.assertEqual(User.objects.count(), 1)

    def test_conflicting_insert_removes_stored_photo(self):
        photo = SimpleUploadedFile("me.png", b"\x89PNG fake", content_type="image/png")
        payload = _registration_payload(profilePhoto=photo)

        with tempfile.TemporaryDirectory() as media_root, self.settings(MEDIA_ROOT=media_root):
            with mock.patch.object(
                User.objects, "create_user", side_effect=IntegrityError("duplicate key"),
            ):
                response = self.client.post(self.register_url, payload, format="multipart")

            self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
            self.assertEqual([p for p in Path(media_root).rglob("*") if p.is_file()], [])

    def test_short_password_is_rejected(self):
        response = self.client.post(
            self.register_url, _registration_payload(password="123"), format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", response.data)

    def test_self_registration_as_admin_is_forbidden(self):
        response = self.client.post(
            self.register_url, _registration_payload(userType="admin"), format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(User.objects.filter(email="juan@example.com").exists())

    def test_admin_can_register_another_admin(self):
        admin = User.objects.create_user(
            email="boss@example.com", password="secret123",
            user_type="admin", is_verified=True,
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(admin)}")

        response = self.client.post(
            self.register_url, _registration_payload(userType="admin"), format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, msg=response.data)
        self.assertEqual(response.data["user"]["userType"], "admin")

    def test_verification_email_is_sent(self):
        self.client.post(self.register_url, _registration_payload(), format="json")

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["juan@example.com"])
        self.assertEqual(mail.outbox[0].subject, "Verify Your Email")
        self.assertIn("/auth/verify-email?token=", mail.outbox[0].body)

    def test_mail_failure_does_not_fail_registration(self):
        with mock.patch(
            "accounts.services.send_mail",
            side_effect=ConnectionRefusedError("smtp down"),
        ):
            response = self.client.post(self.register_url, _registration_payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(User.objects.filter(email="juan@example.com").exists())


class TestEmailVerification(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.post(reverse("auth:register"), _registration_payload(), format="json")
        self.user = User.objects.get(email="juan@example.com")
        self.verify_url = reverse("auth:verify-email")

    def test_valid_token_verifies_account(self):
        token = _token_from_mail(mail.outbox[0])

        response = self.client.get(self.verify_url, {"token": token})

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Email Verified Successfully!")
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_verified)

    def test_second_redemption_reports_already_verified(self):
        token = EmailVerificationService.make_token(self.user)
        self.client.get(self.verify_url, {"token": token})

        response = self.client.get(self.verify_url, {"token": token})

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Your email is already verified")

    def test_tampered_token_is_rejected(self):
        token = EmailVerificationService.make_token(self.user) + "x"

        response = self.client.get(self.verify_url, {"token": token})

        self.assertEqual(response.status_code, 400)
        self.assertContains(response, "Invalid or expired link", status_code=400)
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_verified)

    def test_missing_token_is_rejected(self):
        response = self.client.get(self.verify_url)

        self.assertEqual(response.status_code, 400)

    def test_expired_token_is_rejected(self):
        token = EmailVerificationService.make_token(self.user)

        with self.settings(NOISEWATCH={**settings.NOISEWATCH, "EMAIL_VERIFICATION_MAX_AGE": -1}):
            response = self.client.get(self.verify_url, {"token": token})

        self.assertEqual(response.status_code, 400)
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_verified)

    def test_resend_sends_new_link_for_unverified_account(self):
        mail.outbox.clear()

        response = self.client.post(
            reverse("auth:resend-verification"), {"email": "juan@example.com"}, format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(mail.outbox), 1)

    def test_resend_is_silent_for_unknown_email(self):
        mail.outbox.clear()

        response = self.client.post(
            reverse("auth:resend-verification"), {"email": "nobody@example.com"}, format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(mail.outbox), 0)
