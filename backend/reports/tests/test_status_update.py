"""
Integration tests — administrator responses to a report.

Endpoints under test:
    GET /reports/response-options/<id>  (named URL: reports:response-options)
    PUT /reports/update-status/<id>     (named URL: reports:update-status)

Covers the escalation rules end to end: options offered for the
report's level and day count, rejection of anything else, and the
append-only audit log.
"""

from __future__ import annotations

from unittest import mock

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from reports.models import NoiseReport, ReportAdminAction

User = get_user_model()


def _make_report(**overrides) -> NoiseReport:
    fields = {
        "media_url": "/media/noise_reports/clip.mp3",
        "media_type": "audio",
        "reason": "Construction",
        "noise_level": "red",
    }
    fields.update(overrides)
    return NoiseReport.objects.create(**fields)


class TestUpdateStatus(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(
            email="admin@example.com", password="secret123",
            user_type="admin", is_verified=True,
        )
        cls.citizen = User.objects.create_user(
            email="citizen@example.com", password="secret123", is_verified=True,
        )

    def setUp(self):
        self.client = APIClient()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(self.admin)}")

    def _put(self, report_id, body):
        return self.client.put(
            reverse("reports:update-status", args=[report_id]), body, format="json",
        )

    def test_monitoring_is_accepted_and_logged(self):
        report = _make_report()

        response = self._put(report.pk, {"status": "monitoring", "note": "Visited site"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, msg=response.data)
        self.assertEqual(response.data["message"], "Status updated successfully")
        data = response.data["report"]
        self.assertEqual(data["status"], "monitoring")
        self.assertIn("Progress: Day 1 of 3", data["adminResponse"])
        self.assertEqual(len(data["adminActions"]), 1)
        action = data["adminActions"][0]
        self.assertEqual(action["action"], "Monitoring")
        self.assertEqual(action["note"], "Visited site")
        self.assertEqual(action["fromStatus"], "pending")
        self.assertEqual(action["toStatus"], "monitoring")
        self.assertEqual(action["performedBy"], self.admin.pk)

    def test_action_required_below_threshold_is_rejected(self):
        report = _make_report(consecutive_days=1)

        response = self._put(report.pk, {"status": "action_required"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Invalid status transition", response.data["detail"])
        report.refresh_from_db()
        self.assertEqual(report.status, "pending")
        self.assertFalse(ReportAdminAction.objects.filter(report=report).exists())

    def test_green_report_never_accepts_action_required(self):
        report = _make_report(noise_level="green", consecutive_days=9)

        response = self._put(report.pk, {"status": "action_required"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_status_value_is_rejected(self):
        report = _make_report()

        response = self._put(report.pk, {"status": "closed"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(str(response.data["status"][0]), "Invalid status value.")

    def test_reset_to_pending_restores_placeholder(self):
        report = _make_report()
        self._put(report.pk, {"status": "resolved"})

        response = self._put(report.pk, {"status": "pending"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["report"]["adminResponse"], "No response sent yet.")
        self.assertEqual(response.data["report"]["adminActions"][-1]["action"], "Reset to Pending")

    def test_reapplying_current_status_appends(self):
        report = _make_report()

        self._put(report.pk, {"status": "monitoring", "note": "first"})
        self._put(report.pk, {"status": "monitoring", "note": "second"})
        response = self._put(report.pk, {"status": "monitoring", "note": "third"})

        notes = [a["note"] for a in response.data["report"]["adminActions"]]
        self.assertEqual(notes, ["first", "second", "third"])
        self.assertEqual(ReportAdminAction.objects.filter(report=report).count(), 3)

    def test_patch_is_accepted(self):
        report = _make_report()

        response = self.client.patch(
            reverse("reports:update-status", args=[report.pk]),
            {"status": "resolved"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["report"]["status"], "resolved")

    def test_unknown_report_returns_404(self):
        response = self._put(999999, {"status": "monitoring"})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["detail"], "Report not found.")

    def test_citizen_is_forbidden(self):
        report = _make_report()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(self.citizen)}")

        response = self._put(report.pk, {"status": "monitoring"})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        report.refresh_from_db()
        self.assertEqual(report.status, "pending")

    def test_anonymous_is_unauthorized(self):
        report = _make_report()
        self.client.credentials()

        response = self._put(report.pk, {"status": "monitoring"})

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_storage_failure_leaves_report_untouched(self):
        report = _make_report()

        with mock.patch.object(
            ReportAdminAction.objects, "create", side_effect=DatabaseError("disk full"),
        ):
            response = self._put(report.pk, {"status": "monitoring"})

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        report.refresh_from_db()
        self.assertEqual(report.status, "pending")
        self.assertEqual(report.admin_response, "No response sent yet.")


class TestResponseOptions(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(
            email="admin@example.com", password="secret123",
            user_type="admin", is_verified=True,
        )

    def setUp(self):
        self.client = APIClient()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(self.admin)}")

    def test_options_for_red_day_three(self):
        report = _make_report(consecutive_days=3)

        response = self.client.get(reverse("reports:response-options", args=[report.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["reportId"], report.pk)
        self.assertEqual(response.data["currentStatus"], "pending")
        self.assertEqual(
            [o["status"] for o in response.data["options"]],
            ["monitoring", "action_required", "resolved"],
        )
        self.assertEqual(
            response.data["allowedStatuses"],
            ["monitoring", "action_required", "resolved", "pending"],
        )

    def test_unknown_report_returns_404(self):
        response = self.client.get(reverse("reports:response-options", args=[424242]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class TestEscalationScenario(TestCase):
    """
    Submit a red report, monitor it, let the day count reach 3, then
    escalate it, while a fresh day-1 report still refuses escalation.
    """

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(
            email="admin@example.com", password="secret123",
            user_type="admin", is_verified=True,
        )

    def test_full_escalation(self):
        client = APIClient()
        upload = SimpleUploadedFile("noise.mp3", b"\x00\x01", content_type="audio/mpeg")

        created = client.post(
            reverse("reports:new-report"),
            {"media": upload, "reason": "Construction", "noiseLevel": "red"},
            format="multipart",
        )
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, msg=created.data)
        report_id = created.data["report"]["id"]
        self.assertEqual(created.data["report"]["status"], "pending")
        self.assertEqual(created.data["report"]["consecutiveDays"], 1)

        client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(self.admin)}")
        url = reverse("reports:update-status", args=[report_id])

        rejected = client.put(url, {"status": "action_required"}, format="json")
        self.assertEqual(rejected.status_code, status.HTTP_400_BAD_REQUEST)

        monitored = client.put(url, {"status": "monitoring"}, format="json")
        self.assertEqual(monitored.data["report"]["status"], "monitoring")
        self.assertEqual(len(monitored.data["report"]["adminActions"]), 1)

        NoiseReport.objects.filter(pk=report_id).update(consecutive_days=3)

        escalated = client.put(url, {"status": "action_required"}, format="json")
        self.assertEqual(escalated.status_code, status.HTTP_200_OK, msg=escalated.data)
        report = escalated.data["report"]
        self.assertEqual(report["status"], "action_required")
        self.assertEqual(
            report["adminResponse"],
            "The noise has been reported for 3 consecutive days. "
            "A barangay officer has been assigned to take action.",
        )
        self.assertEqual(
            [a["toStatus"] for a in report["adminActions"]],
            ["monitoring", "action_required"],
        )
