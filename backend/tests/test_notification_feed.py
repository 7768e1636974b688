"""
Tests for the derived admin notification feed.

The feed is a projection of recent registrations and reports; nothing
is stored, and the ``read`` flag comes from the caller's ``since``.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from accounts.models import User
from core.services import NotificationFeedService
from reports.models import NoiseReport

pytestmark = pytest.mark.django_db


@pytest.fixture()
def now():
    return timezone.now().replace(microsecond=0)


@pytest.fixture()
def make_report():
    def _make(created_at, *, level="red", reason="Karaoke", user=None):
        report = NoiseReport.objects.create(
            media_url="/media/noise_reports/clip.mp3",
            media_type="audio",
            reason=reason,
            noise_level=level,
            user=user,
            location={"latitude": 14.6, "longitude": 121.0, "address": "Tondo"},
            geo_latitude=14.6,
            geo_longitude=121.0,
        )
        NoiseReport.objects.filter(pk=report.pk).update(created_at=created_at)
        report.refresh_from_db()
        return report

    return _make


@pytest.fixture()
def feed_data(now, make_report, create_user):
    newcomer = create_user(username="newcomer")
    veteran = create_user(username="veteran")
    User.objects.filter(pk=newcomer.pk).update(created_at=now - timedelta(hours=2))
    User.objects.filter(pk=veteran.pk).update(created_at=now - timedelta(days=30))

    red = make_report(now - timedelta(minutes=10), level="red", user=veteran)
    yellow = make_report(now - timedelta(hours=5), level="yellow", reason="Party")
    green = make_report(now - timedelta(hours=20), level="green", reason="Dog")
    make_report(now - timedelta(days=3), level="red", reason="Old")
    return {"newcomer": newcomer, "veteran": veteran, "red": red, "yellow": yellow, "green": green}


class TestFeed:

    def test_items_from_window_newest_first(self, now, feed_data):
        feed = NotificationFeedService(now=now).get_feed()

        assert feed["success"] is True
        assert feed["hours"] == 24
        assert feed["count"] == feed["total"] == 4
        kinds = [item["type"] for item in feed["notifications"]]
        assert kinds == ["report", "registration", "report", "report"]

    def test_report_item_shape(self, now, feed_data):
        red = feed_data["red"]
        item = NotificationFeedService(now=now).get_feed()["notifications"][0]

        assert item["id"] == f"report-{red.pk}-{int(red.created_at.timestamp() * 1000)}"
        assert item["title"] == "🚨 CRITICAL: High Noise Report"
        assert item["message"] == "veteran reported Karaoke (red level)"
        assert item["priority"] == "emergency"
        assert item["location"] == "Tondo"
        assert item["time"] == "10 min ago"
        assert item["read"] is False
        assert item["data"] == {
            "reportId": red.pk,
            "mediaUrl": red.media_url,
            "coordinates": [121.0, 14.6],
        }

    def test_priorities_follow_noise_level(self, now, feed_data):
        items = NotificationFeedService(now=now).get_feed()["notifications"]

        reports = {item["noiseLevel"]: item for item in items if item["type"] == "report"}
        assert reports["yellow"]["priority"] == "high"
        assert reports["yellow"]["message"] == "Anonymous reported Party (yellow level)"
        assert reports["yellow"]["user"] is None
        assert reports["green"]["priority"] == "medium"
        assert reports["green"]["title"] == "New Noise Report"

    def test_registration_item(self, now, feed_data):
        newcomer = feed_data["newcomer"]
        items = NotificationFeedService(now=now).get_feed()["notifications"]

        item = next(i for i in items if i["type"] == "registration")
        assert item["title"] == "New User Registration"
        assert item["message"] == "newcomer joined the platform"
        assert item["user"]["id"] == newcomer.pk
        assert item["data"] == {"userId": newcomer.pk, "userType": "user"}

    def test_hours_widen_the_window(self, now, feed_data):
        feed = NotificationFeedService(hours=24 * 7, now=now).get_feed()

        assert feed["total"] == 5

    def test_limit_caps_items(self, now, feed_data):
        feed = NotificationFeedService(limit=2, now=now).get_feed()

        assert feed["count"] == 2
        assert len(feed["notifications"]) == 2

    def test_since_marks_older_items_read(self, now, feed_data):
        since = now - timedelta(hours=3)
        items = NotificationFeedService(since=since, now=now).get_feed()["notifications"]

        read = [(item["type"], item["read"]) for item in items]
        assert read == [
            ("report", False),
            ("registration", False),
            ("report", True),
            ("report", True),
        ]


class TestUnreadCount:

    def test_counts_window_without_since(self, now, feed_data):
        result = NotificationFeedService(now=now).get_unread_count()

        assert result == {"success": True, "count": 4, "details": {"users": 1, "reports": 3}}

    def test_since_narrows_count(self, now, feed_data):
        result = NotificationFeedService(since=now - timedelta(hours=3), now=now).get_unread_count()

        assert result["details"] == {"users": 1, "reports": 1}
        assert result["count"] == 2


class TestRecentActivity:

    def test_latest_registrations_and_reports(self, now, feed_data):
        activity = NotificationFeedService(now=now).get_recent_activity()

        assert len(activity) == 6
        assert activity[0]["icon"] == "warning"
        assert activity[0]["user"] == "veteran"
        registrations = [a for a in activity if a["type"] == "registration"]
        assert {a["user"] for a in registrations} == {"newcomer", "veteran"}
        assert all(a["icon"] == "person_add" for a in registrations)

    def test_limit(self, now, feed_data):
        assert len(NotificationFeedService(now=now).get_recent_activity(limit=3)) == 3


class TestNotificationEndpoints:

    @pytest.fixture()
    def admin_client(self, api_client, admin_user, auth_header):
        api_client.credentials(HTTP_AUTHORIZATION=auth_header(user=admin_user)["Authorization"])
        return api_client

    def test_feed_endpoint(self, admin_client, make_report):
        make_report(timezone.now() - timedelta(minutes=1))

        resp = admin_client.get(reverse("notification:all"), {"hours": 1})

        assert resp.status_code == 200
        types = [item["type"] for item in resp.data["notifications"]]
        assert "report" in types

    def test_since_query_parameter(self, admin_client, make_report):
        make_report(timezone.now() - timedelta(minutes=30))
        since = (timezone.now() - timedelta(minutes=5)).isoformat()

        resp = admin_client.get(reverse("notification:all"), {"since": since})

        reports = [item for item in resp.data["notifications"] if item["type"] == "report"]
        assert reports and all(item["read"] for item in reports)

    def test_invalid_hours(self, admin_client):
        resp = admin_client.get(reverse("notification:all"), {"hours": 0})

        assert resp.status_code == 400

    def test_unread_count_endpoint(self, admin_client, make_report):
        make_report(timezone.now() - timedelta(minutes=1))

        resp = admin_client.get(reverse("notification:unread-count"))

        assert resp.status_code == 200
        assert resp.data["details"]["reports"] == 1

    def test_recent_activity_endpoint(self, admin_client):
        resp = admin_client.get(reverse("notification:recent-activity"), {"limit": 5})

        assert resp.status_code == 200
        assert resp.data[0]["type"] == "registration"

    def test_citizen_is_forbidden(self, api_client, auth_header):
        api_client.credentials(HTTP_AUTHORIZATION=auth_header()["Authorization"])

        resp = api_client.get(reverse("notification:all"))

        assert resp.status_code == 403
