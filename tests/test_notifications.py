"""Tests for notification queueing and the delivery tasks."""

from types import SimpleNamespace

import pytest
from kombu.exceptions import OperationalError

from traveltrek.models import PlanType
from traveltrek.services.notifications import NotificationDispatcher
from traveltrek.services.notifications.email import EmailClient
from traveltrek.tasks import notifications as tasks


def member(**overrides):
    values = {
        "id": "user-1",
        "name": "Meera",
        "email": "meera@example.com",
        "phone": "9876501234",
        "fcm_token": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def queued(monkeypatch):
    """Replace `.delay` on every task with a recorder."""
    calls = []
    for name in (
        "send_activation_email",
        "send_activation_whatsapp",
        "send_push",
        "send_welcome_email",
        "send_otp_email",
        "send_rejection_email",
    ):
        task = getattr(tasks, name)
        monkeypatch.setattr(task, "delay", lambda _name=name, **kwargs: calls.append((_name, kwargs)))
    return calls


class TestDispatcher:
    def test_activation_fans_out_per_channel(self, queued):
        NotificationDispatcher().activation(
            member(fcm_token="device"), "2025000001", PlanType.THREE_YEAR
        )

        assert [name for name, _ in queued] == [
            "send_activation_email",
            "send_activation_whatsapp",
            "send_push",
        ]
        assert queued[0][1]["plan_type"] == "3Y"
        assert "3-Year" in queued[2][1]["body"]

    def test_optional_channels_need_contact_details(self, queued):
        NotificationDispatcher().activation(member(phone=""), "2025000001", "1Y")
        assert [name for name, _ in queued] == ["send_activation_email"]

    def test_otp_and_rejection(self, queued):
        dispatcher = NotificationDispatcher()
        dispatcher.otp(member(), "123456", "phone")
        dispatcher.rejection(member(), "Incomplete details")

        assert queued == [
            (
                "send_otp_email",
                {"email": "meera@example.com", "name": "Meera", "code": "123456", "purpose": "phone"},
            ),
            (
                "send_rejection_email",
                {"email": "meera@example.com", "name": "Meera", "reason": "Incomplete details"},
            ),
        ]

    def test_broker_outage_is_swallowed(self, monkeypatch):
        def unreachable(**kwargs):
            raise OperationalError("broker down")

        monkeypatch.setattr(tasks.send_welcome_email, "delay", unreachable)

        NotificationDispatcher().welcome(member())


class TestTasks:
    def test_activation_email_skips_without_provider(self):
        result = tasks.send_activation_email("meera@example.com", "Meera", "2025000001", "1Y")
        assert result == {"status": "skipped"}

    def test_push_without_token_is_skipped(self):
        assert tasks.send_push(None, "Title", "Body") == {"status": "skipped"}

    def test_otp_email_skips_without_provider(self):
        assert tasks.send_otp_email("meera@example.com", "Meera", "123456", "phone") == {
            "status": "skipped"
        }


class TestEmailBodies:
    @pytest.fixture
    def sent(self, monkeypatch):
        messages = []

        async def capture(self, to, subject, html):
            messages.append(html)
            return True

        monkeypatch.setattr(EmailClient, "send", capture)
        return messages

    async def test_names_are_escaped(self, sent):
        client = EmailClient(api_key="key")
        await client.send_welcome("x@example.com", "<script>alert(1)</script>")
        await client.send_membership_number("x@example.com", "Tom & <b>Jerry</b>", "2025000001", "1Y")

        assert "<script>" not in sent[0]
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in sent[0]
        assert "Tom &amp; &lt;b&gt;Jerry&lt;/b&gt;" in sent[1]
        assert "2025000001" in sent[1]

    async def test_rejection_reason_is_escaped(self, sent):
        client = EmailClient(api_key="key")
        await client.send_rejection("x@example.com", "Meera", '<img src=x onerror="steal()">')

        assert "<img" not in sent[0]
        assert "Reason: &lt;img src=x onerror=&quot;steal()&quot;&gt;" in sent[0]

    async def test_rejection_without_reason_has_no_reason_line(self, sent):
        await EmailClient(api_key="key").send_rejection("x@example.com", "Meera", None)
        assert "Reason:" not in sent[0]
