"""Tests for the chat concierge: fallback answers, streaming and history."""

import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import httpx
import pytest

from traveltrek.models import (
    ChatRole,
    Destination,
    DestinationStatus,
    Difficulty,
    MembershipStatus,
    PlanType,
    User,
)
from traveltrek.services.ai import ConciergeAI, build_user_context, fallback_reply
from traveltrek.services.chat import HISTORY_LIMIT, ChatService

NOW = datetime(2025, 10, 5, 10, 0, tzinfo=timezone.utc)


def member(**overrides):
    values = {
        "plan_type": PlanType.ONE_YEAR,
        "status": MembershipStatus.ACTIVE,
        "total_days": 6,
        "custom_days_added": 2,
        "used_days": 3,
        "entitled_days": 8,
        "start_date": NOW - timedelta(days=30),
        "end_date": datetime(2026, 9, 5, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def destination(name, months, status=DestinationStatus.AVAILABLE):
    return Destination(
        name=name,
        duration_days=5,
        best_months=months,
        difficulty=Difficulty.MODERATE,
        status=status,
    )


DESTINATIONS = [
    destination("Kedarkantha", ["December", "January"]),
    destination("Har Ki Dun", ["October", "November"]),
    destination("Roopkund", ["October"], status=DestinationStatus.COMING_SOON),
]


class TestFallbackReply:
    def test_days_left(self):
        reply = fallback_reply("How many days do I have left?", member(), [], NOW)
        assert "5 travel days remaining out of 8" in reply
        assert "1-Year" in reply

    def test_days_left_without_membership(self):
        reply = fallback_reply("days remaining?", None, [], NOW)
        assert "not yet activated" in reply

    def test_expiry(self):
        reply = fallback_reply("When does it expire?", member(), [], NOW)
        assert "05 September 2026" in reply

    def test_destinations_in_season(self):
        reply = fallback_reply("Which destination is available now?", None, DESTINATIONS, NOW)
        assert "October" in reply
        assert "Har Ki Dun" in reply
        assert "Kedarkantha" not in reply
        assert "Roopkund" not in reply

    def test_how_membership_works(self):
        reply = fallback_reply("How does membership work?", None, [], NOW)
        assert "How it works" in reply

    def test_unused_days(self):
        assert "do not carry over" in fallback_reply("What about unused days?", None, [], NOW)

    def test_default_lists_topics(self):
        reply = fallback_reply("hello", None, [], NOW)
        assert "support@traveltrek.com" in reply


def test_user_context_marks_good_months():
    user = SimpleNamespace(name="Asha")

    context = build_user_context(user, member(), DESTINATIONS[:2], NOW)

    assert "- Name: Asha" in context
    assert "- Remaining Days: 5" in context
    assert "CURRENT MONTH: October" in context
    assert "- Har Ki Dun: 5 days, moderate difficulty (GOOD TIME TO VISIT)" in context
    assert "- Kedarkantha: 5 days, moderate difficulty\n" in context


class TestConciergeStreaming:
    async def collect(self, ai, message="days left?"):
        return [chunk async for chunk in ai.stream_reply(message, None, member(), [])]

    @pytest.mark.parametrize("key", ["", "xxx-placeholder"])
    async def test_unconfigured_uses_fallback(self, key):
        ai = ConciergeAI(api_key=key, clock=lambda: NOW)
        assert not ai.configured

        chunks = await self.collect(ai)
        assert chunks == [fallback_reply("days left?", member(), [], NOW)]

    async def test_provider_failure_uses_fallback(self, monkeypatch):
        ai = ConciergeAI(api_key="real-key", clock=lambda: NOW)

        async def failing(prompt):
            raise httpx.ConnectError("unreachable")
            yield  # pragma: no cover

        monkeypatch.setattr(ai, "_stream", failing)
        chunks = await self.collect(ai)
        assert chunks == [fallback_reply("days left?", member(), [], NOW)]

    async def test_partial_reply_is_not_padded(self, monkeypatch):
        ai = ConciergeAI(api_key="real-key", clock=lambda: NOW)

        async def flaky(prompt):
            yield "You have "
            raise httpx.ReadTimeout("slow")

        monkeypatch.setattr(ai, "_stream", flaky)
        assert await self.collect(ai) == ["You have "]

    async def test_prompt_carries_user_context(self, monkeypatch):
        ai = ConciergeAI(api_key="real-key", clock=lambda: NOW)
        prompts = []

        async def echo(prompt):
            prompts.append(prompt)
            yield "ok"

        monkeypatch.setattr(ai, "_stream", echo)
        chunks = [c async for c in ai.stream_reply("hi", SimpleNamespace(name="Asha"), None, [])]

        assert chunks == ["ok"]
        assert "Membership: Not yet activated" in prompts[0]
        assert prompts[0].endswith("User message: hi")


def parse_events(events):
    return [json.loads(e[len("data: "):]) for e in events]


@pytest.fixture
async def user(db):
    user = User(name="Asha", email="asha@example.com", phone="9000000001", membership=None)
    db.add(user)
    await db.commit()
    return user


class TestChatService:
    async def test_converse_streams_and_saves_both_sides(self, db, user, concierge):
        chat = ChatService(db, concierge)

        events = parse_events([e async for e in chat.converse(user, "Where should I go?")])

        assert events[:2] == [{"chunk": "Hello "}, {"chunk": "traveller!"}]
        assert events[-1]["done"] is True

        history = await chat.history(user.id)
        assert [(m.role, m.content) for m in history] == [
            (ChatRole.USER, "Where should I go?"),
            (ChatRole.ASSISTANT, "Hello traveller!"),
        ]
        assert history[1].id == events[-1]["message_id"]

    async def test_history_keeps_the_latest_messages(self, db, user, concierge):
        chat = ChatService(db, concierge)
        for i in range(30):
            async for _ in chat.converse(user, f"question {i}"):
                pass

        history = await chat.history(user.id)
        assert len(history) == HISTORY_LIMIT
        assert history[-1].content == "Hello traveller!"
        assert history[-2].content == "question 29"

    async def test_clear(self, db, user, concierge):
        chat = ChatService(db, concierge)
        async for _ in chat.converse(user, "hi"):
            pass

        assert await chat.clear(user.id) == 2
        assert await chat.history(user.id) == []
