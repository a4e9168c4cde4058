"""Travel concierge replies from Gemini, with a keyword fallback."""

import json
from collections.abc import AsyncIterator, Callable
from datetime import datetime

import httpx
import structlog

from traveltrek.clock import utcnow
from traveltrek.config import settings
from traveltrek.models import Destination, DestinationStatus, Membership, User
from traveltrek.schemas.destination import MONTH_NAMES
from traveltrek.services.membership.status import plan_label, remaining_days

logger = structlog.get_logger()

SYSTEM_PROMPT = f"""You are a polite, honest travel assistant for {settings.company_name}, a membership-based travel company.

IMPORTANT RULES:
1. You must respond ONLY using company policies and user data provided to you.
2. Never promise guaranteed bookings or peak season availability.
3. If unsure about anything, say that the support team will assist further.
4. Be friendly, transparent, and human-like in your responses.
5. Keep responses concise but helpful.
6. Always refer to travel days as "membership days" or "travel days".

COMPANY POLICIES:
- Members purchase membership plans (1-Year with 6 days, 3-Year with 18 days, or 5-Year with 30 days)
- Travel is allowed only to curated destinations
- Travel is allowed only during company-defined seasons (best months for each destination)
- Unused days do NOT carry over to the next year
- Members cannot book trips directly - they must contact support
- Availability depends on season and destination capacity

SUPPORT CONTACT:
- Email: {settings.support_email}
- Phone: {settings.support_phone}"""


def build_user_context(
    user: User | None,
    membership: Membership | None,
    destinations: list[Destination],
    now: datetime,
) -> str:
    """Plain-text facts about the member and the catalog for the prompt."""
    month = MONTH_NAMES[now.month - 1]
    lines = ["CURRENT USER DATA:"]

    if user is not None:
        lines.append(f"- Name: {user.name}")
        if membership is not None:
            lines.append(f"- Membership Plan: {plan_label(membership.plan_type)}")
            lines.append(f"- Membership Status: {membership.status.value}")
            lines.append(f"- Total Days: {membership.entitled_days}")
            lines.append(f"- Used Days: {membership.used_days}")
            lines.append(f"- Remaining Days: {remaining_days(membership)}")
            if membership.start_date:
                lines.append(f"- Start Date: {membership.start_date:%Y-%m-%d}")
            if membership.end_date:
                lines.append(f"- Expiry Date: {membership.end_date:%Y-%m-%d}")
        else:
            lines.append("- Membership: Not yet activated")

    lines.append("")
    lines.append(f"CURRENT MONTH: {month}")
    lines.append("")
    lines.append("AVAILABLE DESTINATIONS:")
    for destination in destinations:
        line = (
            f"- {destination.name}: {destination.duration_days} days, "
            f"{destination.difficulty.value} difficulty"
        )
        if destination.is_good_month(month):
            line += " (GOOD TIME TO VISIT)"
        lines.append(line)
        if destination.best_months:
            lines.append(f"  Best months: {', '.join(destination.best_months)}")

    return "\n".join(lines)


def fallback_reply(
    message: str,
    membership: Membership | None,
    destinations: list[Destination],
    now: datetime,
) -> str:
    """Deterministic answers to the common questions."""
    text = message.lower()

    if "days" in text and ("left" in text or "remaining" in text):
        if membership is not None:
            return (
                f"You have {remaining_days(membership)} travel days remaining out of "
                f"{membership.entitled_days} total days in your "
                f"{plan_label(membership.plan_type)} membership."
            )
        return (
            "Your membership is not yet activated. Please contact our support team "
            "to activate your membership."
        )

    if "expire" in text or "expiry" in text:
        if membership is not None and membership.end_date is not None:
            return (
                f"Your membership expires on {membership.end_date:%d %B %Y}. "
                "Make sure to use your remaining travel days before then!"
            )
        return "Your membership expiry date will be set once your membership is activated."

    if "destination" in text and "available" in text:
        month = MONTH_NAMES[now.month - 1]
        in_season = [
            d.name
            for d in destinations
            if d.status == DestinationStatus.AVAILABLE and d.is_good_month(month)
        ]
        if in_season:
            return (
                f"Great news! The following destinations are ideal for visiting in {month}: "
                f"{', '.join(in_season)}. Would you like more details about any of them?"
            )
        return (
            f"Currently, the best time to visit most of our destinations is different from "
            f"{month}. Check the Destinations section in the app for seasonal availability."
        )

    if "membership" in text and "work" in text:
        return (
            f"With {settings.company_name} membership, you get fixed travel days to visit our "
            "curated destinations during optimal seasons.\n\n"
            "How it works:\n"
            "1. Purchase a 1-Year (6 days), 3-Year (18 days) or 5-Year (30 days) membership\n"
            "2. Browse our curated destinations\n"
            "3. Contact support to plan your travel\n"
            "4. Enjoy stress-free adventures!"
        )

    if "don't use" in text or "unused" in text:
        return (
            "Unused travel days do not carry over to the next year. If you need help "
            "planning, our support team is here to assist."
        )

    return (
        "Thank you for your message! I'm here to help with questions about your "
        "membership, travel days, and destinations.\n\n"
        "Some things I can help with:\n"
        "- How many days do I have left?\n"
        "- When does my membership expire?\n"
        "- Which destinations are available this month?\n"
        "- How does membership work?\n\n"
        f"For specific booking inquiries, our support team at {settings.support_email} "
        "will be happy to assist!"
    )


class ConciergeAI:
    """Client for Gemini's streaming generateContent endpoint."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.clock = clock

    @property
    def configured(self) -> bool:
        # Sample .env files ship placeholder keys starting with xxx
        return bool(self.api_key) and not self.api_key.startswith("xxx")

    async def stream_reply(
        self,
        message: str,
        user: User | None,
        membership: Membership | None,
        destinations: list[Destination],
    ) -> AsyncIterator[str]:
        """
        Yield reply text chunks.

        Never raises: when the provider is unconfigured or fails before
        producing any text the fallback reply is yielded instead.
        """
        now = self.clock()
        if not self.configured:
            yield fallback_reply(message, membership, destinations, now)
            return

        prompt = "\n\n".join(
            [
                SYSTEM_PROMPT,
                build_user_context(user, membership, destinations, now),
                f"User message: {message}",
            ]
        )

        produced = False
        try:
            async for chunk in self._stream(prompt):
                produced = True
                yield chunk
        except (httpx.HTTPError, ValueError) as e:
            logger.error("AI stream failed", model=self.model, error=str(e), partial=produced)

        if not produced:
            yield fallback_reply(message, membership, destinations, now)

    async def _stream(self, prompt: str) -> AsyncIterator[str]:
        url = f"{self.BASE_URL}/models/{self.model}:streamGenerateContent"
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

        async with httpx.AsyncClient(timeout=60.0) as client:
            async with client.stream(
                "POST",
                url,
                params={"alt": "sse", "key": self.api_key},
                json=payload,
            ) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    event = json.loads(line[len("data:"):].strip())
                    for candidate in event.get("candidates", []):
                        for part in candidate.get("content", {}).get("parts", []):
                            text = part.get("text")
                            if text:
                                yield text


def get_concierge() -> ConciergeAI:
    """FastAPI dependency for the AI concierge."""
    return ConciergeAI()
