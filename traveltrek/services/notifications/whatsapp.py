"""WhatsApp messages through the Twilio REST API."""

import httpx
import structlog

from traveltrek.config import settings
from traveltrek.services.membership.status import plan_label

logger = structlog.get_logger()


class WhatsAppClient:
    """Client for Twilio's WhatsApp messaging."""

    BASE_URL = "https://api.twilio.com/2010-04-01"

    def __init__(self, account_sid: str | None = None, auth_token: str | None = None):
        self.account_sid = account_sid if account_sid is not None else settings.twilio_account_sid
        self.auth_token = auth_token if auth_token is not None else settings.twilio_auth_token
        self.sender = settings.twilio_whatsapp_from

    @property
    def configured(self) -> bool:
        # Twilio account SIDs always start with AC
        return self.account_sid.startswith("AC") and bool(self.auth_token)

    async def send(self, to: str, body: str) -> bool:
        if not to:
            return False
        if not self.configured:
            logger.info("WhatsApp provider not configured, skipping", to=to)
            return True

        formatted_to = to if to.startswith("whatsapp:") else f"whatsapp:{to}"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.BASE_URL}/Accounts/{self.account_sid}/Messages.json",
                    auth=(self.account_sid, self.auth_token),
                    data={"From": self.sender, "To": formatted_to, "Body": body},
                    timeout=15.0,
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("WhatsApp send failed", to=to, error=str(e))
            return False

        logger.info("WhatsApp message sent", to=to, sid=response.json().get("sid"))
        return True

    async def send_membership_number(
        self, phone: str, name: str, membership_number: str, plan_type: str
    ) -> bool:
        body = (
            f"Congratulations {name}!\n\n"
            f"Your {settings.company_name} membership has been activated!\n\n"
            f"*Membership ID:* {membership_number}\n"
            f"*Plan:* {plan_label(plan_type)} Membership\n\n"
            f"Use this Membership ID to login at {settings.member_login_url}\n\n"
            f"Need help? Contact {settings.support_email}"
        )
        return await self.send(phone, body)
