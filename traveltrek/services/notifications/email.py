"""Transactional email through the Resend HTTP API."""

from html import escape

import httpx
import structlog

from traveltrek.config import settings
from traveltrek.services.membership.status import plan_label

logger = structlog.get_logger()


class EmailClient:
    """Client for the Resend email API."""

    BASE_URL = "https://api.resend.com"

    def __init__(self, api_key: str | None = None, sender: str | None = None):
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.sender = sender or settings.email_from

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def send(self, to: str, subject: str, html: str) -> bool:
        """
        Send one email.

        Returns False when the provider is not configured or rejects the
        message; errors are logged, never raised.
        """
        if not self.configured:
            logger.info("Email provider not configured, skipping", to=to, subject=subject)
            return False

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.BASE_URL}/emails",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={"from": self.sender, "to": [to], "subject": subject, "html": html},
                    timeout=15.0,
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Email send failed", to=to, subject=subject, error=str(e))
            return False

        logger.info("Email sent", to=to, subject=subject)
        return True

    async def send_membership_number(
        self, email: str, name: str, membership_number: str, plan_type: str
    ) -> bool:
        name, membership_number = escape(name), escape(membership_number)
        body = f"""
            <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h1 style="color: #667EEA; text-align: center;">Welcome to {settings.company_name}!</h1>
                <p>Hi {name},</p>
                <p>Your membership request has been approved!</p>
                <div style="background-color: #f8fafc; padding: 20px; border-radius: 8px; text-align: center;">
                    <p style="margin: 0; color: #718096; font-size: 14px;">Your Membership ID</p>
                    <p style="margin: 10px 0 0 0; font-size: 24px; font-weight: bold; letter-spacing: 2px;">{membership_number}</p>
                </div>
                <p><strong>Plan Details:</strong> {plan_label(plan_type)} Membership</p>
                <p>Log in with your Membership ID at <a href="{settings.member_login_url}">{settings.member_login_url}</a>.</p>
                <p style="font-size: 12px; color: #a0aec0;">Questions? Contact {settings.support_email}</p>
            </div>
        """
        return await self.send(email, f"Welcome to {settings.company_name} - Your Membership ID", body)

    async def send_welcome(self, email: str, name: str) -> bool:
        name = escape(name)
        body = f"""
            <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h1>Welcome to {settings.company_name}, {name}!</h1>
                <p>Our team is reviewing your membership request. You will receive
                another email with your Membership ID once it is approved.</p>
                <p>Best regards,<br>The {settings.company_name} Team</p>
            </div>
        """
        return await self.send(email, f"Welcome to {settings.company_name}!", body)

    async def send_otp(self, email: str, name: str, code: str, purpose: str) -> bool:
        name, code, purpose = escape(name), escape(code), escape(purpose)
        body = f"""
            <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <p>Hi {name},</p>
                <p>Use this code to confirm your {purpose} change. It expires in 5 minutes.</p>
                <p style="font-size: 28px; font-weight: bold; letter-spacing: 4px;">{code}</p>
                <p>If you did not request this, you can ignore this email.</p>
            </div>
        """
        return await self.send(email, f"{settings.company_name} verification code", body)

    async def send_rejection(self, email: str, name: str, reason: str | None) -> bool:
        name = escape(name)
        detail = f"<p>Reason: {escape(reason)}</p>" if reason else ""
        body = f"""
            <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <p>Hi {name},</p>
                <p>We were unable to approve your membership request.</p>
                {detail}
                <p>Contact {settings.support_email} if you have any questions.</p>
            </div>
        """
        return await self.send(email, f"Your {settings.company_name} membership request", body)
