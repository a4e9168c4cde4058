"""Notification delivery tasks.

Each channel is its own task so that a failing provider is retried on its
own without resending on the channels that already succeeded.
"""

import asyncio

import structlog

from traveltrek.celery_app import celery_app
from traveltrek.config import settings
from traveltrek.errors import UpstreamError
from traveltrek.services.notifications.email import EmailClient
from traveltrek.services.notifications.push import PushClient
from traveltrek.services.notifications.whatsapp import WhatsAppClient

logger = structlog.get_logger()

RETRY_OPTIONS = {
    "autoretry_for": (UpstreamError,),
    "retry_backoff": True,
    "retry_backoff_max": 600,
    "retry_jitter": True,
    "max_retries": 5,
}


def run_async(coro):
    """Helper to run async code in sync Celery task."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@celery_app.task(name="traveltrek.tasks.notifications.send_activation_email", **RETRY_OPTIONS)
def send_activation_email(email: str, name: str, membership_number: str, plan_type: str) -> dict:
    """Email the newly allocated membership number. Retried until delivered."""
    client = EmailClient()
    if not client.configured:
        logger.warning("Activation email skipped, provider not configured", email=email)
        return {"status": "skipped"}

    sent = run_async(client.send_membership_number(email, name, membership_number, plan_type))
    if not sent:
        raise UpstreamError("Activation email was not accepted by the provider")
    return {"status": "sent"}


@celery_app.task(name="traveltrek.tasks.notifications.send_activation_whatsapp")
def send_activation_whatsapp(phone: str, name: str, membership_number: str, plan_type: str) -> dict:
    """Best-effort WhatsApp copy of the activation notice."""
    sent = run_async(
        WhatsAppClient().send_membership_number(phone, name, membership_number, plan_type)
    )
    return {"status": "sent" if sent else "failed"}


@celery_app.task(name="traveltrek.tasks.notifications.send_push")
def send_push(token: str | None, title: str, body: str, data: dict | None = None) -> dict:
    """Best-effort push notification."""
    sent = run_async(PushClient().send(token, title, body, data))
    return {"status": "sent" if sent else "skipped"}


@celery_app.task(name="traveltrek.tasks.notifications.send_welcome_email", **RETRY_OPTIONS)
def send_welcome_email(email: str, name: str) -> dict:
    client = EmailClient()
    if not client.configured:
        return {"status": "skipped"}
    if not run_async(client.send_welcome(email, name)):
        raise UpstreamError("Welcome email was not accepted by the provider")
    return {"status": "sent"}


@celery_app.task(name="traveltrek.tasks.notifications.send_otp_email", **RETRY_OPTIONS)
def send_otp_email(email: str, name: str, code: str, purpose: str) -> dict:
    client = EmailClient()
    if not client.configured:
        if not settings.is_production:
            logger.info("Email disabled, OTP for local testing", email=email, purpose=purpose, otp=code)
        return {"status": "skipped"}
    if not run_async(client.send_otp(email, name, code, purpose)):
        raise UpstreamError("OTP email was not accepted by the provider")
    return {"status": "sent"}


@celery_app.task(name="traveltrek.tasks.notifications.send_rejection_email")
def send_rejection_email(email: str, name: str, reason: str | None = None) -> dict:
    sent = run_async(EmailClient().send_rejection(email, name, reason))
    return {"status": "sent" if sent else "failed"}
