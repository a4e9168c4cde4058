"""Mobile push notifications through Firebase Cloud Messaging."""

import httpx
import structlog

from traveltrek.config import settings

logger = structlog.get_logger()


class PushClient:
    """Client for the FCM HTTP API."""

    SEND_URL = "https://fcm.googleapis.com/fcm/send"

    def __init__(self, server_key: str | None = None):
        self.server_key = server_key if server_key is not None else settings.fcm_server_key

    @property
    def configured(self) -> bool:
        return bool(self.server_key)

    async def send(self, token: str | None, title: str, body: str, data: dict | None = None) -> bool:
        if not token:
            logger.info("No push token, skipping push notification")
            return False
        if not self.configured:
            logger.info("Push provider not configured, skipping", title=title)
            return True

        payload = {
            "to": token,
            "notification": {"title": title, "body": body, "sound": "default"},
            "data": data or {},
            "priority": "high",
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.SEND_URL,
                    headers={"Authorization": f"key={self.server_key}"},
                    json=payload,
                    timeout=15.0,
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Push notification failed", error=str(e))
            return False

        logger.info("Push notification sent", title=title)
        return True
