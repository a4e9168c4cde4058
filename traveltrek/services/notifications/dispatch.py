"""Queue notifications without letting them affect the caller."""

import structlog

from traveltrek.config import settings
from traveltrek.services.membership.status import plan_label

logger = structlog.get_logger()


class NotificationDispatcher:
    """
    Hands notifications to the Celery queue.

    Every method returns immediately. A broker outage is logged and
    swallowed so the membership change that triggered the notice stands.
    """

    def _enqueue(self, task, **kwargs) -> bool:
        try:
            task.delay(**kwargs)
        except Exception as e:
            logger.error("Failed to queue notification", task=task.name, error=str(e))
            return False
        return True

    def activation(self, user, membership_number: str, plan_type: str) -> None:
        from traveltrek.tasks import notifications as tasks

        plan_type = str(getattr(plan_type, "value", plan_type))
        self._enqueue(
            tasks.send_activation_email,
            email=user.email,
            name=user.name,
            membership_number=membership_number,
            plan_type=plan_type,
        )
        if user.phone:
            self._enqueue(
                tasks.send_activation_whatsapp,
                phone=user.phone,
                name=user.name,
                membership_number=membership_number,
                plan_type=plan_type,
            )
        if user.fcm_token:
            self._enqueue(
                tasks.send_push,
                token=user.fcm_token,
                title="Your membership is active!",
                body=f"Your {plan_label(plan_type)} membership ID is {membership_number}.",
                data={"type": "membership_activated", "membership_number": membership_number},
            )
        logger.info("Activation notice queued", user_id=user.id, membership_number=membership_number)

    def welcome(self, user) -> None:
        from traveltrek.tasks import notifications as tasks

        self._enqueue(tasks.send_welcome_email, email=user.email, name=user.name)
        if user.fcm_token:
            self._enqueue(
                tasks.send_push,
                token=user.fcm_token,
                title=f"Welcome to {settings.company_name}!",
                body=f"Hi {user.name}, your adventure begins now.",
                data={"type": "welcome", "screen": "home"},
            )

    def otp(self, user, code: str, purpose: str) -> None:
        from traveltrek.tasks import notifications as tasks

        self._enqueue(
            tasks.send_otp_email, email=user.email, name=user.name, code=code, purpose=purpose
        )

    def rejection(self, user, reason: str | None) -> None:
        from traveltrek.tasks import notifications as tasks

        self._enqueue(tasks.send_rejection_email, email=user.email, name=user.name, reason=reason)


def get_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency for the notification dispatcher."""
    return NotificationDispatcher()
