# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Notification client — inter-service communication.
Tells newly assigned personnel about their sensitive task through the
notification-service, with timeout & fault tolerance.
"""

import httpx

from rotation_service.core.config import settings
from rotation_service.core.logging import get_logger
from rotation_service.metrics.prometheus import NOTIFICATIONS_SENT

logger = get_logger(__name__)


class NotificationClient:
    """Fire-and-forget notification sender via notification-service."""

    def send(
        self,
        channel: str,
        recipient: str,
        message: str,
        task_id: str = "N/A",
    ) -> None:
        """Send a notification. Failures are logged but never raised."""
        if not settings.NOTIFICATIONS_ENABLED:
            return
        try:
            with httpx.Client(timeout=settings.NOTIFICATION_TIMEOUT) as client:
                resp = client.post(
                    f"{settings.NOTIFICATION_SERVICE_URL}/api/v1/notify",
                    json={
                        "channel": channel,
                        "recipient": recipient,
                        "message": message,
                        "task_id": task_id,
                    },
                )
            NOTIFICATIONS_SENT.labels(channel=channel).inc()
            logger.info(
                "Notification sent: recipient=%s, channel=%s, status=%d",
                recipient,
                channel,
                resp.status_code,
            )
        except Exception as exc:
            logger.warning("Notification failed: %s", exc)
