# foodlink/utils/push.py
"""
Browser push delivery for notifications.
"""

import json
import logging

from django.conf import settings
from pywebpush import webpush, WebPushException

logger = logging.getLogger(__name__)


def send_push(user, title, body, url=''):
    """Send a web push message to ``user``. Returns True when a message was sent."""
    if not user.webpush_subscription:
        return False

    vapid = settings.WEBPUSH_SETTINGS
    if not vapid.get('VAPID_PRIVATE_KEY'):
        logger.debug("VAPID keys not configured, skipping push for user %s", user.pk)
        return False

    try:
        subscription_info = json.loads(user.webpush_subscription)
    except ValueError:
        logger.warning("Stored push subscription for user %s is not valid JSON", user.pk)
        return False

    message_data = {'title': title, 'body': body, 'url': url}
    try:
        webpush(
            subscription_info=subscription_info,
            data=json.dumps(message_data),
            vapid_private_key=vapid['VAPID_PRIVATE_KEY'],
            vapid_claims={
                "sub": f"mailto:{vapid['VAPID_ADMIN_EMAIL']}"
            }
        )
    except WebPushException as e:
        logger.warning("Failed to send push notification to user %s: %s", user.pk, e)
        return False
    return True
