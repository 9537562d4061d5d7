# foodlink/utils/activity.py
"""
Side effects shared by every state change: in-app notifications (with push,
email and websocket fan-out) and the append-only audit trail.
"""

import logging
from functools import partial

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction

from ..models import AuditLog, Notification
from .push import send_push
from .realtime import broadcast, user_group

logger = logging.getLogger(__name__)

EMAIL_PRIORITIES = (Notification.Priority.HIGH, Notification.Priority.URGENT)


def client_ip(request):
    forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def record_audit(action, performed_by=None, request=None, target_user=None,
                 target_donation=None, target_pickup=None, details=None):
    entry = AuditLog(
        action=action,
        performed_by=performed_by,
        target_user=target_user,
        target_donation=target_donation,
        target_pickup=target_pickup,
        details=details or {},
    )
    if request is not None:
        entry.ip_address = client_ip(request)
        entry.user_agent = request.META.get('HTTP_USER_AGENT', '')[:512]
    entry.save()
    return entry


def notify(user, type, title, message, priority=Notification.Priority.MEDIUM,
           donation=None, pickup=None, action_url='', metadata=None):
    """
    Store a notification for ``user`` and push it out on every channel they use.

    The row is written in the caller's transaction. Socket, push and email
    delivery wait until that transaction commits and are dropped on rollback.
    """
    notification = Notification.objects.create(
        user=user,
        type=type,
        title=title[:100],
        message=message[:500],
        priority=priority,
        related_donation=donation,
        related_pickup=pickup,
        action_url=action_url,
        metadata=metadata or {},
    )
    transaction.on_commit(partial(deliver_notification, user, notification), robust=True)
    return notification


def deliver_notification(user, notification):
    broadcast(user_group(user.pk), 'notification', {
        'id': notification.pk,
        'type': notification.type,
        'title': notification.title,
        'message': notification.message,
        'priority': notification.priority,
    })

    send_push(user, notification.title, notification.message, notification.action_url)

    if user.email_notifications and notification.priority in EMAIL_PRIORITIES:
        try:
            send_mail(
                notification.title,
                notification.message,
                settings.DEFAULT_FROM_EMAIL,
                [user.email],
                fail_silently=False,
            )
        except Exception as e:
            logger.warning("Email notification to %s failed: %s", user.email, e)
