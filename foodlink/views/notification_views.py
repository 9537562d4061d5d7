# foodlink/views/notification_views.py
import json
import logging

from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view

from ..exceptions import ApiError
from ..models import Notification
from ..serializers import NotificationReadSerializer, NotificationSerializer, PushSubscriptionSerializer
from .helpers import ok, paginated, query_flag

logger = logging.getLogger(__name__)


def mark_read(queryset):
    return queryset.filter(is_read=False).update(is_read=True, read_at=timezone.now(), updated_at=timezone.now())


@api_view(['GET', 'DELETE'])
def notification_list(request):
    inbox = Notification.objects.filter(user=request.user)

    if request.method == 'DELETE':
        deleted, _ = inbox.delete()
        return ok(message='All notifications deleted', deleted=deleted)

    notifications = inbox.filter(is_read=False) if query_flag(request, 'unread') else inbox
    unread_count = inbox.filter(is_read=False).count()
    return paginated(request, notifications, NotificationSerializer, unread_count=unread_count)


@api_view(['PATCH'])
def mark_notifications_read(request):
    serializer = NotificationReadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    inbox = Notification.objects.filter(user=request.user)

    if serializer.validated_data['mark_all_read']:
        mark_read(inbox)
        return ok(message='All notifications marked as read')

    ids = serializer.validated_data.get('notification_ids')
    if ids:
        updated = mark_read(inbox.filter(pk__in=ids))
        return ok(message='Notifications marked as read', updated=updated)

    raise ApiError(status.HTTP_400_BAD_REQUEST, 'No notifications specified')


@api_view(['PUT'])
def mark_all_notifications_read(request):
    updated = mark_read(Notification.objects.filter(user=request.user))
    return ok(message='All notifications marked as read', updated=updated)


@api_view(['PUT'])
def mark_notification_read(request, pk):
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=['is_read', 'read_at', 'updated_at'])
    return ok(NotificationSerializer(notification).data)


@api_view(['DELETE'])
def notification_delete(request, pk):
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    notification.delete()
    return ok(message='Notification deleted')


@api_view(['POST'])
def save_subscription(request):
    """Store the browser's web push subscription for the current user"""
    serializer = PushSubscriptionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = request.user
    subscription = serializer.validated_data
    user.webpush_subscription = json.dumps({'endpoint': subscription['endpoint'], 'keys': dict(subscription['keys'])})
    user.save(update_fields=['webpush_subscription', 'updated_at'])
    logger.info("Saved push subscription for user %s", user.pk)
    return ok(message='Subscription saved successfully')
