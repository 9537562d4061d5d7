# foodlink/utils/realtime.py
"""
Fan-out of live pickup events to websocket groups.

Groups:
    pickup-<id>  clients following a single pickup
    user-<id>    every open socket of a single user
"""

import json
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.serializers.json import DjangoJSONEncoder

logger = logging.getLogger(__name__)


def pickup_group(pickup_id):
    return f"pickup-{pickup_id}"


def user_group(user_id):
    return f"user-{user_id}"


def broadcast(group, event, payload):
    """Send ``event`` with ``payload`` to every socket in ``group``."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    # Round-trip through JSON so datetimes/decimals survive any layer backend.
    payload = json.loads(json.dumps(payload, cls=DjangoJSONEncoder))
    try:
        async_to_sync(channel_layer.group_send)(group, {
            'type': 'relay.event',
            'event': event,
            'payload': payload,
        })
    except Exception:
        logger.exception("Failed to broadcast %s to %s", event, group)
