# foodlink/consumers.py
"""
Live pickup tracking socket.

Connections must carry a DRF token (see ``TokenAuthMiddleware``). Clients
send ``{"action": ...}`` messages to join their own user room or the room of
a pickup they take part in, and the assigned volunteer relays their position
to the pickup room. Server events arrive as ``{"event": ..., "data": ...}``.
"""

import logging

from asgiref.sync import async_to_sync
from channels.generic.websocket import JsonWebsocketConsumer

from . import lifecycle
from .exceptions import ApiError
from .models import PickupAssignment, User
from .serializers import LatLngSerializer
from .utils.realtime import pickup_group, user_group

logger = logging.getLogger(__name__)


class TrackingConsumer(JsonWebsocketConsumer):

    def connect(self):
        self.groups_joined = set()
        self.user = self.scope.get('user')
        if self.user is None or not self.user.is_authenticated:
            self.close()
            return
        self.accept()
        logger.debug("Tracking socket connected for user %s", self.user.pk)

    def disconnect(self, code):
        for group in getattr(self, 'groups_joined', ()):
            async_to_sync(self.channel_layer.group_discard)(group, self.channel_name)
        logger.debug("Tracking socket disconnected: %s", self.channel_name)

    def join(self, group):
        if group not in self.groups_joined:
            async_to_sync(self.channel_layer.group_add)(group, self.channel_name)
            self.groups_joined.add(group)
        self.send_json({'event': 'joined', 'data': {'room': group}})

    def error(self, message):
        self.send_json({'event': 'error', 'data': {'message': message}})

    def get_pickup(self, pickup_id):
        try:
            return PickupAssignment.objects.filter(pk=int(pickup_id)).first()
        except (TypeError, ValueError):
            return None

    def receive_json(self, content, **kwargs):
        action = content.get('action') if isinstance(content, dict) else None

        if action == 'join-room':
            self.join_room(content.get('user_id', self.user.pk))
        elif action == 'join-pickup' and content.get('pickup_id') is not None:
            self.join_pickup(content['pickup_id'])
        elif action == 'location-update' and content.get('pickup_id') is not None:
            self.location_update(content['pickup_id'], content.get('location') or {})
        else:
            self.error('Unknown action')

    def join_room(self, user_id):
        if str(user_id) != str(self.user.pk):
            self.error('Not authorized to join this room')
            return
        self.join(user_group(self.user.pk))

    def join_pickup(self, pickup_id):
        pickup = self.get_pickup(pickup_id)
        if pickup is None:
            self.error('Pickup not found')
            return
        if self.user.role != User.Role.ADMIN and not pickup.is_party(self.user):
            self.error('Not authorized to follow this pickup')
            return
        self.join(pickup_group(pickup.pk))

    def location_update(self, pickup_id, location):
        pickup = self.get_pickup(pickup_id)
        if pickup is None:
            self.error('Pickup not found')
            return

        position = LatLngSerializer(data=location)
        if not position.is_valid():
            self.error('Invalid location')
            return

        try:
            lifecycle.update_location(
                pickup, self.user,
                position.validated_data['lat'], position.validated_data['lng'],
            )
        except ApiError as e:
            self.error(str(e.detail))

    def relay_event(self, event):
        self.send_json({'event': event['event'], 'data': event['payload']})
