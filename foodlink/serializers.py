# foodlink/serializers.py
from rest_framework import serializers

from .lifecycle import VOLUNTEER_STATUS_UPDATES
from .models import AuditLog, FoodDonation, HandoverVerification, Notification, PickupAssignment, User

ADDRESS_FIELDS = ('street', 'city', 'state', 'pincode', 'country')
VOLUNTEER_FIELDS = ('availability', 'preferred_areas', 'has_vehicle', 'vehicle_type', 'max_distance')
PREFERENCE_FIELDS = ('email_notifications', 'sms_notifications', 'language')


class GeoPointField(serializers.Field):
    """
    A location written as a GeoJSON point ``{"type": "Point", "coordinates": [lng, lat]}``
    or as ``{"lat": .., "lng": ..}``. Validated to a ``(lat, lng)`` tuple.
    """

    default_error_messages = {
        'invalid': 'Must be a GeoJSON Point with [longitude, latitude] coordinates',
        'out_of_range': 'Latitude must be within [-90, 90] and longitude within [-180, 180]',
    }

    def to_representation(self, value):
        return value

    def to_internal_value(self, data):
        if not isinstance(data, dict):
            self.fail('invalid')
        if 'coordinates' in data:
            if data.get('type', 'Point') != 'Point':
                self.fail('invalid')
            coordinates = data['coordinates']
            if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
                self.fail('invalid')
            raw_lng, raw_lat = coordinates
        elif 'lat' in data and 'lng' in data:
            raw_lat, raw_lng = data['lat'], data['lng']
        else:
            self.fail('invalid')

        try:
            lat, lng = float(raw_lat), float(raw_lng)
        except (TypeError, ValueError):
            self.fail('invalid')

        if not (-90 <= lat <= 90 and -180 <= lng <= 180):
            self.fail('out_of_range')
        return lat, lng


def apply_point(attrs, source, lat_field, lng_field):
    """Replace the validated ``source`` point in ``attrs`` with its lat/lng fields."""
    if source in attrs:
        point = attrs.pop(source)
        attrs[lat_field], attrs[lng_field] = point if point else (None, None)
    return attrs


class LatLngSerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)


# --- USERS ---

class UserSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'organization', 'phone', 'role', 'trust_badge']
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    location = GeoPointField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'name', 'role', 'phone', 'organization',
            *ADDRESS_FIELDS, 'location',
            'trust_badge', 'trust_score', 'response_rate', 'completed_donations',
            'is_verified', 'is_active', 'verification_date', 'verified_by',
            *VOLUNTEER_FIELDS, *PREFERENCE_FIELDS,
            'last_login', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class AdminUserSerializer(UserSerializer):
    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['admin_notes']
        read_only_fields = fields


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=6, style={'input_type': 'password'})
    role = serializers.ChoiceField(choices=[User.Role.DONOR, User.Role.NGO, User.Role.VOLUNTEER])
    location = GeoPointField(required=False, allow_null=True)

    class Meta:
        model = User
        fields = [
            'email', 'password', 'name', 'role', 'phone', 'organization',
            *ADDRESS_FIELDS, 'location', *VOLUNTEER_FIELDS,
        ]
        extra_kwargs = {
            # Uniqueness is checked case-insensitively in validate_email
            'email': {'validators': []},
        }

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email=value).exists():
            raise serializers.ValidationError('User with this email already exists')
        return value

    def validate(self, attrs):
        return apply_point(attrs, 'location', 'latitude', 'longitude')

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(style={'input_type': 'password'})


class ProfileSerializer(serializers.ModelSerializer):
    location = GeoPointField(required=False, allow_null=True)

    class Meta:
        model = User
        fields = [
            'name', 'phone', 'organization', *ADDRESS_FIELDS, 'location',
            *VOLUNTEER_FIELDS, *PREFERENCE_FIELDS,
        ]

    def validate(self, attrs):
        return apply_point(attrs, 'location', 'latitude', 'longitude')


class AdminUserUpdateSerializer(ProfileSerializer):
    class Meta(ProfileSerializer.Meta):
        fields = ProfileSerializer.Meta.fields + [
            'role', 'is_active', 'is_verified', 'trust_badge', 'trust_score', 'response_rate', 'admin_notes',
        ]


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField()
    new_password = serializers.CharField(min_length=6)


class UserVerifySerializer(serializers.Serializer):
    ACTIONS = ('approve', 'reject', 'revoke')

    action = serializers.ChoiceField(choices=ACTIONS, required=False)
    verified = serializers.BooleanField(required=False)
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if 'action' not in attrs:
            if 'verified' not in attrs:
                raise serializers.ValidationError('Invalid action')
            attrs['action'] = 'approve' if attrs['verified'] else 'revoke'
        return attrs


# --- DONATIONS ---

class DonationSerializer(serializers.ModelSerializer):
    donor = UserSummarySerializer(read_only=True)
    claimed_by = UserSummarySerializer(read_only=True)
    pickup_location = GeoPointField(required=False, allow_null=True)
    safety_checklist = serializers.DictField(child=serializers.BooleanField(), required=False)
    allergens = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    dietary_info = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    images = serializers.ListField(child=serializers.URLField(), required=False)

    class Meta:
        model = FoodDonation
        fields = [
            'id', 'donor', 'food_type', 'description', 'quantity', 'unit',
            'expiry_date', 'preparation_date', 'storage_condition', 'allergens', 'dietary_info',
            'pickup_address', 'pickup_location', 'pickup_instructions',
            'available_from', 'available_until', 'images',
            'urgency_level', 'status', 'safety_checklist', *FoodDonation.SAFETY_FIELDS,
            'verified_by', 'verified_at', 'verification_notes',
            'claimed_by', 'claimed_at', 'completed_at',
            'feedback_rating', 'feedback_comment', 'received_in_good_condition',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'urgency_level', 'status', 'verified_by', 'verified_at', 'verification_notes',
            'claimed_at', 'completed_at', 'feedback_rating', 'feedback_comment',
            'received_in_good_condition', 'created_at', 'updated_at',
        ]

    def _current(self, attrs, field):
        if field in attrs:
            return attrs[field]
        return getattr(self.instance, field, None)

    def validate(self, attrs):
        checklist = attrs.pop('safety_checklist', None) or {}
        for field, value in checklist.items():
            if field not in FoodDonation.SAFETY_FIELDS:
                raise serializers.ValidationError({'safety_checklist': f"Unknown checklist item '{field}'"})
            attrs[field] = value

        available_from = self._current(attrs, 'available_from')
        available_until = self._current(attrs, 'available_until')
        if available_from and available_until and available_until <= available_from:
            raise serializers.ValidationError({'available_until': 'Must be after available_from'})

        return apply_point(attrs, 'pickup_location', 'pickup_latitude', 'pickup_longitude')


class DonationBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = FoodDonation
        fields = ['id', 'food_type', 'description', 'quantity', 'unit', 'urgency_level', 'expiry_date', 'status']
        read_only_fields = fields


class DonationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=FoodDonation.Status.choices)


class DonationVerifySerializer(serializers.Serializer):
    approved = serializers.BooleanField(required=False)
    verified = serializers.BooleanField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if 'approved' not in attrs:
            if 'verified' not in attrs:
                raise serializers.ValidationError('approved is required')
            attrs['approved'] = attrs['verified']
        return attrs


class FeedbackSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(required=False, allow_blank=True, default='')
    received_in_good_condition = serializers.BooleanField(required=False, allow_null=True, default=None)


# --- PICKUPS ---

class HandoverVerificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = HandoverVerification
        fields = ['id', 'stage', 'verified_at', 'photo_url', 'signature', 'received_by', 'condition', 'notes']
        read_only_fields = ['id', 'verified_at']


class PickupSerializer(serializers.ModelSerializer):
    donation = DonationBriefSerializer(read_only=True)
    donor = UserSummarySerializer(read_only=True)
    recipient = UserSummarySerializer(read_only=True)
    volunteer = UserSummarySerializer(read_only=True)
    route = serializers.ReadOnlyField()
    verifications = HandoverVerificationSerializer(many=True, read_only=True)

    class Meta:
        model = PickupAssignment
        fields = [
            'id', 'donation', 'donor', 'recipient', 'volunteer', 'status',
            'scheduled_pickup_time', 'scheduled_delivery_time', 'actual_pickup_time', 'actual_delivery_time',
            'route', 'location_updated_at', 'pickup_instructions', 'delivery_instructions', 'notes',
            'verifications', 'rating_by_donor', 'rating_by_recipient', 'rating_comments',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PickupCreateSerializer(serializers.Serializer):
    donation = serializers.PrimaryKeyRelatedField(queryset=FoodDonation.objects.all())
    volunteer = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(role=User.Role.VOLUNTEER))
    scheduled_time = serializers.DateTimeField(required=False, allow_null=True)


class PickupStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[s.value for s in VOLUNTEER_STATUS_UPDATES])
    gps_location = LatLngSerializer(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class PickupCompleteSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)
    actual_quantity = serializers.FloatField(required=False, min_value=0)


class RatingSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comments = serializers.CharField(required=False, allow_blank=True, default='')


# --- NOTIFICATIONS ---

class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = [
            'id', 'type', 'title', 'message', 'priority', 'is_read', 'read_at',
            'related_donation', 'related_pickup', 'action_url', 'metadata', 'expires_at', 'created_at',
        ]
        read_only_fields = fields


class NotificationReadSerializer(serializers.Serializer):
    notification_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    mark_all_read = serializers.BooleanField(required=False, default=False)


class PushSubscriptionSerializer(serializers.Serializer):
    endpoint = serializers.URLField()
    keys = serializers.DictField(child=serializers.CharField())

    def validate_keys(self, value):
        missing = [k for k in ('p256dh', 'auth') if k not in value]
        if missing:
            raise serializers.ValidationError(f"Missing keys: {', '.join(missing)}")
        return value


# --- AUDIT ---

class AuditLogSerializer(serializers.ModelSerializer):
    performed_by = UserSummarySerializer(read_only=True)
    target_user = UserSummarySerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = [
            'id', 'action', 'performed_by', 'target_user', 'target_donation', 'target_pickup',
            'details', 'ip_address', 'user_agent', 'created_at',
        ]
        read_only_fields = fields
