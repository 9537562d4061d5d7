from datetime import timedelta

from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils import timezone

# --- VALIDATORS ---
latitude_validators = [MinValueValidator(-90), MaxValueValidator(90)]
longitude_validators = [MinValueValidator(-180), MaxValueValidator(180)]
rating_validators = [MinValueValidator(1), MaxValueValidator(5)]

# Upper bound (inclusive) in hours until expiry -> urgency level.
URGENCY_THRESHOLDS = (
    (2, 'critical'),
    (6, 'high'),
    (12, 'medium'),
)


def compute_urgency_level(expiry_date, now=None):
    """Map the time left before ``expiry_date`` onto the urgency table."""
    now = now or timezone.now()
    hours_until_expiry = (expiry_date - now) / timedelta(hours=1)
    for upper_bound, level in URGENCY_THRESHOLDS:
        if hours_until_expiry <= upper_bound:
            return level
    return 'low'


def point_as_geojson(latitude, longitude):
    if latitude is None or longitude is None:
        return None
    return {'type': 'Point', 'coordinates': [longitude, latitude]}


# --- CORE USER MODEL ---
class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email).strip().lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.Role.ADMIN)
        extra_fields.setdefault('is_verified', True)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    class Role(models.TextChoices):
        DONOR = 'donor', 'Donor'
        NGO = 'ngo', 'NGO'
        VOLUNTEER = 'volunteer', 'Volunteer'
        ADMIN = 'admin', 'Admin'

    class TrustBadge(models.TextChoices):
        NONE = 'none', 'None'
        BRONZE = 'bronze', 'Bronze'
        SILVER = 'silver', 'Silver'
        GOLD = 'gold', 'Gold'
        PLATINUM = 'platinum', 'Platinum'

    username = None
    first_name = None
    last_name = None
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=100)
    role = models.CharField(max_length=10, choices=Role.choices)
    phone = models.CharField(max_length=20)
    organization = models.CharField(max_length=255, blank=True, default='')

    # Address
    street = models.CharField(max_length=255, blank=True, default='')
    city = models.CharField(max_length=100, blank=True, default='')
    state = models.CharField(max_length=100, blank=True, default='')
    pincode = models.CharField(max_length=20, blank=True, default='')
    country = models.CharField(max_length=100, default='India')

    latitude = models.FloatField(null=True, blank=True, validators=latitude_validators)
    longitude = models.FloatField(null=True, blank=True, validators=longitude_validators)

    # Trust and verification
    trust_badge = models.CharField(max_length=10, choices=TrustBadge.choices, default=TrustBadge.NONE)
    trust_score = models.FloatField(default=0, validators=[MinValueValidator(0), MaxValueValidator(100)])
    response_rate = models.FloatField(null=True, blank=True, validators=[MinValueValidator(0), MaxValueValidator(1)])
    completed_donations = models.PositiveIntegerField(default=0)
    is_verified = models.BooleanField(default=False)
    verification_date = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='verified_users')
    admin_notes = models.TextField(blank=True, default='')

    # Volunteer info
    availability = models.JSONField(default=dict, blank=True, help_text="Weekday -> {available, start_time, end_time}")
    preferred_areas = models.JSONField(default=list, blank=True)
    has_vehicle = models.BooleanField(default=False)
    vehicle_type = models.CharField(max_length=50, blank=True, default='')
    max_distance = models.FloatField(null=True, blank=True, help_text="Maximum travel distance in km")

    # Preferences
    email_notifications = models.BooleanField(default=True)
    sms_notifications = models.BooleanField(default=False)
    language = models.CharField(max_length=10, default='en')
    webpush_subscription = models.TextField(blank=True, null=True, help_text="Web push subscription data (JSON)")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name', 'phone']

    objects = UserManager()

    class Meta:
        indexes = [
            models.Index(fields=['role', 'is_active'], name='user_role_active_idx'),
            models.Index(fields=['latitude', 'longitude'], name='user_location_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_role_display()})"  # type: ignore

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def compare_password(self, candidate_password):
        return self.check_password(candidate_password)

    @property
    def location(self):
        return point_as_geojson(self.latitude, self.longitude)

    @property
    def display_name(self):
        return self.organization or self.name

    def is_available_on(self, weekday):
        """Volunteers without an availability map are treated as available."""
        if not self.availability:
            return True
        day = self.availability.get(weekday) or {}
        return day.get('available') is not False

    def refresh_trust_score(self):
        """Recalculate a volunteer's trust score from their assignment history"""
        finished = self.pickup_assignments.filter(
            status__in=[PickupAssignment.Status.COMPLETED, PickupAssignment.Status.CANCELLED]
        )
        total = finished.count()
        if total == 0:
            self.trust_score = 100.0
            self.save(update_fields=['trust_score', 'updated_at'])
            return self.trust_score

        completed = finished.filter(status=PickupAssignment.Status.COMPLETED).count()
        cancelled = total - completed
        ratings = []
        for by_donor, by_recipient in finished.values_list('rating_by_donor', 'rating_by_recipient'):
            ratings.extend(r for r in (by_donor, by_recipient) if r)
        average_rating = sum(ratings) / len(ratings) if ratings else 0

        completion_rate = (completed / total) * 100
        cancellation_penalty = cancelled * 5
        rating_bonus = (average_rating / 5) * 20

        self.trust_score = max(0, min(100, 50 + completion_rate - cancellation_penalty + rating_bonus))
        self.save(update_fields=['trust_score', 'updated_at'])
        return self.trust_score


# --- DONATIONS ---
class FoodDonation(models.Model):
    class FoodType(models.TextChoices):
        COOKED_MEALS = 'cooked_meals', 'Cooked Meals'
        RAW_VEGETABLES = 'raw_vegetables', 'Raw Vegetables'
        FRUITS = 'fruits', 'Fruits'
        DAIRY = 'dairy', 'Dairy'
        BAKERY = 'bakery', 'Bakery'
        PACKAGED = 'packaged', 'Packaged'
        BEVERAGES = 'beverages', 'Beverages'
        OTHER = 'other', 'Other'

    class Unit(models.TextChoices):
        KG = 'kg', 'kg'
        LITERS = 'liters', 'Liters'
        PIECES = 'pieces', 'Pieces'
        SERVINGS = 'servings', 'Servings'
        BOXES = 'boxes', 'Boxes'
        PACKETS = 'packets', 'Packets'

    class StorageCondition(models.TextChoices):
        ROOM_TEMPERATURE = 'room_temperature', 'Room Temperature'
        REFRIGERATED = 'refrigerated', 'Refrigerated'
        FROZEN = 'frozen', 'Frozen'

    class Urgency(models.TextChoices):
        LOW = 'low', 'Low'
        MEDIUM = 'medium', 'Medium'
        HIGH = 'high', 'High'
        CRITICAL = 'critical', 'Critical'

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending Verification'
        VERIFIED = 'verified', 'Verified'
        AVAILABLE = 'available', 'Available'
        CLAIMED = 'claimed', 'Claimed'
        ASSIGNED = 'assigned', 'Volunteer Assigned'
        IN_TRANSIT = 'in_transit', 'In Transit'
        DELIVERED = 'delivered', 'Delivered'
        COMPLETED = 'completed', 'Completed'
        EXPIRED = 'expired', 'Expired'
        CANCELLED = 'cancelled', 'Cancelled'

    donor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='donations')
    food_type = models.CharField(max_length=20, choices=FoodType.choices)
    description = models.CharField(max_length=500)
    quantity = models.FloatField(validators=[MinValueValidator(0.1, message='Quantity must be greater than 0')])
    unit = models.CharField(max_length=10, choices=Unit.choices)
    expiry_date = models.DateTimeField()
    preparation_date = models.DateTimeField(null=True, blank=True)
    storage_condition = models.CharField(max_length=20, choices=StorageCondition.choices)
    allergens = models.JSONField(default=list, blank=True)
    dietary_info = models.JSONField(default=list, blank=True)
    pickup_address = models.TextField()
    pickup_latitude = models.FloatField(null=True, blank=True, validators=latitude_validators)
    pickup_longitude = models.FloatField(null=True, blank=True, validators=longitude_validators)
    pickup_instructions = models.TextField(blank=True, default='')
    available_from = models.DateTimeField()
    available_until = models.DateTimeField()
    urgency_level = models.CharField(max_length=10, choices=Urgency.choices, default=Urgency.MEDIUM)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)
    images = models.JSONField(default=list, blank=True)

    # Safety checklist
    proper_storage = models.BooleanField(default=False)
    temperature_controlled = models.BooleanField(default=False)
    hygiene_standards = models.BooleanField(default=False)
    no_contamination = models.BooleanField(default=False)
    proper_packaging = models.BooleanField(default=False)

    # Verification fields
    verified_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='verified_donations')
    verified_at = models.DateTimeField(null=True, blank=True)
    verification_notes = models.TextField(blank=True, default='')

    # Claiming
    claimed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='claimed_donations', db_index=True)
    claimed_at = models.DateTimeField(null=True, blank=True)

    # Completion
    completed_at = models.DateTimeField(null=True, blank=True)
    feedback_rating = models.PositiveSmallIntegerField(null=True, blank=True, validators=rating_validators, help_text="Recipient rating from 1 to 5")
    feedback_comment = models.TextField(blank=True, default='')
    received_in_good_condition = models.BooleanField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    SAFETY_FIELDS = ('proper_storage', 'temperature_controlled', 'hygiene_standards', 'no_contamination', 'proper_packaging')

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'expiry_date'], name='donation_status_expiry_idx'),
            models.Index(fields=['donor', 'status'], name='donation_donor_status_idx'),
            models.Index(fields=['claimed_by', 'status'], name='donation_claimer_status_idx'),
            models.Index(fields=['pickup_latitude', 'pickup_longitude'], name='donation_pickup_point_idx'),
        ]

    def __str__(self):
        return f"{self.get_food_type_display()} from {self.donor.name} ({self.status})"  # type: ignore

    def save(self, *args, **kwargs):
        self.urgency_level = compute_urgency_level(self.expiry_date)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'urgency_level' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['urgency_level']
        super().save(*args, **kwargs)

    @property
    def pickup_location(self):
        return point_as_geojson(self.pickup_latitude, self.pickup_longitude)

    @property
    def safety_checklist(self):
        return {field: getattr(self, field) for field in self.SAFETY_FIELDS}

    @property
    def is_expired(self):
        return self.expiry_date < timezone.now()


# --- PICKUP ASSIGNMENTS ---
class PickupAssignment(models.Model):
    class Status(models.TextChoices):
        ASSIGNED = 'assigned', 'Assigned'
        ACCEPTED = 'accepted', 'Accepted'
        IN_TRANSIT = 'in_transit', 'On the Way'
        PICKED_UP = 'picked_up', 'Picked Up'
        DELIVERING = 'delivering', 'Delivering'
        DELIVERED = 'delivered', 'Delivered'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    donation = models.ForeignKey(FoodDonation, on_delete=models.CASCADE, related_name='pickups')
    donor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='donor_pickups')
    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='received_pickups')
    volunteer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='pickup_assignments')
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ASSIGNED, db_index=True)

    # Schedule
    scheduled_pickup_time = models.DateTimeField()
    scheduled_delivery_time = models.DateTimeField(null=True, blank=True)
    actual_pickup_time = models.DateTimeField(null=True, blank=True)
    actual_delivery_time = models.DateTimeField(null=True, blank=True)

    # Route information
    pickup_latitude = models.FloatField(null=True, blank=True, validators=latitude_validators)
    pickup_longitude = models.FloatField(null=True, blank=True, validators=longitude_validators)
    delivery_latitude = models.FloatField(null=True, blank=True, validators=latitude_validators)
    delivery_longitude = models.FloatField(null=True, blank=True, validators=longitude_validators)
    current_latitude = models.FloatField(null=True, blank=True, validators=latitude_validators)
    current_longitude = models.FloatField(null=True, blank=True, validators=longitude_validators)
    location_updated_at = models.DateTimeField(null=True, blank=True, help_text="Timestamp of last geolocation update")
    estimated_distance = models.FloatField(null=True, blank=True, help_text="Kilometres")
    estimated_duration = models.FloatField(null=True, blank=True, help_text="Minutes")

    # Instructions
    pickup_instructions = models.TextField(blank=True, default='')
    delivery_instructions = models.TextField(blank=True, default='')
    notes = models.TextField(blank=True, default='')

    # Rating
    rating_by_donor = models.PositiveSmallIntegerField(null=True, blank=True, validators=rating_validators)
    rating_by_recipient = models.PositiveSmallIntegerField(null=True, blank=True, validators=rating_validators)
    rating_comments = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-scheduled_pickup_time']
        indexes = [
            models.Index(fields=['volunteer', 'status'], name='pickup_volunteer_status_idx'),
            models.Index(fields=['pickup_latitude', 'pickup_longitude'], name='pickup_route_start_idx'),
            models.Index(fields=['delivery_latitude', 'delivery_longitude'], name='pickup_delivery_point_idx'),
        ]

    def __str__(self):
        return f"Pickup #{self.pk} for donation #{self.donation_id} ({self.status})"

    @property
    def route(self):
        return {
            'pickup_location': point_as_geojson(self.pickup_latitude, self.pickup_longitude),
            'delivery_location': point_as_geojson(self.delivery_latitude, self.delivery_longitude),
            'current_location': point_as_geojson(self.current_latitude, self.current_longitude),
            'estimated_distance': self.estimated_distance,
            'estimated_duration': self.estimated_duration,
            'waypoints': [
                {**point_as_geojson(w.latitude, w.longitude), 'reached_at': w.reached_at}
                for w in self.waypoints.all()
            ],
        }

    def is_party(self, user):
        return user.pk in (self.donor_id, self.recipient_id, self.volunteer_id)


class RouteWaypoint(models.Model):
    pickup = models.ForeignKey(PickupAssignment, on_delete=models.CASCADE, related_name='waypoints')
    position = models.PositiveIntegerField(default=0)
    latitude = models.FloatField(validators=latitude_validators)
    longitude = models.FloatField(validators=longitude_validators)
    reached_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['position', 'id']

    def __str__(self):
        return f"Waypoint {self.position} of pickup #{self.pickup_id}"


class HandoverVerification(models.Model):
    """Photo/signature evidence captured when food changes hands"""

    class Stage(models.TextChoices):
        PICKUP = 'pickup', 'Pickup'
        DELIVERY = 'delivery', 'Delivery'

    class Condition(models.TextChoices):
        GOOD = 'good', 'Good'
        ACCEPTABLE = 'acceptable', 'Acceptable'
        POOR = 'poor', 'Poor'

    pickup = models.ForeignKey(PickupAssignment, on_delete=models.CASCADE, related_name='verifications')
    stage = models.CharField(max_length=10, choices=Stage.choices)
    verified_at = models.DateTimeField(default=timezone.now)
    photo_url = models.URLField(max_length=500, blank=True, default='')
    signature = models.TextField(blank=True, default='')
    received_by = models.CharField(max_length=255, blank=True, default='')
    condition = models.CharField(max_length=12, choices=Condition.choices)
    notes = models.TextField(blank=True, default='')

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['pickup', 'stage'], name='unique_verification_per_stage'),
        ]

    def __str__(self):
        return f"{self.get_stage_display()} verification for pickup #{self.pickup_id}"  # type: ignore


# --- NOTIFICATIONS & AUDIT ---
class Notification(models.Model):
    class Type(models.TextChoices):
        DONATION_CREATED = 'donation_created', 'Donation Created'
        DONATION_CLAIMED = 'donation_claimed', 'Donation Claimed'
        DONATION_VERIFIED = 'donation_verified', 'Donation Verified'
        DONATION_EXPIRED = 'donation_expired', 'Donation Expired'
        PICKUP_ASSIGNED = 'pickup_assigned', 'Pickup Assigned'
        PICKUP_UPDATE = 'pickup_update', 'Pickup Update'
        PICKUP_COMPLETED = 'pickup_completed', 'Pickup Completed'
        ASSIGNMENT_CANCELLED = 'assignment_cancelled', 'Assignment Cancelled'
        VERIFICATION_APPROVED = 'verification_approved', 'Verification Approved'
        VERIFICATION_REJECTED = 'verification_rejected', 'Verification Rejected'
        BADGE_EARNED = 'badge_earned', 'Badge Earned'
        SYSTEM_ALERT = 'system_alert', 'System Alert'
        REMINDER = 'reminder', 'Reminder'

    class Priority(models.TextChoices):
        LOW = 'low', 'Low'
        MEDIUM = 'medium', 'Medium'
        HIGH = 'high', 'High'
        URGENT = 'urgent', 'Urgent'

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=30, choices=Type.choices)
    title = models.CharField(max_length=100)
    message = models.CharField(max_length=500)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    related_donation = models.ForeignKey(FoodDonation, on_delete=models.SET_NULL, null=True, blank=True, related_name='notifications')
    related_pickup = models.ForeignKey(PickupAssignment, on_delete=models.SET_NULL, null=True, blank=True, related_name='notifications')
    action_url = models.CharField(max_length=255, blank=True, default='')
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read', '-created_at'], name='notification_inbox_idx'),
            models.Index(fields=['expires_at'], name='notification_expiry_idx'),
        ]

    def __str__(self):
        return f"{self.title} -> {self.user.email}"


class AuditLog(models.Model):
    class Action(models.TextChoices):
        USER_REGISTERED = 'USER_REGISTERED'
        USER_LOGIN = 'USER_LOGIN'
        USER_LOGOUT = 'USER_LOGOUT'
        USER_VERIFIED = 'USER_VERIFIED'
        USER_REJECTED = 'USER_REJECTED'
        USER_UPDATED = 'USER_UPDATED'
        USER_DEACTIVATED = 'USER_DEACTIVATED'
        VERIFICATION_REVOKED = 'VERIFICATION_REVOKED'
        DONATION_CREATED = 'DONATION_CREATED'
        DONATION_UPDATED = 'DONATION_UPDATED'
        DONATION_VERIFIED = 'DONATION_VERIFIED'
        DONATION_CLAIMED = 'DONATION_CLAIMED'
        DONATION_CANCELLED = 'DONATION_CANCELLED'
        DONATION_COMPLETED = 'DONATION_COMPLETED'
        PICKUP_ASSIGNED = 'PICKUP_ASSIGNED'
        PICKUP_UPDATED = 'PICKUP_UPDATED'
        PICKUP_COMPLETED = 'PICKUP_COMPLETED'
        PICKUP_CANCELLED = 'PICKUP_CANCELLED'
        ADMIN_ACTION = 'ADMIN_ACTION'
        SYSTEM_EVENT = 'SYSTEM_EVENT'

    action = models.CharField(max_length=30, choices=Action.choices, db_index=True)
    performed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='performed_actions')
    target_user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_entries')
    target_donation = models.ForeignKey(FoodDonation, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_entries')
    target_pickup = models.ForeignKey(PickupAssignment, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_entries')
    details = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=512, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_created_idx'),
            models.Index(fields=['action', '-created_at'], name='audit_action_created_idx'),
            models.Index(fields=['performed_by', '-created_at'], name='audit_actor_created_idx'),
        ]

    def __str__(self):
        return f"{self.action} by {self.performed_by_id}"
