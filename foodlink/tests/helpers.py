from datetime import timedelta

from django.utils import timezone

from foodlink.authentication import issue_token
from foodlink.models import FoodDonation, PickupAssignment, User

PASSWORD = 'secret123'

# Bengaluru, roughly 3 km apart
DONOR_POINT = (12.9716, 77.5946)
NGO_POINT = (12.9352, 77.6245)


def make_user(role, email=None, **extra):
    extra.setdefault('name', f"Test {role}")
    extra.setdefault('phone', '9876543210')
    extra.setdefault('is_verified', True)
    return User.objects.create_user(
        email=email or f"{role}@example.com",
        password=PASSWORD,
        role=role,
        **extra,
    )


def make_donor(email='donor@example.com', **extra):
    extra.setdefault('latitude', DONOR_POINT[0])
    extra.setdefault('longitude', DONOR_POINT[1])
    return make_user(User.Role.DONOR, email, **extra)


def make_ngo(email='ngo@example.com', **extra):
    extra.setdefault('organization', 'Food Bank')
    extra.setdefault('latitude', NGO_POINT[0])
    extra.setdefault('longitude', NGO_POINT[1])
    return make_user(User.Role.NGO, email, **extra)


def make_volunteer(email='volunteer@example.com', **extra):
    return make_user(User.Role.VOLUNTEER, email, **extra)


def make_admin(email='admin@example.com', **extra):
    return make_user(User.Role.ADMIN, email, **extra)


def make_donation(donor, hours=24, status=FoodDonation.Status.AVAILABLE, **extra):
    now = timezone.now()
    fields = {
        'food_type': FoodDonation.FoodType.COOKED_MEALS,
        'description': 'Vegetable biryani',
        'quantity': 10,
        'unit': FoodDonation.Unit.KG,
        'expiry_date': now + timedelta(hours=hours),
        'storage_condition': FoodDonation.StorageCondition.ROOM_TEMPERATURE,
        'pickup_address': '12 MG Road',
        'pickup_latitude': DONOR_POINT[0],
        'pickup_longitude': DONOR_POINT[1],
        'available_from': now,
        'available_until': now + timedelta(hours=max(hours, 1)),
    }
    fields.update(extra)
    return FoodDonation.objects.create(donor=donor, status=status, **fields)


def make_pickup(donation, recipient, volunteer=None, status=PickupAssignment.Status.ASSIGNED, **extra):
    fields = {
        'scheduled_pickup_time': timezone.now(),
        'pickup_latitude': donation.pickup_latitude,
        'pickup_longitude': donation.pickup_longitude,
        'delivery_latitude': recipient.latitude,
        'delivery_longitude': recipient.longitude,
    }
    fields.update(extra)
    return PickupAssignment.objects.create(
        donation=donation,
        donor=donation.donor,
        recipient=recipient,
        volunteer=volunteer,
        status=status,
        **fields,
    )


def authenticate(client, user):
    token = issue_token(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.key}")
    return token
