# foodlink/lifecycle.py
"""
State machine for donations and pickup assignments.

Every function here moves a donation or pickup between statuses. Each one
runs in a single transaction, locks the rows it changes, and records the
notifications and audit entries the change implies. Rejections raise
``ApiError`` so views can pass them straight through.
"""

import logging
from functools import partial

from django.db import transaction
from django.db.models import F
from django.utils import timezone
from geopy.distance import geodesic
from rest_framework import status as http

from .exceptions import ApiError
from .models import AuditLog, FoodDonation, HandoverVerification, Notification, PickupAssignment, User
from .utils.activity import notify, record_audit
from .utils.realtime import broadcast, pickup_group
from .utils.route_optimization import Location, get_route_optimizer

logger = logging.getLogger(__name__)

DonationStatus = FoodDonation.Status
PickupStatus = PickupAssignment.Status

PICKUP_TRANSITIONS = {
    PickupStatus.ACCEPTED: (PickupStatus.IN_TRANSIT,),
    PickupStatus.IN_TRANSIT: (PickupStatus.PICKED_UP,),
    PickupStatus.PICKED_UP: (PickupStatus.DELIVERING,),
    PickupStatus.DELIVERING: (PickupStatus.DELIVERED,),
    PickupStatus.DELIVERED: (PickupStatus.COMPLETED,),
}

VOLUNTEER_STATUS_UPDATES = (
    PickupStatus.IN_TRANSIT,
    PickupStatus.PICKED_UP,
    PickupStatus.DELIVERING,
    PickupStatus.DELIVERED,
    PickupStatus.COMPLETED,
)

PICKUP_TO_DONATION_STATUS = {
    PickupStatus.ACCEPTED: DonationStatus.ASSIGNED,
    PickupStatus.IN_TRANSIT: DonationStatus.IN_TRANSIT,
    PickupStatus.PICKED_UP: DonationStatus.IN_TRANSIT,
    PickupStatus.DELIVERING: DonationStatus.IN_TRANSIT,
    PickupStatus.DELIVERED: DonationStatus.DELIVERED,
    PickupStatus.COMPLETED: DonationStatus.COMPLETED,
}

CLAIMABLE_STATUSES = {DonationStatus.AVAILABLE, DonationStatus.VERIFIED}
EDIT_LOCKED_STATUSES = {DonationStatus.CLAIMED, DonationStatus.IN_TRANSIT, DonationStatus.DELIVERED, DonationStatus.COMPLETED}
CANCEL_LOCKED_STATUSES = {DonationStatus.IN_TRANSIT, DonationStatus.DELIVERED, DonationStatus.COMPLETED}
EXPIRABLE_STATUSES = [DonationStatus.PENDING, DonationStatus.VERIFIED, DonationStatus.AVAILABLE, DonationStatus.CLAIMED]

OPEN_PICKUP_STATUSES = [
    PickupStatus.ASSIGNED,
    PickupStatus.ACCEPTED,
    PickupStatus.IN_TRANSIT,
    PickupStatus.PICKED_UP,
    PickupStatus.DELIVERING,
]
RATEABLE_PICKUP_STATUSES = {PickupStatus.DELIVERED, PickupStatus.COMPLETED}
FEEDBACK_STATUSES = {DonationStatus.DELIVERED, DonationStatus.COMPLETED}

VERIFICATION_STAGE_STATUSES = {
    HandoverVerification.Stage.PICKUP: {
        PickupStatus.IN_TRANSIT, PickupStatus.PICKED_UP, PickupStatus.DELIVERING,
        PickupStatus.DELIVERED, PickupStatus.COMPLETED,
    },
    HandoverVerification.Stage.DELIVERY: {
        PickupStatus.DELIVERING, PickupStatus.DELIVERED, PickupStatus.COMPLETED,
    },
}

PICKUP_STATUS_MESSAGES = {
    PickupStatus.IN_TRANSIT: 'Volunteer is on the way',
    PickupStatus.PICKED_UP: 'Food has been picked up',
    PickupStatus.DELIVERING: 'Food is being delivered',
    PickupStatus.DELIVERED: 'Food has been delivered',
    PickupStatus.COMPLETED: 'Pickup completed successfully',
}

# Radius within which a waypoint counts as reached.
WAYPOINT_REACHED_KM = 0.1


def _is_admin(user):
    return user.role == User.Role.ADMIN


def _lock_donation(pk):
    return FoodDonation.objects.select_for_update().get(pk=pk)


def _lock_pickup(pk):
    return PickupAssignment.objects.select_for_update().get(pk=pk)


def _estimate_route(pickup):
    """Fill in estimated distance/duration when both route ends are known."""
    if None in (pickup.pickup_latitude, pickup.pickup_longitude, pickup.delivery_latitude, pickup.delivery_longitude):
        return
    start = Location(pickup.pickup_latitude, pickup.pickup_longitude, location_type='pickup')
    destination = Location(pickup.delivery_latitude, pickup.delivery_longitude, location_type='delivery')
    waypoints = [Location(w.latitude, w.longitude, w.pk, 'waypoint') for w in pickup.waypoints.all()]
    pickup.estimated_distance, pickup.estimated_duration = get_route_optimizer().estimate_route(start, destination, waypoints)


def _cancel_open_pickups(donation, reason):
    """Cancel every unfinished pickup of ``donation`` and tell assigned volunteers."""
    pickups = list(donation.pickups.select_for_update().filter(status__in=OPEN_PICKUP_STATUSES))
    for pickup in pickups:
        pickup.status = PickupStatus.CANCELLED
        pickup.save(update_fields=['status', 'updated_at'])
        if pickup.volunteer_id:
            pickup.volunteer.refresh_trust_score()
            notify(
                pickup.volunteer,
                Notification.Type.ASSIGNMENT_CANCELLED,
                'Pickup Cancelled',
                reason,
                donation=donation,
                pickup=pickup,
            )
    return pickups


# --- DONATIONS ---

def create_donation(donor, data, request=None):
    with transaction.atomic():
        donation = FoodDonation(donor=donor, **data)
        donation.status = DonationStatus.PENDING
        donation.save()

        for admin in User.objects.filter(role=User.Role.ADMIN, is_active=True):
            notify(
                admin,
                Notification.Type.DONATION_CREATED,
                'New Donation',
                f"{donor.display_name} listed {donation.quantity} {donation.unit} of {donation.get_food_type_display()}",  # type: ignore
                priority=Notification.Priority.LOW,
                donation=donation,
            )

        record_audit(
            AuditLog.Action.DONATION_CREATED, donor, request,
            target_donation=donation,
            details={'food_type': donation.food_type, 'quantity': donation.quantity},
        )
    logger.info("Donation %s created by user %s", donation.pk, donor.pk)
    return donation


def update_donation(donation, actor, data, request=None):
    with transaction.atomic():
        donation = _lock_donation(donation.pk)

        if donation.donor_id != actor.pk and not _is_admin(actor):
            raise ApiError(http.HTTP_403_FORBIDDEN, 'Not authorized to update this donation')
        if donation.status in EDIT_LOCKED_STATUSES:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Cannot update donation that has been claimed')

        for field, value in data.items():
            setattr(donation, field, value)
        donation.save()

        record_audit(
            AuditLog.Action.DONATION_UPDATED, actor, request,
            target_donation=donation,
            details={'changes': data},
        )
    return donation


def cancel_donation(donation, actor, request=None):
    with transaction.atomic():
        donation = _lock_donation(donation.pk)

        if donation.donor_id != actor.pk and not _is_admin(actor):
            raise ApiError(http.HTTP_403_FORBIDDEN, 'Not authorized to delete this donation')
        if donation.status in CANCEL_LOCKED_STATUSES:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Cannot cancel donation in progress')

        donation.status = DonationStatus.CANCELLED
        donation.save(update_fields=['status', 'updated_at'])
        _cancel_open_pickups(donation, 'The donation for your pickup was cancelled by the donor')

        record_audit(AuditLog.Action.DONATION_CANCELLED, actor, request, target_donation=donation)
    logger.info("Donation %s cancelled by user %s", donation.pk, actor.pk)
    return donation


def verify_donation(donation, admin, approved, notes='', request=None):
    with transaction.atomic():
        donation = _lock_donation(donation.pk)

        donation.verification_notes = notes or ''
        if approved:
            donation.status = DonationStatus.AVAILABLE
            donation.verified_by = admin
            donation.verified_at = timezone.now()
        else:
            donation.status = DonationStatus.CANCELLED
        donation.save()
        if not approved:
            _cancel_open_pickups(donation, 'The donation for your pickup was not approved')

        if approved:
            notify(
                donation.donor,
                Notification.Type.DONATION_VERIFIED,
                'Donation Verified',
                'Your donation has been verified and is now visible to NGOs',
                donation=donation,
            )
        else:
            notify(
                donation.donor,
                Notification.Type.SYSTEM_ALERT,
                'Donation Not Approved',
                f"Your donation was not approved. Reason: {notes or 'Not specified'}",
                priority=Notification.Priority.HIGH,
                donation=donation,
            )

        record_audit(
            AuditLog.Action.DONATION_VERIFIED, admin, request,
            target_donation=donation,
            details={'approved': approved, 'notes': notes},
        )
    return donation


def set_donation_status(donation, actor, status, request=None):
    """Administrative override: any enumerated status is accepted."""
    if status not in DonationStatus.values:
        raise ApiError(http.HTTP_400_BAD_REQUEST, 'Invalid status')

    with transaction.atomic():
        donation = _lock_donation(donation.pk)
        previous = donation.status
        donation.status = status
        if status == DonationStatus.COMPLETED and donation.completed_at is None:
            donation.completed_at = timezone.now()
        donation.save()

        record_audit(
            AuditLog.Action.DONATION_UPDATED, actor, request,
            target_donation=donation,
            details={'status': status, 'previous_status': previous},
        )
    return donation


def claim_donation(donation, ngo, request=None):
    with transaction.atomic():
        donation = _lock_donation(donation.pk)

        if donation.status not in CLAIMABLE_STATUSES:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Donation is not available for claiming')
        if donation.is_expired:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Donation has expired')

        donation.status = DonationStatus.CLAIMED
        donation.claimed_by = ngo
        donation.claimed_at = timezone.now()
        donation.save()

        pickup = PickupAssignment.objects.create(
            donation=donation,
            donor=donation.donor,
            recipient=ngo,
            status=PickupStatus.ASSIGNED,
            scheduled_pickup_time=donation.available_from,
            pickup_latitude=donation.pickup_latitude,
            pickup_longitude=donation.pickup_longitude,
            delivery_latitude=ngo.latitude,
            delivery_longitude=ngo.longitude,
            pickup_instructions=donation.pickup_instructions,
        )

        notify(
            donation.donor,
            Notification.Type.DONATION_CLAIMED,
            'Donation Claimed',
            f"Your {donation.get_food_type_display()} donation has been claimed by {ngo.display_name}",  # type: ignore
            priority=Notification.Priority.HIGH,
            donation=donation,
            pickup=pickup,
        )

        record_audit(
            AuditLog.Action.DONATION_CLAIMED, ngo, request,
            target_donation=donation,
            target_pickup=pickup,
            details={'ngo_id': ngo.pk},
        )
    logger.info("Donation %s claimed by NGO %s", donation.pk, ngo.pk)
    return donation, pickup


# --- PICKUPS ---

def _start_pickup(pickup, volunteer):
    pickup.volunteer = volunteer
    pickup.status = PickupStatus.ACCEPTED
    _estimate_route(pickup)
    pickup.save()

    donation = _lock_donation(pickup.donation_id)
    donation.status = PICKUP_TO_DONATION_STATUS[PickupStatus.ACCEPTED]
    donation.save(update_fields=['status', 'updated_at'])
    return donation


def assign_volunteer(donation, volunteer, admin, scheduled_time=None, request=None):
    """Admin puts ``volunteer`` on the open pickup of a claimed donation."""
    if volunteer.role != User.Role.VOLUNTEER or not volunteer.is_active:
        raise ApiError(http.HTTP_400_BAD_REQUEST, 'Selected user is not an active volunteer')

    with transaction.atomic():
        donation = _lock_donation(donation.pk)
        if donation.status != DonationStatus.CLAIMED:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Donation must be claimed before assigning a volunteer')

        pickup = donation.pickups.select_for_update().filter(status=PickupStatus.ASSIGNED).first()
        if pickup is None:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'No open pickup for this donation')
        if pickup.volunteer_id:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Pickup already has a volunteer assigned')

        if scheduled_time:
            pickup.scheduled_pickup_time = scheduled_time
        donation = _start_pickup(pickup, volunteer)

        notify(
            volunteer,
            Notification.Type.PICKUP_ASSIGNED,
            'New Pickup Assignment',
            f"You have been assigned to pick up {donation.get_food_type_display()} from {donation.donor.display_name}",  # type: ignore
            priority=Notification.Priority.HIGH,
            donation=donation,
            pickup=pickup,
        )
        for party, title, message in (
            (pickup.donor, 'Volunteer Assigned', 'A volunteer has been assigned to pick up your donation'),
            (pickup.recipient, 'Pickup Scheduled', 'A volunteer will pick up your requested food'),
        ):
            notify(party, Notification.Type.PICKUP_ASSIGNED, title, message, donation=donation, pickup=pickup)

        record_audit(
            AuditLog.Action.PICKUP_ASSIGNED, admin, request,
            target_user=volunteer,
            target_donation=donation,
            target_pickup=pickup,
            details={'volunteer_id': volunteer.pk, 'scheduled_time': pickup.scheduled_pickup_time},
        )
    return pickup


def accept_pickup(pickup, volunteer, request=None):
    with transaction.atomic():
        pickup = _lock_pickup(pickup.pk)

        if pickup.volunteer_id:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Pickup already has a volunteer assigned')
        if pickup.status != PickupStatus.ASSIGNED:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Pickup is no longer open')

        donation = _start_pickup(pickup, volunteer)

        for party, title, message in (
            (pickup.donor, 'Volunteer Assigned', 'A volunteer has been assigned to pick up your donation'),
            (pickup.recipient, 'Pickup Scheduled', 'A volunteer will pick up your requested food'),
        ):
            notify(party, Notification.Type.PICKUP_ASSIGNED, title, message, donation=donation, pickup=pickup)

        record_audit(
            AuditLog.Action.PICKUP_ASSIGNED, volunteer, request,
            target_donation=donation,
            target_pickup=pickup,
        )
    logger.info("Pickup %s accepted by volunteer %s", pickup.pk, volunteer.pk)
    return pickup


def advance_pickup(pickup, actor, status, gps_location=None, notes=None, request=None, details=None):
    """
    Move a pickup one step along PICKUP_TRANSITIONS and mirror the step onto
    its donation. ``gps_location`` is a ``{'lat', 'lng'}`` dict.
    """
    if status not in VOLUNTEER_STATUS_UPDATES:
        raise ApiError(http.HTTP_400_BAD_REQUEST, 'Invalid status')

    with transaction.atomic():
        pickup = _lock_pickup(pickup.pk)

        if not _is_admin(actor) and pickup.volunteer_id != actor.pk:
            raise ApiError(http.HTTP_403_FORBIDDEN, 'Not authorized to update this pickup')
        if status not in PICKUP_TRANSITIONS.get(pickup.status, ()):
            raise ApiError(http.HTTP_400_BAD_REQUEST, f"Cannot transition from {pickup.status} to {status}")

        now = timezone.now()
        pickup.status = status
        if gps_location:
            pickup.current_latitude = gps_location['lat']
            pickup.current_longitude = gps_location['lng']
            pickup.location_updated_at = now
        if notes:
            pickup.notes = notes
        if status == PickupStatus.PICKED_UP:
            pickup.actual_pickup_time = now
        if status == PickupStatus.DELIVERED:
            pickup.actual_delivery_time = now
        pickup.save()

        donation = _lock_donation(pickup.donation_id)
        donation.status = PICKUP_TO_DONATION_STATUS[status]
        completed = status == PickupStatus.COMPLETED
        if completed:
            donation.completed_at = now
        donation.save()

        if completed and pickup.volunteer_id:
            User.objects.filter(pk=pickup.volunteer_id).update(completed_donations=F('completed_donations') + 1)
            pickup.volunteer.refresh_from_db()
            pickup.volunteer.refresh_trust_score()

        transaction.on_commit(partial(broadcast, pickup_group(pickup.pk), 'pickup-status-update', {
            'pickup_id': pickup.pk,
            'status': status,
            'location': gps_location,
        }))

        notification_type = Notification.Type.PICKUP_COMPLETED if completed else Notification.Type.PICKUP_UPDATE
        message = PICKUP_STATUS_MESSAGES[status]
        notify(pickup.donor, notification_type, 'Pickup Update', message, donation=donation, pickup=pickup)
        notify(pickup.recipient, notification_type, 'Delivery Update', message, donation=donation, pickup=pickup)

        record_audit(
            AuditLog.Action.PICKUP_COMPLETED if completed else AuditLog.Action.PICKUP_UPDATED,
            actor, request,
            target_donation=donation,
            target_pickup=pickup,
            details={'status': status, 'gps_location': gps_location, **(details or {})},
        )
    return pickup


def complete_pickup(pickup, actor, notes=None, actual_quantity=None, request=None):
    """Walk a delivering or delivered pickup through to completed."""
    if pickup.status == PickupStatus.DELIVERING:
        steps = [PickupStatus.DELIVERED, PickupStatus.COMPLETED]
    elif pickup.status == PickupStatus.DELIVERED:
        steps = [PickupStatus.COMPLETED]
    else:
        raise ApiError(http.HTTP_400_BAD_REQUEST, f"Cannot complete a pickup that is {pickup.status}")

    with transaction.atomic():
        for step in steps:
            final = step == PickupStatus.COMPLETED
            pickup = advance_pickup(
                pickup, actor, step,
                notes=notes if final else None,
                request=request,
                details={'actual_quantity': actual_quantity} if final and actual_quantity is not None else None,
            )
    return pickup


def update_location(pickup, volunteer, lat, lng, request=None):
    with transaction.atomic():
        pickup = _lock_pickup(pickup.pk)

        if pickup.volunteer_id != volunteer.pk:
            raise ApiError(http.HTTP_403_FORBIDDEN, 'Not authorized')

        now = timezone.now()
        pickup.current_latitude = lat
        pickup.current_longitude = lng
        pickup.location_updated_at = now
        pickup.save(update_fields=['current_latitude', 'current_longitude', 'location_updated_at', 'updated_at'])

        for waypoint in pickup.waypoints.filter(reached_at__isnull=True):
            if geodesic((lat, lng), (waypoint.latitude, waypoint.longitude)).km <= WAYPOINT_REACHED_KM:
                waypoint.reached_at = now
                waypoint.save(update_fields=['reached_at'])
                break

        transaction.on_commit(partial(
            broadcast, pickup_group(pickup.pk), 'volunteer-location', {'pickup_id': pickup.pk, 'lat': lat, 'lng': lng},
        ))
    return pickup


def record_verification(pickup, actor, stage, data, request=None):
    """Store the photo/signature evidence for the pickup or delivery handover."""
    with transaction.atomic():
        pickup = _lock_pickup(pickup.pk)

        if not _is_admin(actor) and pickup.volunteer_id != actor.pk:
            raise ApiError(http.HTTP_403_FORBIDDEN, 'Not authorized to verify this pickup')
        if pickup.status not in VERIFICATION_STAGE_STATUSES[stage]:
            raise ApiError(http.HTTP_400_BAD_REQUEST, f"Cannot record {stage} verification while pickup is {pickup.status}")

        values = dict(data)
        if stage != HandoverVerification.Stage.DELIVERY:
            values.pop('received_by', None)
        values['verified_at'] = timezone.now()
        verification, _ = HandoverVerification.objects.update_or_create(pickup=pickup, stage=stage, defaults=values)

        record_audit(
            AuditLog.Action.PICKUP_UPDATED, actor, request,
            target_donation=pickup.donation,
            target_pickup=pickup,
            details={'verification': stage, 'condition': verification.condition},
        )
    return verification


def rate_volunteer(pickup, actor, rating, comments='', request=None):
    with transaction.atomic():
        pickup = _lock_pickup(pickup.pk)

        if actor.pk == pickup.donor_id:
            pickup.rating_by_donor = rating
        elif actor.pk == pickup.recipient_id:
            pickup.rating_by_recipient = rating
        else:
            raise ApiError(http.HTTP_403_FORBIDDEN, 'Only the donor or recipient can rate this pickup')

        if pickup.status not in RATEABLE_PICKUP_STATUSES:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Pickup can only be rated after delivery')
        if not pickup.volunteer_id:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Pickup has no volunteer to rate')

        if comments:
            pickup.rating_comments = comments
        pickup.save()
        pickup.volunteer.refresh_trust_score()

        record_audit(
            AuditLog.Action.PICKUP_UPDATED, actor, request,
            target_user=pickup.volunteer,
            target_pickup=pickup,
            details={'rating': rating},
        )
    return pickup


def cancel_pickup(pickup, admin, request=None):
    with transaction.atomic():
        pickup = _lock_pickup(pickup.pk)

        if pickup.status in (PickupStatus.DELIVERED, PickupStatus.COMPLETED):
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Cannot cancel completed pickup')
        if pickup.status == PickupStatus.CANCELLED:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Pickup is already cancelled')

        pickup.status = PickupStatus.CANCELLED
        pickup.save(update_fields=['status', 'updated_at'])

        donation = _lock_donation(pickup.donation_id)
        donation.status = DonationStatus.AVAILABLE
        donation.claimed_by = None
        donation.claimed_at = None
        donation.save()

        if pickup.volunteer_id:
            pickup.volunteer.refresh_trust_score()
            notify(
                pickup.volunteer,
                Notification.Type.ASSIGNMENT_CANCELLED,
                'Pickup Cancelled',
                'Your pickup assignment has been cancelled',
                donation=donation,
            )
        notify(
            pickup.donor,
            Notification.Type.SYSTEM_ALERT,
            'Pickup Cancelled',
            'The pickup for your donation has been cancelled',
            donation=donation,
        )

        record_audit(
            AuditLog.Action.PICKUP_CANCELLED, admin, request,
            target_donation=donation,
            target_pickup=pickup,
        )
    logger.info("Pickup %s cancelled by user %s", pickup.pk, admin.pk)
    return pickup


def submit_feedback(donation, ngo, rating, comment='', good_condition=None, request=None):
    with transaction.atomic():
        donation = _lock_donation(donation.pk)

        if donation.claimed_by_id != ngo.pk:
            raise ApiError(http.HTTP_403_FORBIDDEN, 'Only the claiming NGO can leave feedback')
        if donation.status not in FEEDBACK_STATUSES:
            raise ApiError(http.HTTP_400_BAD_REQUEST, 'Feedback can only be given after delivery')

        donation.feedback_rating = rating
        donation.feedback_comment = comment or ''
        donation.received_in_good_condition = good_condition
        donation.save()

        record_audit(
            AuditLog.Action.DONATION_UPDATED, ngo, request,
            target_donation=donation,
            details={'feedback_rating': rating, 'received_in_good_condition': good_condition},
        )
    return donation


def expire_overdue_donations(now=None):
    """Mark every open donation past its expiry date as expired. Returns the count."""
    now = now or timezone.now()
    overdue = FoodDonation.objects.filter(status__in=EXPIRABLE_STATUSES, expiry_date__lt=now).values_list('pk', flat=True)

    expired = 0
    for pk in list(overdue):
        with transaction.atomic():
            donation = _lock_donation(pk)
            if donation.status not in EXPIRABLE_STATUSES:
                continue
            donation.status = DonationStatus.EXPIRED
            donation.save()
            _cancel_open_pickups(donation, 'The donation for your pickup has expired')

            notify(
                donation.donor,
                Notification.Type.DONATION_EXPIRED,
                'Donation Expired',
                f"Your {donation.get_food_type_display()} donation expired before it was collected",  # type: ignore
                donation=donation,
            )
            record_audit(
                AuditLog.Action.SYSTEM_EVENT,
                target_donation=donation,
                details={'event': 'donation_expired', 'expiry_date': donation.expiry_date},
            )
        expired += 1

    if expired:
        logger.info("Expired %d overdue donations", expired)
    return expired
