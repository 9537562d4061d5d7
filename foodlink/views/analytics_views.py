# foodlink/views/analytics_views.py
"""
Platform analytics for admins, the audit trail browser, and per-role
dashboard counters.
"""

from datetime import datetime, time, timedelta

from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from .. import lifecycle
from ..exceptions import ApiError
from ..models import AuditLog, FoodDonation, Notification, PickupAssignment, User
from ..permissions import IsAdmin
from ..serializers import AuditLogSerializer
from ..utils.impact import DELIVERED_STATUSES, environmental_impact
from .helpers import ok, paginated, query_number

ACTIVE_DONATION_STATUSES = [
    FoodDonation.Status.PENDING,
    FoodDonation.Status.VERIFIED,
    FoodDonation.Status.AVAILABLE,
    FoodDonation.Status.CLAIMED,
    FoodDonation.Status.ASSIGNED,
    FoodDonation.Status.IN_TRANSIT,
]


def counts_by(queryset, field):
    return {row[field]: row['count'] for row in queryset.values(field).annotate(count=Count('id')).order_by()}


def parse_moment(raw, end_of_day=False):
    """Accept an ISO datetime or a bare date."""
    moment = parse_datetime(raw)
    if moment is None:
        day = parse_date(raw)
        if day is None:
            raise ApiError(status.HTTP_400_BAD_REQUEST, f"Invalid date: {raw}")
        moment = timezone.make_aware(datetime.combine(day, time.max if end_of_day else time.min))
    elif timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


def average_pickup_minutes():
    timings = PickupAssignment.objects.filter(
        actual_pickup_time__isnull=False, actual_delivery_time__isnull=False,
    ).values_list('actual_pickup_time', 'actual_delivery_time')
    durations = [(delivered - picked).total_seconds() / 60 for picked, delivered in timings]
    return round(sum(durations) / len(durations)) if durations else None


@api_view(['GET'])
@permission_classes([IsAdmin])
def analytics(request):
    period = query_number(request, 'period', default=30, cast=int)
    if period < 1:
        raise ApiError(status.HTTP_400_BAD_REQUEST, 'period must be a positive number of days')
    start_date = timezone.now() - timedelta(days=period)

    users = User.objects.all()
    donations = FoodDonation.objects.all()
    delivered = donations.filter(status__in=DELIVERED_STATUSES)
    completed_quantity = delivered.aggregate(total=Sum('quantity'))['total'] or 0

    by_type = list(
        donations.values('food_type')
        .annotate(count=Count('id'), total_quantity=Sum('quantity'))
        .order_by('-count')
    )
    trends = [
        {'date': row['date'], 'count': row['count'], 'quantity': row['quantity']}
        for row in donations.filter(created_at__gte=start_date)
        .annotate(date=TruncDate('created_at'))
        .values('date')
        .annotate(count=Count('id'), quantity=Sum('quantity'))
        .order_by('date')
    ]
    top_donors = [
        {
            'id': row['donor'],
            'name': row['donor__name'],
            'organization': row['donor__organization'],
            'trust_badge': row['donor__trust_badge'],
            'donation_count': row['donation_count'],
            'total_quantity': row['total_quantity'],
        }
        for row in delivered.values('donor', 'donor__name', 'donor__organization', 'donor__trust_badge')
        .annotate(donation_count=Count('id'), total_quantity=Sum('quantity'))
        .order_by('-donation_count')[:10]
    ]
    top_volunteers = [
        {
            'id': row['volunteer'],
            'name': row['volunteer__name'],
            'trust_badge': row['volunteer__trust_badge'],
            'pickup_count': row['pickup_count'],
        }
        for row in PickupAssignment.objects.filter(status=PickupAssignment.Status.COMPLETED, volunteer__isnull=False)
        .values('volunteer', 'volunteer__name', 'volunteer__trust_badge')
        .annotate(pickup_count=Count('id'))
        .order_by('-pickup_count')[:10]
    ]

    return ok({
        'users': {
            'total': users.count(),
            'active': users.filter(is_active=True).count(),
            'verified': users.filter(is_verified=True).count(),
            'by_role': counts_by(users, 'role'),
            'new_in_period': users.filter(created_at__gte=start_date).count(),
        },
        'donations': {
            'total': donations.count(),
            'by_status': counts_by(donations, 'status'),
            'by_type': by_type,
            'in_period': donations.filter(created_at__gte=start_date).count(),
            'total_quantity': completed_quantity,
        },
        'pickups': {
            'total': PickupAssignment.objects.count(),
            'by_status': counts_by(PickupAssignment.objects.all(), 'status'),
            'average_time_minutes': average_pickup_minutes(),
        },
        'trends': trends,
        'top_donors': top_donors,
        'top_volunteers': top_volunteers,
        'environmental_impact': environmental_impact(completed_quantity),
        'period': period,
    })


@api_view(['GET'])
@permission_classes([IsAdmin])
def audit_logs(request):
    logs = AuditLog.objects.select_related('performed_by', 'target_user')
    params = request.query_params

    if params.get('action'):
        logs = logs.filter(action=params['action'])
    if params.get('user_id'):
        user_id = query_number(request, 'user_id', cast=int)
        logs = logs.filter(Q(performed_by_id=user_id) | Q(target_user_id=user_id))
    if params.get('start_date'):
        logs = logs.filter(created_at__gte=parse_moment(params['start_date']))
    if params.get('end_date'):
        logs = logs.filter(created_at__lte=parse_moment(params['end_date'], end_of_day=True))

    stats = [
        {'action': row['action'], 'count': row['count']}
        for row in AuditLog.objects.values('action').annotate(count=Count('id')).order_by('-count')
    ]
    return paginated(request, logs, AuditLogSerializer, stats=stats)


def donor_dashboard(user):
    donations = FoodDonation.objects.filter(donor=user)
    delivered = donations.filter(status__in=DELIVERED_STATUSES)
    return {
        'total_donations': donations.count(),
        'active_donations': donations.filter(status__in=ACTIVE_DONATION_STATUSES).count(),
        'completed_donations': delivered.count(),
        'total_quantity': delivered.aggregate(total=Sum('quantity'))['total'] or 0,
    }


def ngo_dashboard(user):
    claims = FoodDonation.objects.filter(claimed_by=user)
    return {
        'available_donations': FoodDonation.objects.filter(
            status__in=lifecycle.CLAIMABLE_STATUSES, expiry_date__gt=timezone.now(),
        ).count(),
        'total_claims': claims.count(),
        'received_donations': claims.filter(status__in=DELIVERED_STATUSES).count(),
        'pending_pickups': PickupAssignment.objects.filter(
            recipient=user, status__in=lifecycle.OPEN_PICKUP_STATUSES,
        ).count(),
    }


def volunteer_dashboard(user):
    return {
        'available_pickups': PickupAssignment.objects.filter(
            volunteer__isnull=True, status=PickupAssignment.Status.ASSIGNED,
        ).count(),
        'active_pickups': PickupAssignment.objects.filter(
            volunteer=user, status__in=lifecycle.OPEN_PICKUP_STATUSES,
        ).count(),
        'completed_pickups': user.completed_donations,
        'trust_score': user.trust_score,
    }


def admin_dashboard(user):
    return {
        'total_users': User.objects.count(),
        'pending_verifications': User.objects.filter(is_verified=False, is_active=True).count(),
        'pending_donations': FoodDonation.objects.filter(status=FoodDonation.Status.PENDING).count(),
        'active_pickups': PickupAssignment.objects.filter(status__in=lifecycle.OPEN_PICKUP_STATUSES).count(),
    }


DASHBOARDS = {
    User.Role.DONOR: donor_dashboard,
    User.Role.NGO: ngo_dashboard,
    User.Role.VOLUNTEER: volunteer_dashboard,
    User.Role.ADMIN: admin_dashboard,
}


@api_view(['GET'])
def dashboard(request):
    user = request.user
    data = DASHBOARDS[user.role](user)
    data['unread_notifications'] = Notification.objects.filter(user=user, is_read=False).count()
    return ok(data, role=user.role)
