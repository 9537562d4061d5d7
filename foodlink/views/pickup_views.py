# foodlink/views/pickup_views.py
"""
Pickup assignment endpoints: listing, volunteer self-assignment, status
progression, live location and handover evidence.
"""

from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from .. import lifecycle
from ..exceptions import ApiError
from ..models import PickupAssignment, User
from ..permissions import IsAdmin, role_required
from ..serializers import (
    HandoverVerificationSerializer,
    LatLngSerializer,
    PickupCompleteSerializer,
    PickupCreateSerializer,
    PickupSerializer,
    PickupStatusSerializer,
    RatingSerializer,
)
from ..utils.matching import available_volunteers
from ..utils.route_optimization import Location, RouteOptimizer
from .helpers import ok, paginated, query_number

VolunteerOrAdmin = role_required(User.Role.VOLUNTEER, User.Role.ADMIN)
DonorOrRecipient = role_required(User.Role.DONOR, User.Role.NGO)

ROLE_SCOPES = {
    User.Role.VOLUNTEER: 'volunteer',
    User.Role.DONOR: 'donor',
    User.Role.NGO: 'recipient',
}


def pickup_queryset():
    return (
        PickupAssignment.objects
        .select_related('donation', 'donor', 'recipient', 'volunteer')
        .prefetch_related('waypoints', 'verifications')
    )


@api_view(['GET', 'POST'])
def pickup_list(request):
    if request.method == 'POST':
        return create_pickup(request)

    pickups = pickup_queryset()
    scope = ROLE_SCOPES.get(request.user.role)
    if scope:
        pickups = pickups.filter(**{scope: request.user})
    if request.query_params.get('status'):
        pickups = pickups.filter(status=request.query_params['status'])

    return paginated(request, pickups, PickupSerializer)


def create_pickup(request):
    if request.user.role != User.Role.ADMIN:
        raise ApiError(status.HTTP_403_FORBIDDEN, f"Role {request.user.role} is not authorized to access this route")

    serializer = PickupCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    pickup = lifecycle.assign_volunteer(
        data['donation'], data['volunteer'], request.user,
        scheduled_time=data.get('scheduled_time'),
        request=request,
    )
    return ok(PickupSerializer(pickup).data, message='Volunteer assigned', status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([VolunteerOrAdmin])
def available_pickups(request):
    pickups = list(
        pickup_queryset()
        .filter(volunteer__isnull=True, status=PickupAssignment.Status.ASSIGNED)
        .order_by('scheduled_pickup_time')
    )

    lat = query_number(request, 'lat')
    lng = query_number(request, 'lng')
    if lat is None or lng is None:
        return ok(PickupSerializer(pickups, many=True).data)

    position = LatLngSerializer(data={'lat': lat, 'lng': lng})
    position.is_valid(raise_exception=True)

    origin = Location(position.validated_data['lat'], position.validated_data['lng'], location_type='volunteer')
    candidates = [
        Location(p.pickup_latitude, p.pickup_longitude, p.pk, 'pickup')
        for p in pickups
    ]
    by_id = {p.pk: p for p in pickups}
    data = []
    for location, distance in RouteOptimizer.sort_by_distance(origin, candidates):
        item = PickupSerializer(by_id[location.id]).data
        item['distance_km'] = round(distance, 2) if distance != float('inf') else None
        data.append(item)
    return ok(data)


@api_view(['GET'])
@permission_classes([IsAdmin])
def volunteers_available(request):
    raw_date = request.query_params.get('date')
    day = parse_date(raw_date) if raw_date else timezone.localdate()
    if day is None:
        raise ApiError(status.HTTP_400_BAD_REQUEST, 'Invalid date')

    target_day, volunteers = available_volunteers(day)
    return ok(volunteers, target_day=target_day)


@api_view(['GET', 'DELETE'])
def pickup_detail(request, pk):
    pickup = get_object_or_404(pickup_queryset(), pk=pk)

    if request.method == 'DELETE':
        if request.user.role != User.Role.ADMIN:
            raise ApiError(status.HTTP_403_FORBIDDEN, f"Role {request.user.role} is not authorized to access this route")
        lifecycle.cancel_pickup(pickup, request.user, request=request)
        return ok(message='Pickup cancelled successfully')

    if request.user.role != User.Role.ADMIN and not pickup.is_party(request.user):
        raise ApiError(status.HTTP_403_FORBIDDEN, 'Not authorized to view this pickup')
    return ok(PickupSerializer(pickup).data)


@api_view(['POST'])
@permission_classes([role_required(User.Role.VOLUNTEER)])
def accept_pickup(request, pk):
    pickup = get_object_or_404(PickupAssignment, pk=pk)
    pickup = lifecycle.accept_pickup(pickup, request.user, request=request)
    return ok(PickupSerializer(pickup).data, message='Pickup accepted successfully')


@api_view(['PUT', 'PATCH'])
@permission_classes([VolunteerOrAdmin])
def pickup_status(request, pk):
    serializer = PickupStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    pickup = get_object_or_404(PickupAssignment, pk=pk)
    gps_location = dict(data['gps_location']) if data.get('gps_location') else None
    pickup = lifecycle.advance_pickup(
        pickup, request.user, data['status'],
        gps_location=gps_location,
        notes=data.get('notes'),
        request=request,
    )
    return ok(PickupSerializer(pickup).data)


@api_view(['PUT', 'POST'])
@permission_classes([role_required(User.Role.VOLUNTEER)])
def pickup_location(request, pk):
    serializer = LatLngSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    pickup = get_object_or_404(PickupAssignment, pk=pk)
    lifecycle.update_location(
        pickup, request.user,
        serializer.validated_data['lat'], serializer.validated_data['lng'],
        request=request,
    )
    return ok(message='Location updated')


@api_view(['PUT'])
@permission_classes([VolunteerOrAdmin])
def complete_pickup(request, pk):
    serializer = PickupCompleteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    pickup = get_object_or_404(PickupAssignment, pk=pk)
    pickup = lifecycle.complete_pickup(
        pickup, request.user,
        notes=serializer.validated_data.get('notes'),
        actual_quantity=serializer.validated_data.get('actual_quantity'),
        request=request,
    )
    return ok(PickupSerializer(pickup).data, message='Pickup completed successfully')


@api_view(['POST'])
@permission_classes([VolunteerOrAdmin])
def pickup_verification(request, pk):
    serializer = HandoverVerificationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    stage = data.pop('stage')

    pickup = get_object_or_404(PickupAssignment, pk=pk)
    verification = lifecycle.record_verification(pickup, request.user, stage, data, request=request)
    return ok(HandoverVerificationSerializer(verification).data, status_code=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([DonorOrRecipient])
def rate_pickup(request, pk):
    serializer = RatingSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    pickup = get_object_or_404(PickupAssignment, pk=pk)
    pickup = lifecycle.rate_volunteer(
        pickup, request.user,
        serializer.validated_data['rating'], serializer.validated_data['comments'],
        request=request,
    )
    return ok(PickupSerializer(pickup).data, message='Rating submitted')
