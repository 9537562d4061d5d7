# foodlink/views/donation_views.py
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from .. import lifecycle
from ..exceptions import ApiError
from ..models import FoodDonation, User
from ..permissions import IsAdmin, role_required
from ..serializers import (
    DonationSerializer,
    DonationStatusSerializer,
    DonationVerifySerializer,
    FeedbackSerializer,
    PickupSerializer,
)
from ..utils.matching import match_ngos
from .helpers import ok, paginated, query_flag


def donation_queryset():
    return FoodDonation.objects.select_related('donor', 'claimed_by')


@api_view(['GET', 'POST'])
def donation_list(request):
    if request.method == 'POST':
        return create_donation(request)

    user = request.user
    donations = donation_queryset()

    if query_flag(request, 'my_donations') and user.role == User.Role.DONOR:
        donations = donations.filter(donor=user)
    elif query_flag(request, 'my_claims') and user.role == User.Role.NGO:
        donations = donations.filter(claimed_by=user)
    elif user.role == User.Role.NGO:
        # NGOs browse what they can still claim
        donations = donations.filter(status__in=lifecycle.CLAIMABLE_STATUSES, expiry_date__gt=timezone.now())

    params = request.query_params
    if params.get('status'):
        donations = donations.filter(status=params['status'])
    if params.get('food_type'):
        donations = donations.filter(food_type=params['food_type'])
    if params.get('urgency'):
        donations = donations.filter(urgency_level=params['urgency'])

    return paginated(request, donations, DonationSerializer)


def create_donation(request):
    if request.user.role not in (User.Role.DONOR, User.Role.ADMIN):
        raise ApiError(status.HTTP_403_FORBIDDEN, f"Role {request.user.role} is not authorized to access this route")
    serializer = DonationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    donation = lifecycle.create_donation(request.user, serializer.validated_data, request=request)
    return ok(DonationSerializer(donation).data, status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([role_required(User.Role.DONOR)])
def my_donations(request):
    donations = donation_queryset().filter(donor=request.user)
    if request.query_params.get('status'):
        donations = donations.filter(status=request.query_params['status'])
    return paginated(request, donations, DonationSerializer)


@api_view(['GET'])
@permission_classes([IsAdmin])
def donation_match(request, pk):
    donation = get_object_or_404(FoodDonation, pk=pk)
    return ok({
        'donation': {
            'id': donation.pk,
            'food_type': donation.food_type,
            'quantity': donation.quantity,
            'urgency_level': donation.urgency_level,
        },
        'matches': match_ngos(donation),
    })


@api_view(['GET', 'PUT', 'DELETE'])
def donation_detail(request, pk):
    donation = get_object_or_404(donation_queryset(), pk=pk)

    if request.method == 'GET':
        return ok(DonationSerializer(donation).data)

    if request.method == 'PUT':
        serializer = DonationSerializer(donation, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        donation = lifecycle.update_donation(donation, request.user, serializer.validated_data, request=request)
        return ok(DonationSerializer(donation).data)

    lifecycle.cancel_donation(donation, request.user, request=request)
    return ok(message='Donation cancelled successfully')


@api_view(['POST'])
@permission_classes([role_required(User.Role.NGO)])
def claim_donation(request, pk):
    donation = get_object_or_404(FoodDonation, pk=pk)
    donation, pickup = lifecycle.claim_donation(donation, request.user, request=request)
    return ok(
        {'donation': DonationSerializer(donation).data, 'pickup': PickupSerializer(pickup).data},
        message='Donation claimed successfully',
    )


@api_view(['POST', 'PUT'])
@permission_classes([IsAdmin])
def verify_donation(request, pk):
    serializer = DonationVerifySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    approved = serializer.validated_data['approved']

    donation = get_object_or_404(FoodDonation, pk=pk)
    donation = lifecycle.verify_donation(
        donation, request.user, approved, serializer.validated_data['notes'], request=request,
    )
    return ok(
        DonationSerializer(donation).data,
        message='Donation verified' if approved else 'Donation rejected',
    )


@api_view(['PUT'])
@permission_classes([IsAdmin])
def donation_status(request, pk):
    serializer = DonationStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    donation = get_object_or_404(FoodDonation, pk=pk)
    donation = lifecycle.set_donation_status(donation, request.user, serializer.validated_data['status'], request=request)
    return ok(DonationSerializer(donation).data, message='Donation status updated')


@api_view(['POST'])
@permission_classes([role_required(User.Role.NGO)])
def donation_feedback(request, pk):
    serializer = FeedbackSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    donation = get_object_or_404(FoodDonation, pk=pk)
    donation = lifecycle.submit_feedback(
        donation, request.user, data['rating'], data['comment'], data['received_in_good_condition'],
        request=request,
    )
    return ok(DonationSerializer(donation).data, message='Feedback submitted')
