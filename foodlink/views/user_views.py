# foodlink/views/user_views.py
"""
Admin-only user management: listing, editing, deactivation and account
verification.
"""

from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes

from ..exceptions import ApiError
from ..models import AuditLog, Notification, User
from ..permissions import IsAdmin
from ..serializers import AdminUserSerializer, AdminUserUpdateSerializer, UserVerifySerializer
from ..utils.activity import notify, record_audit
from .helpers import ok, paginated

PAST_TENSE = {'approve': 'verified', 'reject': 'rejected', 'revoke': 'revoked'}

VERIFY_OUTCOMES = {
    'approve': (
        AuditLog.Action.USER_VERIFIED,
        'Account Verified',
        'Your account has been verified! You now have full access to the platform.',
    ),
    'reject': (
        AuditLog.Action.USER_REJECTED,
        'Verification Update',
        'Your verification request has been rejected. Reason: {reason}',
    ),
    'revoke': (
        AuditLog.Action.VERIFICATION_REVOKED,
        'Verification Update',
        'Your verification has been revoked. Reason: {reason}',
    ),
}


@api_view(['GET'])
@permission_classes([IsAdmin])
def user_list(request):
    users = User.objects.order_by('-created_at')

    role = request.query_params.get('role')
    if role and role != 'all':
        users = users.filter(role=role)

    user_status = request.query_params.get('status')
    if user_status == 'verified':
        users = users.filter(is_verified=True)
    elif user_status == 'pending':
        users = users.filter(is_verified=False)
    elif user_status == 'inactive':
        users = users.filter(is_active=False)

    search = request.query_params.get('search')
    if search:
        users = users.filter(
            Q(name__icontains=search) | Q(email__icontains=search) | Q(organization__icontains=search)
        )

    return paginated(request, users, AdminUserSerializer)


@api_view(['GET'])
@permission_classes([IsAdmin])
def pending_verifications(request):
    users = User.objects.filter(is_verified=False, is_active=True).order_by('-created_at')
    data = AdminUserSerializer(users, many=True).data
    return ok(data, count=len(data))


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdmin])
def user_detail(request, pk):
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        return ok(AdminUserSerializer(user).data)

    if request.method == 'PUT':
        serializer = AdminUserUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            user = serializer.save()
            if not user.is_active:
                Token.objects.filter(user=user).delete()
            record_audit(
                AuditLog.Action.USER_UPDATED, request.user, request,
                target_user=user,
                details={'fields': sorted(serializer.validated_data)},
            )
        return ok(AdminUserSerializer(user).data)

    if user.pk == request.user.pk:
        raise ApiError(status.HTTP_400_BAD_REQUEST, 'Cannot deactivate your own account')

    with transaction.atomic():
        user.is_active = False
        user.save(update_fields=['is_active', 'updated_at'])
        Token.objects.filter(user=user).delete()
        record_audit(AuditLog.Action.USER_DEACTIVATED, request.user, request, target_user=user)
    return ok(message='User deactivated successfully')


@api_view(['POST', 'PUT'])
@permission_classes([IsAdmin])
def verify_user(request, pk):
    serializer = UserVerifySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    action = serializer.validated_data['action']
    reason = serializer.validated_data['reason']
    notes = serializer.validated_data['notes']

    user = get_object_or_404(User, pk=pk)
    audit_action, title, message = VERIFY_OUTCOMES[action]

    with transaction.atomic():
        if action == 'approve':
            user.is_verified = True
            user.verification_date = timezone.now()
            user.verified_by = request.user
        elif action == 'reject':
            user.is_verified = False
            user.is_active = False
        else:
            user.is_verified = False
        if notes:
            user.admin_notes = notes
        user.save()

        notify(
            user,
            Notification.Type.VERIFICATION_APPROVED if action == 'approve' else Notification.Type.VERIFICATION_REJECTED,
            title,
            message.format(reason=reason or 'Not specified'),
            priority=Notification.Priority.HIGH,
        )
        record_audit(
            audit_action, request.user, request,
            target_user=user,
            details={'action': action, 'reason': reason, 'notes': notes},
        )

    return ok(
        {'id': user.pk, 'name': user.name, 'email': user.email, 'is_verified': user.is_verified},
        message=f"User {PAST_TENSE[action]} successfully",
    )
