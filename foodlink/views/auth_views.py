# foodlink/views/auth_views.py
import logging

from django.db import transaction
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny

from ..authentication import issue_token
from ..exceptions import ApiError
from ..models import AuditLog, User
from ..serializers import (
    LoginSerializer,
    PasswordChangeSerializer,
    ProfileSerializer,
    RegisterSerializer,
    UserSerializer,
)
from ..utils.activity import record_audit
from .helpers import ok

logger = logging.getLogger(__name__)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health(request):
    return ok(status='ok', timestamp=timezone.now())


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def register(request):
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    with transaction.atomic():
        user = serializer.save()
        record_audit(
            AuditLog.Action.USER_REGISTERED, user, request,
            target_user=user,
            details={'role': user.role, 'email': user.email},
        )
        token = issue_token(user)

    logger.info("Registered %s user %s", user.role, user.email)
    return ok({'user': UserSerializer(user).data, 'token': token.key}, status_code=status.HTTP_201_CREATED)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    email = serializer.validated_data['email'].strip().lower()

    user = User.objects.filter(email=email).first()
    if user is None:
        raise ApiError(status.HTTP_401_UNAUTHORIZED, 'Invalid email or password')
    if not user.is_active:
        raise ApiError(status.HTTP_401_UNAUTHORIZED, 'Your account has been deactivated')
    if not user.compare_password(serializer.validated_data['password']):
        raise ApiError(status.HTTP_401_UNAUTHORIZED, 'Invalid email or password')

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    record_audit(AuditLog.Action.USER_LOGIN, user, request, details={'email': email})
    token = issue_token(user)

    return ok({'user': UserSerializer(user).data, 'token': token.key})


@api_view(['POST'])
def logout(request):
    if request.auth is not None:
        request.auth.delete()
    record_audit(AuditLog.Action.USER_LOGOUT, request.user, request)
    return ok(message='Logged out successfully')


@api_view(['GET'])
def me(request):
    return ok(UserSerializer(request.user).data)


@api_view(['PUT'])
def update_profile(request):
    serializer = ProfileSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    record_audit(
        AuditLog.Action.USER_UPDATED, user, request,
        target_user=user,
        details={'fields': sorted(serializer.validated_data)},
    )
    return ok(UserSerializer(user).data)


@api_view(['PUT'])
def change_password(request):
    serializer = PasswordChangeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = request.user
    if not user.compare_password(serializer.validated_data['current_password']):
        raise ApiError(status.HTTP_400_BAD_REQUEST, 'Current password is incorrect')

    user.set_password(serializer.validated_data['new_password'])
    user.save()
    token = issue_token(user)
    record_audit(
        AuditLog.Action.USER_UPDATED, user, request,
        target_user=user,
        details={'password_changed': True},
    )
    return ok({'token': token.key}, message='Password updated successfully')
