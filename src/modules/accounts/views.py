"""Account API views.

Authentication endpoints are plain ``APIView``s; the admin user directory
and the address book are ``GenericViewSet``s backed by the services.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.accounts.dtos import (
    AddressDTO,
    AdminResetPasswordDTO,
    ChangePasswordDTO,
    LoginDTO,
    RegisterUserDTO,
    UpdateUserDTO,
)
from modules.accounts.exceptions import (
    AddressNotFound,
    IncorrectPassword,
    InvalidCredentials,
    UserAlreadyExists,
    UserNotFound,
)
from modules.accounts.filters import UserFilter
from modules.accounts.models import Session, User
from modules.accounts.repositories.django_repository import (
    AddressDjangoRepository,
    SessionDjangoRepository,
    UserDjangoRepository,
)
from modules.accounts.serializers import AddressSerializer, UserSerializer
from modules.accounts.services import AddressService, AuthService, UserService
from modules.core.dtos import parse_dto
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsAdmin
from modules.core.validators import UUID_PATTERN


def _auth_service() -> AuthService:
    return AuthService(UserDjangoRepository(), SessionDjangoRepository())


def _current_session(request: Request) -> Session | None:
    return request.auth if isinstance(request.auth, Session) else None


def _client_meta(request: Request) -> dict:
    return {
        "user_agent": request.META.get("HTTP_USER_AGENT", ""),
        "ip_address": request.META.get("REMOTE_ADDR"),
    }


class RegisterView(APIView):
    """POST /api/users/register"""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    throttle_scope = "login"

    def post(self, request: Request) -> Response:
        dto = parse_dto(RegisterUserDTO, request.data)
        try:
            user = _auth_service().register(dto)
        except UserAlreadyExists as exc:
            return domain_error_response(exc)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """POST /api/users/login"""

    permission_classes = [AllowAny]
    authentication_classes: list = []
    throttle_scope = "login"
    back_office = False

    def post(self, request: Request) -> Response:
        dto = parse_dto(LoginDTO, request.data)
        try:
            result = _auth_service().login(
                dto, back_office=self.back_office, **_client_meta(request)
            )
        except InvalidCredentials as exc:
            return domain_error_response(exc)
        return Response(
            {
                "token": result.token,
                "token_type": "Bearer",
                "expires_at": result.expires_at,
                "user": UserSerializer(result.user).data,
            }
        )


class AdminLoginView(LoginView):
    """POST /api/users/admin-login"""

    back_office = True


class LogoutView(APIView):
    def post(self, request: Request) -> Response:
        if isinstance(request.auth, Session):
            _auth_service().logout(request.auth)
        return Response({"message": "Logged out."})


class MeView(APIView):
    """GET/PATCH /api/users/me"""

    def get(self, request: Request) -> Response:
        return Response(UserSerializer(request.user).data)

    def patch(self, request: Request) -> Response:
        dto = parse_dto(UpdateUserDTO, request.data)
        try:
            user = UserService(UserDjangoRepository()).update_user(str(request.user.id), dto)
        except UserAlreadyExists as exc:
            return domain_error_response(exc)
        return Response(UserSerializer(user).data)


class ChangePasswordView(APIView):
    def post(self, request: Request) -> Response:
        dto = parse_dto(ChangePasswordDTO, request.data)
        try:
            _auth_service().change_password(request.user, dto, current_session=_current_session(request))
        except IncorrectPassword as exc:
            return domain_error_response(exc)
        return Response({"message": "Password changed."})


class UserStatsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request: Request) -> Response:
        return Response(UserService(UserDjangoRepository()).stats())


class UserViewSet(GenericViewSet):
    """Admin user directory under ``/api/users``."""

    permission_classes = [IsAdmin]
    serializer_class = UserSerializer
    filterset_class = UserFilter
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    ordering_fields = ["created_at", "username", "last_login_at"]
    ordering = ["-created_at"]
    lookup_value_regex = UUID_PATTERN
    queryset = User.objects.all()

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = UserService(UserDjangoRepository())

    def get_queryset(self):
        return self._service.list_users()

    def list(self, request: Request) -> Response:
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(UserSerializer(page, many=True).data)

    def create(self, request: Request) -> Response:
        dto = parse_dto(RegisterUserDTO, request.data)
        try:
            user = _auth_service().create_user(dto)
        except UserAlreadyExists as exc:
            return domain_error_response(exc)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            user = self._service.get_user(pk)
        except UserNotFound as exc:
            return domain_error_response(exc)
        return Response(UserSerializer(user).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(UpdateUserDTO, request.data)
        try:
            user = self._service.update_user(pk, dto, allow_admin_fields=True)
        except (UserNotFound, UserAlreadyExists) as exc:
            return domain_error_response(exc)
        return Response(UserSerializer(user).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        if str(request.user.id) == pk:
            return Response(
                {"detail": "You cannot deactivate your own account."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            self._service.deactivate_user(pk)
        except UserNotFound as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="admin-reset-password")
    def admin_reset_password(self, request: Request, pk: str | None = None) -> Response:
        dto = parse_dto(AdminResetPasswordDTO, request.data)
        try:
            _auth_service().admin_reset_password(pk, dto)
        except UserNotFound as exc:
            return domain_error_response(exc)
        return Response({"message": "Password reset successfully"})


class AddressViewSet(GenericViewSet):
    """The current user's delivery addresses."""

    permission_classes = [IsAuthenticated]
    serializer_class = AddressSerializer
    lookup_value_regex = UUID_PATTERN
    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AddressService(AddressDjangoRepository())

    def get_queryset(self):
        return self._service.list_addresses(self.request.user)

    def list(self, request: Request) -> Response:
        return Response(AddressSerializer(self.get_queryset(), many=True).data)

    def create(self, request: Request) -> Response:
        dto = parse_dto(AddressDTO, request.data)
        address = self._service.add_address(request.user, dto)
        return Response(AddressSerializer(address).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            address = self._service.get_address(request.user, pk)
        except AddressNotFound as exc:
            return domain_error_response(exc)
        return Response(AddressSerializer(address).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        try:
            address = self._service.get_address(request.user, pk)
        except AddressNotFound as exc:
            return domain_error_response(exc)
        serializer = AddressSerializer(address, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        address = self._service.update_address(request.user, pk, serializer.validated_data)
        return Response(AddressSerializer(address).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_address(request.user, pk)
        except AddressNotFound as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="default")
    def set_default(self, request: Request, pk: str | None = None) -> Response:
        try:
            address = self._service.set_default(request.user, pk)
        except AddressNotFound as exc:
            return domain_error_response(exc)
        return Response(AddressSerializer(address).data)
