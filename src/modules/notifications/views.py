from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.accounts.exceptions import UserNotFound
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsStaff
from modules.core.validators import UUID_PATTERN
from modules.notifications.exceptions import NotificationNotFound
from modules.notifications.repositories.django_repository import NotificationDjangoRepository
from modules.notifications.serializers import NotificationSerializer, SendNotificationSerializer
from modules.notifications.services import NotificationService


class NotificationViewSet(GenericViewSet):
    """The caller's inbox. ``DELETE /api/notifications`` clears it."""

    serializer_class = NotificationSerializer
    lookup_value_regex = UUID_PATTERN

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = NotificationService(NotificationDjangoRepository())

    def get_permissions(self):
        if self.action == "create":
            return [IsStaff()]
        return super().get_permissions()

    def get_queryset(self):
        unread = self.request.query_params.get("unread", "").lower() in {"1", "true"}
        return self._service.list_for(self.request.user, unread_only=unread)

    def list(self, request: Request) -> Response:
        page = self.paginate_queryset(self.get_queryset())
        response = self.get_paginated_response(NotificationSerializer(page, many=True).data)
        response.data["unread_count"] = self._service.unread_count(request.user)
        return response

    def create(self, request: Request) -> Response:
        serializer = SendNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        recipient = UserDjangoRepository().get_by_id(str(data["user_id"]))
        if recipient is None:
            return domain_error_response(UserNotFound())
        notification = self._service.notify_user(
            recipient, data["title"], data["message"], type=data["type"], link=data["link"]
        )
        return Response(NotificationSerializer(notification).data, status=status.HTTP_201_CREATED)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete(request.user, pk)
        except NotificationNotFound as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["patch"])
    def read(self, request: Request, pk: str | None = None) -> Response:
        try:
            notification = self._service.mark_read(request.user, pk)
        except NotificationNotFound as exc:
            return domain_error_response(exc)
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=["patch"], url_path="read-all")
    def read_all(self, request: Request) -> Response:
        return Response({"updated": self._service.mark_all_read(request.user)})

    @action(detail=False, methods=["delete"], url_path="clear")
    def clear(self, request: Request) -> Response:
        return Response({"deleted": self._service.clear(request.user)})
