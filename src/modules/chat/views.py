"""Support chat API views.  Clients poll; there is no push channel."""

from __future__ import annotations

from uuid import UUID

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.accounts.exceptions import UserNotFound
from modules.chat.dtos import SendMessageDTO
from modules.chat.exceptions import ChatAccessDenied, RecipientRequired
from modules.chat.factories import build_chat_service
from modules.chat.serializers import ChatMessageSerializer, ConversationSerializer
from modules.core.dtos import parse_dto
from modules.core.exceptions import domain_error_response
from modules.core.permissions import IsStaff


class SendMessageView(APIView):
    def post(self, request: Request) -> Response:
        dto = parse_dto(SendMessageDTO, request.data)
        try:
            message = build_chat_service().send(request.user, dto)
        except (RecipientRequired, UserNotFound) as exc:
            return domain_error_response(exc)
        return Response(ChatMessageSerializer(message).data, status=status.HTTP_201_CREATED)


class ConversationListView(APIView):
    permission_classes = [IsStaff]

    def get(self, request: Request) -> Response:
        conversations = build_chat_service().conversations()
        return Response(ConversationSerializer(conversations, many=True).data)


class ConversationView(APIView):
    def get(self, request: Request, user_id: UUID) -> Response:
        try:
            messages = build_chat_service().conversation(request.user, str(user_id))
        except ChatAccessDenied as exc:
            return domain_error_response(exc)
        return Response(ChatMessageSerializer(messages, many=True).data)


class MarkReadByUserView(APIView):
    def post(self, request: Request, user_id: UUID) -> Response:
        try:
            updated = build_chat_service().mark_read_by_user(request.user, str(user_id))
        except ChatAccessDenied as exc:
            return domain_error_response(exc)
        return Response({"updated": updated})


class MarkReadByAdminView(APIView):
    permission_classes = [IsStaff]

    def post(self, request: Request, user_id: UUID) -> Response:
        updated = build_chat_service().mark_read_by_admin(str(user_id))
        return Response({"updated": updated})


class UnreadCountView(APIView):
    def get(self, request: Request) -> Response:
        return Response({"count": build_chat_service().unread_count(request.user)})
