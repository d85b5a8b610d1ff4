from __future__ import annotations

from rest_framework import serializers

from modules.chat.models import ChatMessage


class ChatMessageSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = ChatMessage
        fields = [
            "id",
            "user_id",
            "user_name",
            "user_email",
            "sender",
            "text",
            "attachments",
            "read_by_admin",
            "read_by_user",
            "created_at",
        ]
        read_only_fields = fields


class ConversationSerializer(serializers.Serializer):
    user_id = serializers.CharField()
    user_name = serializers.CharField()
    user_email = serializers.CharField()
    messages = ChatMessageSerializer(many=True)
    last_message_at = serializers.DateTimeField()
    unread_count = serializers.IntegerField()
