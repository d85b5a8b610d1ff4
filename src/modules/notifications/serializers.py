from rest_framework import serializers

from modules.notifications.constants import NotificationType
from modules.notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "audience", "type", "title", "message", "link", "is_read", "created_at"]
        read_only_fields = fields


class SendNotificationSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    type = serializers.ChoiceField(choices=NotificationType.choices, default=NotificationType.SYSTEM)
    title = serializers.CharField(max_length=150)
    message = serializers.CharField()
    link = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
