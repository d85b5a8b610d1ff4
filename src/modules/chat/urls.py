from django.urls import path

from modules.chat.views import (
    ConversationListView,
    ConversationView,
    MarkReadByAdminView,
    MarkReadByUserView,
    SendMessageView,
    UnreadCountView,
)

urlpatterns = [
    path("chat/send", SendMessageView.as_view(), name="chat-send"),
    path("chat/all", ConversationListView.as_view(), name="chat-all"),
    path("chat/unread-count", UnreadCountView.as_view(), name="chat-unread-count"),
    path("chat/<uuid:user_id>", ConversationView.as_view(), name="chat-conversation"),
    path("chat/<uuid:user_id>/read-user", MarkReadByUserView.as_view(), name="chat-read-user"),
    path("chat/<uuid:user_id>/read-admin", MarkReadByAdminView.as_view(), name="chat-read-admin"),
]
