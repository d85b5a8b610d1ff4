from modules.core.exceptions import DomainError, PermissionDeniedError


class ChatAccessDenied(PermissionDeniedError):
    default_detail = "You can only access your own conversation."
    code = "chat_access_denied"


class RecipientRequired(DomainError):
    default_detail = "user_id is required when replying as support."
    code = "recipient_required"
