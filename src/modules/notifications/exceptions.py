from modules.core.exceptions import NotFoundError


class NotificationNotFound(NotFoundError):
    default_detail = "Notification not found."
