from django.db import models


class Sender(models.TextChoices):
    USER = "user", "Customer"
    ADMIN = "admin", "Support"


NOTIFICATION_NAME_LENGTH = 150
NOTIFICATION_PREVIEW_LENGTH = 100
