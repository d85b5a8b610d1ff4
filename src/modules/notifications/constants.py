from django.db import models


class NotificationType(models.TextChoices):
    ORDER = "order", "Order"
    DELIVERY = "delivery", "Delivery"
    PAYMENT = "payment", "Payment"
    CHAT = "chat", "Chat"
    PROMO = "promo", "Promotion"
    SYSTEM = "system", "System"


class Audience(models.TextChoices):
    USER = "user", "User"
    ADMIN = "admin", "Back office"


TITLE_MAX_LENGTH = 150
