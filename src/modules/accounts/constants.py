"""Account constants: roles and the emirates served."""

from django.db import models


class UserRole(models.TextChoices):
    CUSTOMER = "customer", "Customer"
    ADMIN = "admin", "Admin"
    STAFF = "staff", "Staff"
    DELIVERY = "delivery", "Delivery driver"


class Emirate(models.TextChoices):
    ABU_DHABI = "Abu Dhabi", "Abu Dhabi"
    DUBAI = "Dubai", "Dubai"
    SHARJAH = "Sharjah", "Sharjah"
    AJMAN = "Ajman", "Ajman"
    UMM_AL_QUWAIN = "Umm Al Quwain", "Umm Al Quwain"
    RAS_AL_KHAIMAH = "Ras Al Khaimah", "Ras Al Khaimah"
    FUJAIRAH = "Fujairah", "Fujairah"


BACK_OFFICE_ROLES: frozenset[str] = frozenset(
    {UserRole.ADMIN, UserRole.STAFF, UserRole.DELIVERY}
)

SESSION_TOKEN_BYTES = 32
