from decimal import Decimal

from django.db import models


class LoyaltyTransactionType(models.TextChoices):
    EARN = "earn", "Earn"
    REDEEM = "redeem", "Redeem"
    BONUS = "bonus", "Bonus"
    EXPIRE = "expire", "Expire"


# Types that count towards lifetime points (and therefore the tier).
LIFETIME_TYPES = (LoyaltyTransactionType.EARN, LoyaltyTransactionType.BONUS)

# No 0/O or 1/I, so codes survive being read out over the phone.
REFERRAL_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REFERRAL_CODE_LENGTH = 8

RECENT_TRANSACTIONS = 50

DEFAULT_TIERS = [
    {
        "name": "Bronze",
        "name_ar": "برونزي",
        "min_points": 0,
        "multiplier": Decimal("1"),
        "benefits": ["1 point per AED spent", "Birthday bonus"],
        "icon": "🥉",
        "sort_order": 0,
    },
    {
        "name": "Silver",
        "name_ar": "فضي",
        "min_points": 500,
        "multiplier": Decimal("1.5"),
        "benefits": ["1.5 points per AED spent", "Birthday bonus", "Early access to sales"],
        "icon": "🥈",
        "sort_order": 1,
    },
    {
        "name": "Gold",
        "name_ar": "ذهبي",
        "min_points": 2000,
        "multiplier": Decimal("2"),
        "benefits": [
            "2 points per AED spent",
            "Birthday bonus",
            "Early access to sales",
            "Free delivery",
        ],
        "icon": "🥇",
        "sort_order": 2,
    },
    {
        "name": "Platinum",
        "name_ar": "بلاتيني",
        "min_points": 5000,
        "multiplier": Decimal("3"),
        "benefits": [
            "3 points per AED spent",
            "Birthday bonus",
            "Early access to sales",
            "Free delivery",
            "VIP support",
        ],
        "icon": "💎",
        "sort_order": 3,
    },
]
