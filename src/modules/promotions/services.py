"""Discount code validation, pricing and redemption."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict

import structlog
from django.db import transaction
from django.utils import timezone

from modules.core.money import ZERO, round2, to_decimal
from modules.promotions.constants import DiscountType
from modules.promotions.exceptions import (
    DiscountCodeNotFound,
    DuplicateDiscountCode,
    InvalidPromoCode,
)
from modules.promotions.models import DiscountCode

if TYPE_CHECKING:
    from modules.promotions.dtos import DiscountCodeDTO
    from modules.promotions.repositories.interfaces import IDiscountCodeRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AppliedDiscount:
    discount_code: DiscountCode
    discount: Decimal


def compute_discount(discount_code: DiscountCode, order_total: Decimal) -> Decimal:
    """Amount taken off ``order_total``; never more than the total itself."""
    order_total = to_decimal(order_total)
    if discount_code.type == DiscountType.PERCENTAGE:
        discount = order_total * discount_code.value / Decimal("100")
        if discount_code.maximum_discount is not None:
            discount = min(discount, discount_code.maximum_discount)
    else:
        discount = discount_code.value
    return round2(max(min(discount, order_total), ZERO))


def _plain(amount: Decimal) -> str:
    return format(to_decimal(amount).normalize(), "f")


class PromotionService:
    def __init__(self, repository: IDiscountCodeRepository) -> None:
        self._repo = repository

    def validate(self, code: str, order_total: Decimal, user_id: str | None = None) -> AppliedDiscount:
        """Check every rule of ``code`` against ``order_total``.

        The per-user limit is only checked when ``user_id`` is given.
        """
        log = logger.bind(code=code.strip().upper())
        discount_code = self._repo.get_by_code(code)
        if discount_code is None:
            log.info("promo.rejected", reason="unknown")
            raise InvalidPromoCode("Invalid promo code")
        if not discount_code.is_active:
            raise InvalidPromoCode("This promo code is no longer active")
        now = timezone.now()
        if now < discount_code.valid_from or now > discount_code.valid_to:
            raise InvalidPromoCode("This promo code has expired")
        if discount_code.usage_limit and discount_code.usage_count >= discount_code.usage_limit:
            raise InvalidPromoCode("This promo code has reached its usage limit")
        if to_decimal(order_total) < discount_code.minimum_order:
            raise InvalidPromoCode(
                f"Minimum order of {_plain(discount_code.minimum_order)} AED required"
            )
        if user_id and discount_code.user_limit:
            used = self._repo.user_usage_count(discount_code.code, user_id)
            if used >= discount_code.user_limit:
                raise InvalidPromoCode("You have already used this promo code")

        discount = compute_discount(discount_code, order_total)
        log.info("promo.validated", discount=str(discount))
        return AppliedDiscount(discount_code=discount_code, discount=discount)

    def redeem(self, discount_code: DiscountCode) -> None:
        self._repo.increment_usage(discount_code)
        logger.info("promo.redeemed", code=discount_code.code, usage_count=discount_code.usage_count)

    # ------------------------------------------------------------------
    # Back-office CRUD
    # ------------------------------------------------------------------

    def list_codes(self):
        return self._repo.list()

    def get_code(self, id: str) -> DiscountCode:
        discount_code = self._repo.get_by_id(id)
        if discount_code is None:
            raise DiscountCodeNotFound()
        return discount_code

    @transaction.atomic
    def create_code(self, dto: DiscountCodeDTO) -> DiscountCode:
        if self._repo.get_by_code(dto.code):
            raise DuplicateDiscountCode()
        discount_code = self._repo.save(DiscountCode(**dto.model_dump()))
        logger.info("promo.created", code=discount_code.code)
        return discount_code

    @transaction.atomic
    def update_code(self, id: str, data: Dict[str, Any]) -> DiscountCode:
        discount_code = self.get_code(id)
        if "code" in data:
            other = self._repo.get_by_code(data["code"])
            if other is not None and other.pk != discount_code.pk:
                raise DuplicateDiscountCode()
        for field, value in data.items():
            setattr(discount_code, field, value)
        return self._repo.save(discount_code)

    @transaction.atomic
    def delete_code(self, id: str) -> None:
        self.get_code(id).delete()
        logger.info("promo.deleted", discount_code_id=str(id))
