from modules.core.exceptions import ConflictError, DomainError, NotFoundError


class InvalidPromoCode(DomainError):
    default_detail = "Invalid promo code"
    code = "invalid_promo_code"


class DiscountCodeNotFound(NotFoundError):
    default_detail = "Discount code not found."


class DuplicateDiscountCode(ConflictError):
    default_detail = "A discount code with this code already exists."
