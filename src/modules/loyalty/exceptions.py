from modules.core.exceptions import DomainError


class InsufficientPoints(DomainError):
    default_detail = "Insufficient points"
    code = "insufficient_points"


class ReferralAlreadyUsed(DomainError):
    default_detail = "You have already used a referral code"
    code = "referral_already_used"


class InvalidReferralCode(DomainError):
    default_detail = "Invalid referral code"
    code = "invalid_referral_code"


class OwnReferralCode(DomainError):
    default_detail = "Cannot use your own referral code"
    code = "own_referral_code"
