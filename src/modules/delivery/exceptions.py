from modules.core.exceptions import ConflictError, DomainError, NotFoundError, PermissionDeniedError


class DeliveryZoneNotFound(NotFoundError):
    default_detail = "Delivery zone not found."


class TrackingNotFound(NotFoundError):
    default_detail = "No delivery tracking for this order."


class InvalidDriver(DomainError):
    default_detail = "Driver must be an active delivery user."
    code = "invalid_driver"


class OrderNotReadyForDelivery(ConflictError):
    default_detail = "Order must be processing or ready for pickup to assign a driver."
    code = "order_not_ready"


class InvalidTrackingStatus(DomainError):
    default_detail = "Invalid delivery status transition."
    code = "invalid_tracking_status"


class TrackingAccessDenied(PermissionDeniedError):
    default_detail = "You cannot access this delivery."
