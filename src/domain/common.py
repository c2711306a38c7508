from enum import Enum


class VehicleType(str, Enum):
    CAR = "car"
    MOTORCYCLE = "motorcycle"
    TRUCK = "truck"


class SpaceType(str, Enum):
    STANDARD = "standard"
    HANDICAPPED = "handicapped"
    RESERVED = "reserved"
    ELECTRIC = "electric"


class SpaceStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    RESERVED = "reserved"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    WAIVED = "waived"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    APP = "app"
    NONE = "none"


# Methods a payment can actually be made with
TENDER_METHODS = (PaymentMethod.CASH, PaymentMethod.CARD, PaymentMethod.APP)


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"
