import enum


class ProfileRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class PaymentMode(str, enum.Enum):
    CASH = "Cash"
    ONLINE = "Online"
    CHEQUE = "Cheque"
    UPI = "UPI"


class ChangeEvent(str, enum.Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
