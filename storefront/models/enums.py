from enum import StrEnum

class UserRole(StrEnum):
    CUSTOMER = "customer"
    ADMIN = "admin"

class OtpPurpose(StrEnum):
    REGISTER = "register"
    LOGIN = "login"
    RESET = "reset"

class AddressType(StrEnum):
    HOME = "home"
    WORK = "work"
    OTHER = "other"

class DiscountType(StrEnum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
