from domain.exceptions.billing_exceptions import (
    AdminAlreadyExistsError,
    AuthenticationError,
    BillRecordNotFoundError,
    DomainException,
    InvalidBillingMonthError,
    InvalidRateEntryError,
    InvalidTokenError,
    RateEntryNotFoundError,
)

__all__ = [
    "AdminAlreadyExistsError",
    "AuthenticationError",
    "BillRecordNotFoundError",
    "DomainException",
    "InvalidBillingMonthError",
    "InvalidRateEntryError",
    "InvalidTokenError",
    "RateEntryNotFoundError",
]
