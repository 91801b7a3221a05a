from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain-layer exceptions.

    Carries HTTP-mapping metadata so the presentation layer can produce
    RFC 9457 Problem Details without knowing exception internals.
    """

    def __init__(
        self,
        detail: str = "",
        *,
        title: str = "Domain Error",
        status_code: int = 400,
        error_type: str = "about:blank",
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.title = title
        self.status_code = status_code
        self.error_type = error_type


class RateEntryNotFoundError(DomainException):
    def __init__(self, rate_id: str = "") -> None:
        self.rate_id = rate_id
        super().__init__(
            detail=f"Config with ID {rate_id} not found",
            title="Rate Entry Not Found",
            status_code=404,
            error_type="https://api.electricity-billing.example/problems/rate-not-found",
        )


class BillRecordNotFoundError(DomainException):
    def __init__(self, record_id: str = "") -> None:
        self.record_id = record_id
        super().__init__(
            detail=f"Calculation history with ID {record_id} not found",
            title="Bill Record Not Found",
            status_code=404,
            error_type="https://api.electricity-billing.example/problems/bill-not-found",
        )


class InvalidBillingMonthError(DomainException):
    def __init__(self, month: str = "") -> None:
        self.month = month
        super().__init__(
            detail=f"Billing month must be formatted as YYYY-MM, got '{month}'",
            title="Invalid Billing Month",
            status_code=422,
            error_type="https://api.electricity-billing.example/problems/invalid-month",
        )


class AdminAlreadyExistsError(DomainException):
    def __init__(self, identifier: str = "") -> None:
        self.identifier = identifier
        super().__init__(
            detail=f"Admin with this username or email already exists: {identifier}",
            title="Admin Conflict",
            status_code=409,
            error_type="https://api.electricity-billing.example/problems/admin-conflict",
        )


class AuthenticationError(DomainException):
    def __init__(self, detail: str = "Invalid credentials") -> None:
        super().__init__(
            detail=detail,
            title="Unauthorized",
            status_code=401,
            error_type="https://api.electricity-billing.example/problems/unauthorized",
        )


class InvalidTokenError(DomainException):
    def __init__(self, detail: str = "Invalid or expired token") -> None:
        super().__init__(
            detail=detail,
            title="Invalid Token",
            status_code=401,
            error_type="https://api.electricity-billing.example/problems/invalid-token",
        )


class InvalidRateEntryError(DomainException):
    def __init__(self, detail: str = "") -> None:
        super().__init__(
            detail=detail,
            title="Invalid Rate Entry",
            status_code=422,
            error_type="https://api.electricity-billing.example/problems/invalid-rate",
        )
