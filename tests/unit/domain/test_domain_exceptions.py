"""Tests for src/domain/exceptions/billing_exceptions.py"""

import pytest

from domain.exceptions import (
    AdminAlreadyExistsError,
    AuthenticationError,
    BillRecordNotFoundError,
    DomainException,
    InvalidBillingMonthError,
    InvalidRateEntryError,
    InvalidTokenError,
    RateEntryNotFoundError,
)


class TestDomainException:
    def test_default_attributes(self):
        exc = DomainException("something went wrong")
        assert exc.detail == "something went wrong"
        assert exc.title == "Domain Error"
        assert exc.status_code == 400
        assert exc.error_type == "about:blank"

    def test_custom_attributes(self):
        exc = DomainException("custom", title="Custom", status_code=422, error_type="urn:custom")
        assert exc.title == "Custom"
        assert exc.status_code == 422
        assert exc.error_type == "urn:custom"


class TestRateEntryNotFoundError:
    def test_attributes(self):
        exc = RateEntryNotFoundError("abc-123")
        assert exc.rate_id == "abc-123"
        assert exc.status_code == 404
        assert exc.detail == "Config with ID abc-123 not found"


class TestBillRecordNotFoundError:
    def test_attributes(self):
        exc = BillRecordNotFoundError("r-9")
        assert exc.record_id == "r-9"
        assert exc.status_code == 404
        assert "r-9" in exc.detail


class TestInvalidBillingMonthError:
    def test_attributes(self):
        exc = InvalidBillingMonthError("2025-13")
        assert exc.month == "2025-13"
        assert exc.status_code == 422


class TestInvalidRateEntryError:
    def test_attributes(self):
        exc = InvalidRateEntryError("tierMaxUnits must be >= tierMinUnits")
        assert exc.status_code == 422
        assert exc.title == "Invalid Rate Entry"
        assert exc.error_type.endswith("/invalid-rate")


class TestAuthErrors:
    def test_conflict(self):
        exc = AdminAlreadyExistsError("operator")
        assert exc.status_code == 409
        assert "operator" in exc.detail

    def test_authentication_default_detail(self):
        assert AuthenticationError().detail == "Invalid credentials"
        assert AuthenticationError().status_code == 401

    def test_invalid_token(self):
        assert InvalidTokenError("expired").status_code == 401


@pytest.mark.parametrize(
    "exc_cls",
    [
        RateEntryNotFoundError,
        BillRecordNotFoundError,
        InvalidBillingMonthError,
        AdminAlreadyExistsError,
        AuthenticationError,
        InvalidTokenError,
    ],
)
def test_all_inherit_domain_exception(exc_cls):
    assert issubclass(exc_cls, DomainException)
    assert exc_cls().error_type.startswith("https://api.electricity-billing.example/problems/")
