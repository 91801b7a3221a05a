"""Tests for infrastructure.pdf.bill_renderer."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from domain.models.bill import ConsumerType
from infrastructure.pdf.bill_renderer import BillBranding, render_bill_pdf


def _breakdown(calculator, rate, **kwargs):  # type: ignore[no-untyped-def]
    return calculator.calculate(
        ConsumerType.RESIDENTIAL,
        Decimal("100"),
        rate,
        now=datetime(2026, 10, 1, tzinfo=timezone.utc),
        **kwargs,
    )


class TestRenderBillPdf:
    def test_produces_pdf_document(self, calculator, standard_rate) -> None:
        pdf = render_bill_pdf(_breakdown(calculator, standard_rate))

        assert pdf.startswith(b"%PDF-")
        assert pdf.rstrip().endswith(b"%%EOF")

    def test_with_consumer_details_and_branding(self, calculator, standard_rate) -> None:
        breakdown = _breakdown(
            calculator, standard_rate, consumer_name="Jane Doe", consumer_id="C-1001"
        )
        branding = BillBranding(company_name="NORTH GRID", currency_label="EUR")

        pdf = render_bill_pdf(breakdown, branding)

        assert pdf.startswith(b"%PDF-")
        assert len(pdf) > 1000

    def test_zero_consumption(self, calculator, standard_rate) -> None:
        breakdown = calculator.calculate(ConsumerType.INDUSTRIAL, Decimal("0"), standard_rate)
        assert render_bill_pdf(breakdown).startswith(b"%PDF-")
