"""
Single-page A4 electricity bill rendered with the ReportLab canvas API.

Layout positions are expressed as distances from the top edge of the page
and converted to ReportLab's bottom-left origin in :class:`_Page`.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from decimal import Decimal

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from domain.models.bill import BillBreakdown

MARGIN = 50.0

BRAND_BLUE = HexColor("#2563eb")
DARK_BLUE = HexColor("#1e40af")
LIGHT_BLUE = HexColor("#eff6ff")
BOX_BORDER = HexColor("#93c5fd")
MUTED = HexColor("#6b7280")
BODY = HexColor("#374151")
RULE = HexColor("#e5e7eb")
FOOTER = HexColor("#9ca3af")
BLACK = HexColor("#000000")


@dataclass(frozen=True)
class BillBranding:
    company_name: str = "ACME ELECTRICITY"
    tagline: str = "Power Distribution Services"
    currency_label: str = "Tk"
    support_email: str = "support@acme-electricity.com"


class _Page:
    """Canvas wrapper that measures y downwards from the top margin."""

    def __init__(self, pdf: canvas.Canvas) -> None:
        self.pdf = pdf
        self.width, self.height = A4
        self.content_width = self.width - 2 * MARGIN

    def _y(self, top: float) -> float:
        return self.height - top

    def text(
        self,
        value: str,
        top: float,
        *,
        size: float = 10,
        bold: bool = False,
        color=BLACK,  # type: ignore[no-untyped-def]
        x: float = MARGIN,
        align: str = "left",
    ) -> None:
        self.pdf.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self.pdf.setFillColor(color)
        # Baseline sits roughly one font size below the requested top.
        y = self._y(top + size)
        if align == "center":
            self.pdf.drawCentredString(self.width / 2, y, value)
        elif align == "right":
            self.pdf.drawRightString(x, y, value)
        else:
            self.pdf.drawString(x, y, value)

    def rule(self, top: float) -> None:
        self.pdf.setStrokeColor(RULE)
        self.pdf.line(MARGIN, self._y(top), self.width - MARGIN, self._y(top))

    def box(self, top: float, height: float, stroke) -> None:  # type: ignore[no-untyped-def]
        self.pdf.setFillColor(LIGHT_BLUE)
        self.pdf.setStrokeColor(stroke)
        self.pdf.roundRect(
            MARGIN, self._y(top + height), self.content_width, height, 5, stroke=1, fill=1
        )


def _money(label: str, amount: Decimal) -> str:
    return f"{label} {Decimal(amount):.2f}"


def _units(value: Decimal) -> str:
    return f"{Decimal(value).normalize():f}"


def render_bill_pdf(breakdown: BillBreakdown, branding: BillBranding | None = None) -> bytes:
    """Render *breakdown* as a PDF document and return its bytes."""
    brand = branding or BillBranding()
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(f"Electricity bill {breakdown.calculation_month}")
    pdf.setAuthor(brand.company_name)
    page = _Page(pdf)
    right = page.width - MARGIN
    units = _units(breakdown.units_consumed)

    # Header
    page.text(brand.company_name, MARGIN, size=24, bold=True, color=BRAND_BLUE, align="center")
    page.text(brand.tagline, MARGIN + 30, size=11, color=MUTED, align="center")

    top = MARGIN + 60
    page.text("ELECTRICITY BILL", top, size=18, bold=True, align="center")

    top += 35
    page.text(f"Bill Month: {breakdown.calculation_month}", top, color=BODY)
    page.text(
        f"Bill Date: {breakdown.calculation_date.strftime('%d/%m/%Y')}",
        top,
        color=BODY,
        x=right,
        align="right",
    )

    # Consumption
    top += 35
    page.box(top, 70, BOX_BORDER)
    page.text("Total Consumption", top + 15, size=11, color=DARK_BLUE, x=MARGIN + 20)
    page.text(f"{units} kWh", top + 32, size=28, bold=True, color=BRAND_BLUE, x=MARGIN + 20)

    # Summary lines
    top += 90
    page.text("Bill Summary", top, size=14, bold=True)
    top += 25
    page.rule(top)
    top += 20

    rate = breakdown.tier_breakdown[0].rate_per_unit if breakdown.tier_breakdown else Decimal("0")
    page.text(
        f"Base Charge ({units} kWh x {brand.currency_label} {Decimal(rate):.3f})",
        top,
        color=MUTED,
    )
    page.text(
        _money(brand.currency_label, breakdown.base_amount), top, bold=True, x=right, align="right"
    )
    top += 25

    for tax in breakdown.taxes[:1]:
        page.text(f"{tax.name} ({_units(tax.value)}%)", top, color=MUTED)
        page.text(_money(brand.currency_label, tax.amount), top, bold=True, x=right, align="right")
        top += 25

    for surcharge in breakdown.surcharges[:1]:
        page.text(surcharge.name, top, color=MUTED)
        page.text(
            _money(brand.currency_label, surcharge.amount), top, bold=True, x=right, align="right"
        )
        top += 25

    top += 10
    page.rule(top)
    top += 20

    # Total
    page.box(top, 50, BRAND_BLUE)
    page.text("Total Amount", top + 17, size=14, bold=True, color=DARK_BLUE, x=MARGIN + 20)
    page.text(
        _money(brand.currency_label, breakdown.total_amount),
        top + 15,
        size=20,
        bold=True,
        color=BRAND_BLUE,
        x=right - 10,
        align="right",
    )
    top += 70

    # Payment notes
    page.text("Payment Information", top, size=11, bold=True)
    top += 18
    for line in (
        "Please pay within 15 days from bill date",
        "Keep your reference number for payment tracking",
        f"For queries: {brand.support_email}",
    ):
        page.text(f"• {line}", top, size=9, color=MUTED)
        top += 14

    top += 26
    page.text(
        f"This is a computer-generated bill. Thank you for using {brand.company_name.title()}.",
        top,
        size=8,
        color=FOOTER,
        align="center",
    )

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
