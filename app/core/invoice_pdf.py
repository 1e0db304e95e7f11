"""Render a rental invoice as a single-page A4 tax invoice."""
import io

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.core.utils import today

COMPANY_NAME = "FleetSync Pro"
COMPANY_TAGLINE = "Fleet Management & Rental Invoicing"
COMPANY_FOOTER = ("FleetSync Pro Pty Ltd | ABN: 12 345 678 901", "Sydney, NSW, Australia")

LEFT = 50
RIGHT = 545
LINE_HEIGHT = 16


def _money(amount: float) -> str:
    return f"${amount:,.2f}"


def render_invoice_pdf(invoice, rental, driver, vehicle) -> bytes:
    """Return PDF bytes for an invoice with its rental, driver and vehicle."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    center = width / 2
    y = height - 60

    pdf.setFont("Helvetica-Bold", 24)
    pdf.drawCentredString(center, y, COMPANY_NAME)
    y -= 18
    pdf.setFont("Helvetica", 10)
    pdf.drawCentredString(center, y, COMPANY_TAGLINE)
    y -= 40
    pdf.setFont("Helvetica-Bold", 18)
    pdf.drawCentredString(center, y, "TAX INVOICE")
    y -= 30

    pdf.setFont("Helvetica", 10)
    for line in (
        f"Invoice ID: {str(invoice.id)[:8].upper()}",
        f"Issue Date: {today().strftime('%d/%m/%Y')}",
        f"Due Date: {invoice.due_date.strftime('%d/%m/%Y')}",
        f"Status: {invoice.status}",
    ):
        pdf.drawString(LEFT, y, line)
        y -= LINE_HEIGHT
    y -= 10

    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawString(LEFT, y, "Bill To:")
    y -= LINE_HEIGHT
    pdf.setFont("Helvetica", 10)
    for line in (driver.name, driver.email, driver.phone or ""):
        if line:
            pdf.drawString(LEFT, y, line)
            y -= LINE_HEIGHT
    y -= 10

    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawString(LEFT, y, "Vehicle:")
    y -= LINE_HEIGHT
    pdf.setFont("Helvetica", 10)
    pdf.drawString(LEFT, y, f"{vehicle.plate} - {vehicle.make} {vehicle.model}")
    y -= 30

    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawString(LEFT, y, "Description")
    pdf.drawRightString(RIGHT, y, "Amount")
    y -= 6
    pdf.line(LEFT, y, RIGHT, y)
    y -= LINE_HEIGHT

    items = [("Weekly Rental Rate", _money(invoice.weekly_rate))]
    if invoice.tolls > 0:
        items.append(("Toll Charges", _money(invoice.tolls)))
    if invoice.fines > 0:
        items.append(("Traffic Fines", _money(invoice.fines)))
    if invoice.credits > 0:
        items.append(("Credits Applied", f"-{_money(invoice.credits)}"))

    pdf.setFont("Helvetica", 10)
    for description, amount in items:
        pdf.drawString(LEFT, y, description)
        pdf.drawRightString(RIGHT, y, amount)
        y -= LINE_HEIGHT

    y -= 2
    pdf.line(LEFT, y, RIGHT, y)
    y -= LINE_HEIGHT
    pdf.setFont("Helvetica-Bold", 11)
    pdf.drawString(LEFT, y, "TOTAL (AUD)")
    pdf.drawRightString(RIGHT, y, _money(invoice.amount))

    pdf.setFont("Helvetica", 8)
    pdf.setFillColor(colors.gray)
    footer_y = 60
    for line in COMPANY_FOOTER:
        pdf.drawCentredString(center, footer_y, line)
        footer_y -= 12

    pdf.showPage()
    pdf.save()
    buffer.seek(0)
    return buffer.getvalue()
