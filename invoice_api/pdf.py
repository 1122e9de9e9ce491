"""
PDF Service: A4 invoice / estimate documents rendered with reportlab.

Layout, top to bottom:
  - branded header with document type, number and dates
  - bill-to block
  - itemized services table
  - totals block with CGST/SGST split when tax is enabled
  - amount in words (Indian numbering system)
  - notes / terms
  - authorized signature block
  - footer on every page

build_story() is a pure function of the invoice data, so layout can be
inspected without rendering.
"""

import io
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Flowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .amount_words import amount_to_words
from .config import Settings, get_settings
from .formatting import format_date_in, format_inr

PAGE_MARGINS = (40, 40, 40, 60)  # left, top, right, bottom
CONTENT_WIDTH = A4[0] - PAGE_MARGINS[0] - PAGE_MARGINS[2]

NAVY = colors.HexColor("#1a1a2e")
ORANGE = colors.HexColor("#e67e22")
SLATE = colors.HexColor("#2c3e50")
RED = colors.HexColor("#e74c3c")
RULE = colors.HexColor("#e0e0e0")
MUTED = colors.HexColor("#666666")
FAINT = colors.HexColor("#999999")

# Helvetica has no rupee glyph
CURRENCY = "Rs."


class HLine(Flowable):
    def __init__(self, width, color=RULE, thickness=1):
        Flowable.__init__(self)
        self.width = width
        self.color = color
        self.thickness = thickness

    def wrap(self, available_width, available_height):
        return self.width, self.thickness

    def draw(self):
        self.canv.setStrokeColor(self.color)
        self.canv.setLineWidth(self.thickness)
        self.canv.line(0, 0, self.width, 0)


def pdf_filename(invoice: Dict[str, Any]) -> str:
    return f"{invoice['invoice_number']}-{invoice['document_type']}.pdf"


def storage_path(invoice: Dict[str, Any]) -> str:
    """Bucket key per owner; invoice numbers are only unique per user"""
    return f"pdfs/{invoice['user_id']}/{pdf_filename(invoice)}"


def money(amount: Any) -> str:
    return f"{CURRENCY} {format_inr(amount)}"


def _styles():
    styles = getSampleStyleSheet()
    base = ParagraphStyle("Base", parent=styles["Normal"], fontSize=10, leading=13)
    return {
        "base": base,
        "small": ParagraphStyle("Small", parent=base, fontSize=9, leading=12),
        "brand": ParagraphStyle("Brand", parent=base, fontSize=20, leading=24,
                                fontName="Helvetica-Bold", textColor=NAVY),
        "tagline": ParagraphStyle("Tagline", parent=base, fontSize=9,
                                  fontName="Helvetica-Oblique", textColor=MUTED),
        "number": ParagraphStyle("Number", parent=base, fontSize=12, leading=16,
                                 fontName="Helvetica-Bold", alignment=TA_RIGHT),
        "right": ParagraphStyle("Right", parent=base, fontSize=9, alignment=TA_RIGHT),
        "section": ParagraphStyle("Section", parent=base, fontSize=11,
                                  fontName="Helvetica-Bold", textColor=colors.HexColor("#333333"),
                                  spaceBefore=15, spaceAfter=5),
        "customer": ParagraphStyle("Customer", parent=base, fontSize=11,
                                   fontName="Helvetica-Bold"),
        "cell": ParagraphStyle("Cell", parent=base, fontSize=9, leading=12),
        "words": ParagraphStyle("Words", parent=base, fontSize=9,
                                fontName="Helvetica-Oblique", textColor=colors.HexColor("#555555"),
                                spaceBefore=10),
        "notes": ParagraphStyle("Notes", parent=base, fontSize=9, textColor=MUTED),
        "signature": ParagraphStyle("Signature", parent=base, fontSize=9,
                                    fontName="Helvetica-Bold", alignment=TA_CENTER),
        "signature_label": ParagraphStyle("SignatureLabel", parent=base, fontSize=8,
                                          textColor=FAINT, alignment=TA_CENTER),
    }


def _text(value: Any) -> str:
    return escape(str(value))


def _quantity(value: Any) -> str:
    number = float(value)
    return f"{number:g}"


class PdfService:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def generate_pdf(self, invoice: Dict[str, Any]) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=PAGE_MARGINS[0],
            topMargin=PAGE_MARGINS[1],
            rightMargin=PAGE_MARGINS[2],
            bottomMargin=PAGE_MARGINS[3],
            title=f"{invoice['document_type'].title()} {invoice['invoice_number']}",
            author=self.settings.business_name,
        )
        doc.build(self.build_story(invoice), onFirstPage=self._footer, onLaterPages=self._footer)
        return buffer.getvalue()

    def build_story(self, invoice: Dict[str, Any]) -> List[Flowable]:
        styles = _styles()
        story: List[Flowable] = []

        story.append(self._header(invoice, styles))
        story.append(Spacer(1, 10))
        story.append(HLine(CONTENT_WIDTH))

        story.extend(self._bill_to(invoice, styles))
        story.append(Spacer(1, 10))
        story.append(self._services_table(invoice, styles))
        story.append(Spacer(1, 10))
        story.append(self._totals_table(invoice, styles))

        story.append(Paragraph(
            f"Amount in words: {amount_to_words(invoice['total_amount'])} Only",
            styles["words"],
        ))

        if invoice.get("notes"):
            story.append(Paragraph("Notes / Terms:", styles["section"]))
            story.append(Paragraph(_text(invoice["notes"]).replace("\n", "<br/>"), styles["notes"]))

        story.append(Spacer(1, 30))
        story.append(self._signature(styles))
        return story

    def _header(self, invoice, styles) -> Table:
        is_estimate = invoice["document_type"] == "estimate"
        doc_type_style = ParagraphStyle(
            "DocType", parent=styles["base"], fontSize=14, leading=18,
            fontName="Helvetica-Bold", alignment=TA_RIGHT,
            textColor=ORANGE if is_estimate else SLATE,
        )
        due = format_date_in(invoice.get("due_date")) or "N/A"

        brand = [
            Paragraph(_text(self.settings.business_name.upper()), styles["brand"]),
            Paragraph(_text(self.settings.business_tagline), styles["tagline"]),
        ]
        details = [
            Paragraph(invoice["document_type"].upper(), doc_type_style),
            Paragraph(_text(invoice["invoice_number"]), styles["number"]),
            Paragraph(f"Date: {format_date_in(invoice['invoice_date'])}", styles["right"]),
            Paragraph(f"Due: {due}", styles["right"]),
        ]
        table = Table([[brand, details]], colWidths=[CONTENT_WIDTH - 180, 180])
        table.setStyle(TableStyle([
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 0),
            ("RIGHTPADDING", (0, 0), (-1, -1), 0),
        ]))
        return table

    def _bill_to(self, invoice, styles) -> List[Flowable]:
        block = [
            Paragraph("Bill To:", styles["section"]),
            Paragraph(_text(invoice["customer_name"]), styles["customer"]),
        ]
        if invoice.get("customer_address"):
            block.append(Paragraph(_text(invoice["customer_address"]), styles["small"]))
        block.append(Paragraph(f"Phone: {_text(invoice['customer_phone'])}", styles["small"]))
        if invoice.get("customer_email"):
            block.append(Paragraph(_text(invoice["customer_email"]), styles["small"]))
        return block

    def _services_table(self, invoice, styles) -> Table:
        header = ["#", "Description", "Qty", "Rate", "Amount"]
        rows = [header]
        for i, service in enumerate(invoice["services"], start=1):
            rows.append([
                str(i),
                Paragraph(_text(service["description"]), styles["cell"]),
                _quantity(service["quantity"]),
                money(service["rate"]),
                money(service.get("amount", 0)),
            ])

        table = Table(rows, colWidths=[25, CONTENT_WIDTH - 225, 40, 80, 80], repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), NAVY),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("ALIGN", (0, 0), (0, -1), "CENTER"),
            ("ALIGN", (2, 0), (2, -1), "CENTER"),
            ("ALIGN", (3, 0), (-1, -1), "RIGHT"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("LINEBELOW", (0, 0), (-1, 0), 1, NAVY),
            ("LINEBELOW", (0, 1), (-1, -2), 0.5, RULE),
            ("LINEBELOW", (0, -1), (-1, -1), 1, RULE),
            ("TOPPADDING", (0, 0), (-1, -1), 4),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ("LEFTPADDING", (0, 0), (-1, -1), 6),
            ("RIGHTPADDING", (0, 0), (-1, -1), 6),
        ]))
        return table

    def totals_rows(self, invoice: Dict[str, Any]) -> List[List[str]]:
        rows = [["Subtotal", money(invoice["subtotal"])]]
        if float(invoice.get("discount_amount") or 0) > 0:
            rows.append(["Discount", f"- {money(invoice['discount_amount'])}"])
        if invoice.get("tax_enabled"):
            half_tax = float(invoice.get("tax_amount") or 0) / 2
            half_percent = f"{float(invoice.get('tax_percentage') or 0) / 2:g}"
            rows.append([f"CGST ({half_percent}%)", money(half_tax)])
            rows.append([f"SGST ({half_percent}%)", money(half_tax)])
        rows.append(["TOTAL", money(invoice["total_amount"])])
        return rows

    def _totals_table(self, invoice, styles) -> Table:
        rows = self.totals_rows(invoice)
        totals = Table(rows, colWidths=[120, 100])
        commands = [
            ("FONTSIZE", (0, 0), (-1, -2), 9),
            ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ("LINEBELOW", (0, 0), (-1, -3), 0.5, colors.HexColor("#eeeeee")),
            ("LINEABOVE", (0, -1), (-1, -1), 2, NAVY),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, -1), (-1, -1), 13),
            ("TEXTCOLOR", (0, -1), (-1, -1), NAVY),
            ("TOPPADDING", (0, 0), (-1, -1), 4),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ]
        for i, row in enumerate(rows):
            if row[0] == "Discount":
                commands.append(("TEXTCOLOR", (1, i), (1, i), RED))
        totals.setStyle(TableStyle(commands))

        # Push the totals block to the right edge
        wrapper = Table([["", totals]], colWidths=[CONTENT_WIDTH - 220, 220])
        wrapper.setStyle(TableStyle([
            ("LEFTPADDING", (0, 0), (-1, -1), 0),
            ("RIGHTPADDING", (0, 0), (-1, -1), 0),
        ]))
        return wrapper

    def _signature(self, styles) -> Table:
        block = [
            Paragraph(f"For {_text(self.settings.business_name)}", styles["signature"]),
            Spacer(1, 25),
            HLine(120, color=colors.black, thickness=0.5),
            Paragraph("Authorized Signature", styles["signature_label"]),
        ]
        table = Table([["", block]], colWidths=[CONTENT_WIDTH - 140, 140])
        table.setStyle(TableStyle([("ALIGN", (1, 0), (1, 0), "CENTER")]))
        return table

    def _footer(self, canvas, doc):
        canvas.saveState()
        canvas.setFont("Helvetica", 9)
        canvas.setFillColor(FAINT)
        canvas.drawCentredString(A4[0] / 2, PAGE_MARGINS[3] / 2, "Thank you for your business!")
        canvas.restoreState()

    def upload_pdf(self, db, invoice: Dict[str, Any], pdf_bytes: bytes) -> str:
        """Upload to storage, record the URL on the invoice and return it"""
        url = db.upload_pdf(storage_path(invoice), pdf_bytes)
        db.update_invoice(invoice["user_id"], invoice["id"], {"pdf_url": url})
        return url
