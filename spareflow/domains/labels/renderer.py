"""
4x6 inch shipping label PDFs, one page per box.
"""

from datetime import date
from io import BytesIO
from typing import List, Optional

from pydantic import BaseModel, Field
from reportlab.graphics.barcode import code128
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

LABEL_SIZE = (4 * inch, 6 * inch)
MARGIN = 12
MAX_CONTENT_ROWS = 8


class LabelLine(BaseModel):
    code: str
    name: str
    quantity: int


class LabelAddress(BaseModel):
    name: str
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    phone: str = ""


class LabelData(BaseModel):
    shipment_id: str
    box_number: int
    total_boxes: int
    awb_number: Optional[str] = None
    tracking_url: Optional[str] = None
    brand_name: str
    weight: float
    length: float
    breadth: float
    height: float
    priority: str = "MEDIUM"
    consignee: LabelAddress
    contents: List[LabelLine] = Field(default_factory=list)
    created_on: date = Field(default_factory=date.today)

    @property
    def box_code(self) -> str:
        return f"SHP-{self.shipment_id[-6:].upper()}-BX{self.box_number}"


def render_box_label(data: LabelData) -> bytes:
    """Render a single box label and return the PDF bytes."""
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=LABEL_SIZE)
    width, height = LABEL_SIZE
    right = width - MARGIN

    y = height - MARGIN - 14

    def line(txt: str, size: int = 9, bold: bool = False, dy: int = 12) -> None:
        nonlocal y
        c.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        c.drawString(MARGIN, y, txt)
        y -= dy

    def rule() -> None:
        nonlocal y
        c.line(MARGIN, y + 6, right, y + 6)
        y -= 6

    c.rect(MARGIN / 2, MARGIN / 2, width - MARGIN, height - MARGIN)

    line("SpareFlow", 16, True, 14)
    line(f"Shipping Label | DTDC | {data.priority} priority", 8, False, 14)
    rule()

    if data.awb_number:
        line("AWB", 8, True, 14)
        line(data.awb_number, 18, True, 8)
        barcode = code128.Code128(data.awb_number, barHeight=32, barWidth=1.1)
        y -= 34
        barcode.drawOn(c, MARGIN, y)
        y -= 14
    else:
        line("AWB PENDING", 14, True, 18)

    line(f"{data.box_code}    Box {data.box_number} of {data.total_boxes}", 10, True)
    line(
        f"Weight: {data.weight:.2f} kg    "
        f"Dims: {data.length:.0f} x {data.breadth:.0f} x {data.height:.0f} cm",
        9,
        False,
        14,
    )
    rule()

    consignee = data.consignee
    line("SHIP TO", 8, True)
    line(consignee.name[:40], 11, True, 13)
    for chunk in _wrap(consignee.address, 48)[:2]:
        line(chunk)
    line(f"{consignee.city}, {consignee.state} - {consignee.pincode}")
    if consignee.phone:
        line(f"Phone: {consignee.phone}")
    line(f"FROM: {data.brand_name[:40]}", 8, False, 14)
    rule()

    line("CONTENTS", 8, True)
    for item in data.contents[:MAX_CONTENT_ROWS]:
        row = f"{item.quantity:>3} x {item.code[:14]:<14} {item.name[:26]}"
        line(row, 8, False, 10)
    hidden = len(data.contents) - MAX_CONTENT_ROWS
    if hidden > 0:
        line(f"... and {hidden} more", 8, False, 10)

    c.setFont("Helvetica", 7)
    c.drawString(MARGIN, MARGIN + 14, f"Created {data.created_on.isoformat()}")
    if data.tracking_url:
        c.drawString(MARGIN, MARGIN + 4, data.tracking_url[:70])

    c.showPage()
    c.save()
    return buf.getvalue()


def _wrap(text: str, width: int) -> List[str]:
    words = (text or "").split()
    lines: List[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}".strip()
        if len(candidate) > width and current:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines
