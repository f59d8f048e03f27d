"""Donation receipts: PDF rendering (reportlab) and delivery (Brevo)."""

import base64
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sib_api_v3_sdk import (
    ApiClient,
    Configuration,
    SendSmtpEmail,
    SendSmtpEmailAttachment,
    TransactionalEmailsApi,
)
from sib_api_v3_sdk.rest import ApiException

from templecms.core.config import settings
from templecms.models.donation import Donation

logger = logging.getLogger(__name__)


@dataclass
class ReceiptData:
    txnid: str
    invoice_number: str
    donor_name: str
    donor_email: str
    donor_phone: str
    amount: int
    date: datetime
    purpose: str
    pan_card: str | None = None
    address: str | None = None


def invoice_number_for(donation_id: int, when: datetime | None = None) -> str:
    """``INV-YYMM-NNNNNN``; the donation id keeps it unique."""
    when = when or datetime.now(timezone.utc)
    return f"INV-{when:%y%m}-{donation_id:06d}"


def format_inr(amount: int) -> str:
    """Indian digit grouping: 150000 -> '1,50,000'."""
    digits = str(abs(int(amount)))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups) + "," + tail
    return f"-{digits}" if amount < 0 else digits


def build_receipt(donation: Donation, purpose: str) -> ReceiptData:
    return ReceiptData(
        txnid=donation.payment_id,
        invoice_number=donation.invoice_number or invoice_number_for(donation.id),
        donor_name=donation.name,
        donor_email=donation.email,
        donor_phone=donation.phone,
        amount=donation.amount,
        date=donation.updated_at or donation.created_at,
        purpose=purpose,
        pan_card=donation.pan_card,
        address=donation.address,
    )


def _styles():
    styles = getSampleStyleSheet()
    styles.add(
        ParagraphStyle(
            name="OrgTitle",
            parent=styles["Title"],
            fontSize=18,
            spaceAfter=4,
            alignment=TA_CENTER,
            fontName="Helvetica-Bold",
        )
    )
    styles.add(
        ParagraphStyle(
            name="OrgSub",
            parent=styles["Normal"],
            fontSize=9,
            alignment=TA_CENTER,
            textColor=colors.grey,
        )
    )
    styles.add(
        ParagraphStyle(
            name="Note",
            parent=styles["Normal"],
            fontSize=8,
            textColor=colors.grey,
            leading=10,
        )
    )
    return styles


def render_receipt_pdf(receipt: ReceiptData) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title=f"Donation Receipt {receipt.invoice_number}",
        author=settings.ORG_NAME,
    )
    styles = _styles()

    elements = [
        Paragraph(escape(settings.ORG_NAME), styles["OrgTitle"]),
        Paragraph(escape(settings.ORG_ADDRESS), styles["OrgSub"]),
        Paragraph(
            escape(f"{settings.ORG_EMAIL} | {settings.ORG_PHONE}"),
            styles["OrgSub"],
        ),
        Spacer(1, 10 * mm),
        Paragraph("Donation Receipt", styles["Heading2"]),
        Spacer(1, 4 * mm),
    ]

    rows = [
        ["Receipt No.", receipt.invoice_number],
        ["Transaction ID", receipt.txnid],
        ["Date", receipt.date.strftime("%d %b %Y")],
        ["Donor", receipt.donor_name],
        ["Email", receipt.donor_email],
        ["Phone", receipt.donor_phone],
    ]
    if receipt.address:
        rows.append(["Address", receipt.address])
    if receipt.pan_card:
        rows.append(["PAN", receipt.pan_card])
    rows += [
        ["Purpose", receipt.purpose],
        ["Amount", f"INR {format_inr(receipt.amount)}"],
    ]
    table = Table(
        [[Paragraph(escape(k), styles["Normal"]), Paragraph(escape(v), styles["Normal"])]
         for k, v in rows],
        colWidths=[45 * mm, 120 * mm],
    )
    table.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
                ("BACKGROUND", (0, 0), (0, -1), colors.whitesmoke),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("TOPPADDING", (0, 0), (-1, -1), 6),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    elements += [
        table,
        Spacer(1, 8 * mm),
        Paragraph(
            "Donations are eligible for deduction under Section 80G of the Income Tax "
            "Act, 1961, subject to applicable conditions. Please quote your PAN for "
            "the deduction to be claimed.",
            styles["Note"],
        ),
        Spacer(1, 4 * mm),
        Paragraph(
            "This is a computer generated receipt and does not require a signature.",
            styles["Note"],
        ),
    ]
    doc.build(elements)
    return buffer.getvalue()


def _transactional_api() -> TransactionalEmailsApi | None:
    if not settings.BREVO_API_KEY:
        logger.warning("BREVO_API_KEY is not set; skipping email delivery")
        return None
    configuration = Configuration()
    configuration.api_key["api-key"] = settings.BREVO_API_KEY
    return TransactionalEmailsApi(ApiClient(configuration))


def _send(email: SendSmtpEmail, recipient: str) -> bool:
    api_instance = _transactional_api()
    if api_instance is None:
        return False
    try:
        api_response = api_instance.send_transac_email(email)
    except ApiException as e:
        logger.error("Brevo rejected email to %s: %s", recipient, e)
        return False
    except Exception as e:
        logger.error("Unexpected error sending email to %s: %s", recipient, e)
        return False
    logger.info("Email sent to %s (%s)", recipient, getattr(api_response, "message_id", "-"))
    return True


def send_receipt_email(receipt: ReceiptData, pdf: bytes) -> bool:
    """Email the receipt with the PDF attached. Returns whether Brevo accepted it."""
    html = f"""
    <html>
    <body>
        <p>Dear {escape(receipt.donor_name)},</p>
        <p>Thank you for your generous donation to {escape(settings.ORG_NAME)}.</p>
        <ul>
            <li><strong>Receipt No.:</strong> {escape(receipt.invoice_number)}</li>
            <li><strong>Transaction ID:</strong> {escape(receipt.txnid)}</li>
            <li><strong>Purpose:</strong> {escape(receipt.purpose)}</li>
            <li><strong>Amount:</strong> INR {format_inr(receipt.amount)}</li>
        </ul>
        <p>Your receipt is attached to this email.</p>
        <p>With blessings,<br>{escape(settings.ORG_NAME)}</p>
    </body>
    </html>
    """
    email = SendSmtpEmail(
        to=[{"email": receipt.donor_email, "name": receipt.donor_name}],
        sender={"name": settings.EMAIL_FROM_NAME, "email": settings.EMAIL_FROM},
        subject=f"Donation Receipt {receipt.invoice_number} - {settings.ORG_NAME}",
        html_content=html,
        attachment=[
            SendSmtpEmailAttachment(
                content=base64.b64encode(pdf).decode("ascii"),
                name=f"receipt-{receipt.invoice_number}.pdf",
            )
        ],
    )
    return _send(email, receipt.donor_email)


def send_failure_email(
    *, name: str, email: str, txnid: str, amount: int, purpose: str, reason: str | None = None
) -> bool:
    retry_url = f"{settings.FRONTEND_URL.rstrip('/')}/donate"
    reason_html = f"<p>Reason reported by the bank: {escape(reason)}</p>" if reason else ""
    html = f"""
    <html>
    <body>
        <p>Dear {escape(name)},</p>
        <p>Your donation of INR {format_inr(amount)} towards {escape(purpose)} did not go
        through (transaction {escape(txnid)}). No amount has been captured.</p>
        {reason_html}
        <p>You can try again at <a href="{escape(retry_url)}">{escape(retry_url)}</a>.</p>
        <p>Regards,<br>{escape(settings.ORG_NAME)}</p>
    </body>
    </html>
    """
    message = SendSmtpEmail(
        to=[{"email": email, "name": name}],
        sender={"name": settings.EMAIL_FROM_NAME, "email": settings.EMAIL_FROM},
        subject=f"Donation payment unsuccessful - {settings.ORG_NAME}",
        html_content=html,
    )
    return _send(message, email)
