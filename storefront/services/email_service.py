"""
License Storefront - Email Service
Email sending for verification codes, license key delivery and invoices
"""
import smtplib
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import List, Optional, Tuple
import logging

from storefront.config import settings
from storefront.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

# (filename, content, mime subtype)
Attachment = Tuple[str, bytes, str]


async def send_email(
    to: str,
    subject: str,
    html_content: str,
    attachments: Optional[List[Attachment]] = None,
) -> None:
    """Send an email, or log it when EMAIL_DEV_MODE is on"""
    if settings.EMAIL_DEV_MODE:
        names = ", ".join(name for name, _, _ in attachments or [])
        logger.info(f"[EMAIL] Dev mode - to: {to} | subject: {subject}" + (f" | attachments: {names}" if names else ""))
        return

    msg = MIMEMultipart("mixed")
    msg["Subject"] = subject
    msg["From"] = formataddr((settings.EMAIL_FROM_NAME, settings.EMAIL_FROM))
    msg["To"] = to
    msg.attach(MIMEText(html_content, "html"))

    for filename, content, subtype in attachments or []:
        part = MIMEApplication(content, _subtype=subtype)
        part.add_header("Content-Disposition", "attachment", filename=filename)
        msg.attach(part)

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            server.starttls()
            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.sendmail(settings.EMAIL_FROM, to, msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email to {to}: {e}")
        raise EmailDeliveryError(f"Failed to send email to {to}") from e

    logger.info(f"Email sent to {to}")


# ============================================================
# EMAIL TEMPLATES
# ============================================================

def _layout(body: str, width: int = 600) -> str:
    address = ", ".join(settings.COMPANY_ADDRESS)
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: {width}px; margin: 0 auto;">
        <div style="background: linear-gradient(135deg, #F59E0B, #10B981); color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0;">
            <h1 style="margin: 0; font-size: 28px;">{settings.EMAIL_FROM_NAME}</h1>
            <p style="margin: 10px 0 0 0; opacity: 0.9;">"At Your Service..."</p>
        </div>
        <div style="background: white; padding: 40px; border: 1px solid #e5e7eb; border-radius: 0 0 10px 10px;">
            {body}
            <hr style="border: none; border-top: 1px solid #e5e7eb; margin: 30px 0;">
            <p style="color: #64748B; font-size: 12px; margin: 0;">
                {settings.COMPANY_NAME}<br>
                {address}
            </p>
        </div>
    </div>
    """


def get_verification_code_email(code: str) -> Tuple[str, str]:
    subject = f"{settings.EMAIL_FROM_NAME} - Email Verification Code"
    body = f"""
            <h2 style="color: #1E293B; margin-top: 0;">Email Verification</h2>
            <p style="color: #64748B; font-size: 16px; line-height: 1.5;">
                Thank you for shopping with {settings.EMAIL_FROM_NAME}. To complete your purchase, please verify your email address using the code below:
            </p>
            <div style="background: #F8FAFC; border: 2px solid #F59E0B; border-radius: 8px; padding: 20px; text-align: center; margin: 30px 0;">
                <div style="font-size: 32px; font-weight: bold; color: #F59E0B; letter-spacing: 4px;">{code}</div>
            </div>
            <p style="color: #64748B; font-size: 14px;">
                This code will expire in {settings.OTP_EXPIRY_MINUTES} minutes. If you didn't request this verification, please ignore this email.
            </p>
    """
    return subject, _layout(body)


def get_license_keys_email(order_id: str, license_keys: List[dict]) -> Tuple[str, str]:
    subject = f"{settings.EMAIL_FROM_NAME} - Your License Keys (Order #{order_id})"

    blocks = []
    for group in license_keys:
        keys_html = "".join(
            f'<div style="background: white; border: 1px solid #BAE6FD; border-radius: 4px; padding: 10px; margin: 5px 0; font-family: monospace; font-size: 14px; color: #0369A1;">{key}</div>'
            for key in group["keys"]
        )
        blocks.append(
            f'<div style="background: #F0F9FF; border: 1px solid #0EA5E9; border-radius: 8px; padding: 20px; margin: 20px 0;">'
            f'<h3 style="color: #0369A1; margin: 0 0 15px 0;">{group["productName"]}</h3>{keys_html}</div>'
        )

    body = f"""
            <h2 style="color: #1E293B; margin-top: 0;">Your License Keys Are Ready!</h2>
            <p style="color: #64748B; font-size: 16px; line-height: 1.5;">
                Thank you for your purchase! Your licenses have been generated and are ready for deployment.
            </p>
            <div style="background: #FEF3C7; border: 1px solid #F59E0B; border-radius: 8px; padding: 15px; margin: 20px 0;">
                <strong>Order ID:</strong> {order_id}
            </div>
            <h3 style="color: #1E293B;">Your License Keys:</h3>
            {"".join(blocks)}
            <div style="background: #EFF6FF; border: 1px solid #3B82F6; border-radius: 8px; padding: 20px; margin: 30px 0;">
                <h4 style="color: #1E40AF; margin: 0 0 10px 0;">Next Steps:</h4>
                <ul style="color: #1E40AF; margin: 0; padding-left: 20px;">
                    <li>Save these license keys in a secure location</li>
                    <li>Download the software from the official portal</li>
                    <li>Use these keys during installation and activation</li>
                    <li>Contact our support team if you need installation assistance</li>
                </ul>
            </div>
            <div style="text-align: center;">
                <h4 style="color: #1E293B;">Need Help?</h4>
                <p style="color: #64748B; margin: 5px 0;">{settings.SUPPORT_EMAIL}</p>
                <p style="color: #64748B; margin: 5px 0;">{settings.SUPPORT_PHONE}</p>
            </div>
    """
    return subject, _layout(body, width=700)


def get_invoice_email(order_id: str) -> Tuple[str, str]:
    subject = f"{settings.EMAIL_FROM_NAME} - Invoice for Order #{order_id}"
    body = f"""
            <h2 style="color: #1E293B; margin-top: 0;">Invoice Attached</h2>
            <p style="color: #64748B; font-size: 16px; line-height: 1.5;">
                Please find attached the invoice for your recent license purchase (Order #{order_id}).
            </p>
            <p style="color: #64748B; font-size: 14px;">
                If you have any questions about your invoice, please don't hesitate to contact our support team.
            </p>
    """
    return subject, _layout(body)


# ============================================================
# SENDERS
# ============================================================

async def send_verification_code(email: str, code: str) -> None:
    subject, html = get_verification_code_email(code)
    try:
        await send_email(email, subject, html)
    except EmailDeliveryError as e:
        raise EmailDeliveryError("Failed to send verification email") from e
    if settings.EMAIL_DEV_MODE:
        logger.info(f"[EMAIL] OTP for {email}: {code}")


async def send_license_keys(email: str, order_id: str, license_keys: List[dict]) -> None:
    subject, html = get_license_keys_email(order_id, license_keys)
    try:
        await send_email(email, subject, html)
    except EmailDeliveryError as e:
        raise EmailDeliveryError("Failed to send license keys email") from e


async def send_invoice(email: str, order_id: str, invoice_pdf: bytes) -> None:
    subject, html = get_invoice_email(order_id)
    attachment = (f"{settings.ORDER_ID_PREFIX}-Invoice-{order_id}.pdf", invoice_pdf, "pdf")
    try:
        await send_email(email, subject, html, attachments=[attachment])
    except EmailDeliveryError as e:
        raise EmailDeliveryError("Failed to send invoice email") from e
