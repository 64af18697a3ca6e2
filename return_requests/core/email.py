"""Email service for return authorization notifications"""

import aiosmtplib
import html
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from return_requests.config import settings
from return_requests.models.order import Order
from return_requests.models.return_authorization import ReturnAuthorization
import logging

logger = logging.getLogger(__name__)


async def send_email(to_email: str, subject: str, html_content: str, text_content: str = None):
    """
    Send an email using SMTP

    Args:
        to_email: Recipient email address
        subject: Email subject
        html_content: HTML content of the email
        text_content: Plain text content (optional)
    """
    message = MIMEMultipart("alternative")
    message["From"] = settings.email_from
    message["To"] = to_email
    message["Subject"] = subject

    # Add text and HTML parts
    if text_content:
        message.attach(MIMEText(text_content, "plain"))
    message.attach(MIMEText(html_content, "html"))

    try:
        await aiosmtplib.send(
            message,
            hostname=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user or None,
            password=settings.smtp_password or None,
            start_tls=True,
        )
        logger.info(f"Email sent successfully to {to_email}")
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {str(e)}")
        raise


def return_label_url(return_authorization_number: str, order_token: str) -> str:
    """Public link to the label page of a return authorization"""
    return (
        f"{settings.frontend_url}/return-authorizations/"
        f"{return_authorization_number}/labels?token={order_token}"
    )


class ReturnAuthorizationMailer:
    """Sends shopper notifications for return authorizations"""

    async def notify_authorized(self, return_authorization: ReturnAuthorization, order: Order):
        """
        Tell the shopper their return was authorized

        Args:
            return_authorization: The authorization that entered the authorized state
            order: Order the authorization belongs to
        """
        if not order.email:
            logger.warning(
                f"Order {order.number} has no email; skipping authorized notice for "
                f"{return_authorization.number}"
            )
            return

        labels_link = return_label_url(return_authorization.number, order.token)
        subject = f"Your return {return_authorization.number} has been authorized"

        text_content = f"""
    Hello,

    Your return request for order {order.number} has been authorized.

    Return number: {return_authorization.number}
    Reason: {return_authorization.reason}
    Amount: ${return_authorization.amount}

    Print your return label here:
    {labels_link}
    """

        safe_number = html.escape(return_authorization.number)
        safe_reason = html.escape(return_authorization.reason)
        safe_order_number = html.escape(order.number)
        safe_labels_link = html.escape(labels_link, quote=True)

        html_content = f"""
    <!DOCTYPE html>
    <html>
    <body>
        <div class="container">
            <h2>Your return has been authorized</h2>
            <p>Your return request for order <strong>{safe_order_number}</strong> has been authorized.</p>
            <p>Return number: {safe_number}<br>
               Reason: {safe_reason}<br>
               Amount: ${return_authorization.amount}</p>
            <p><a href="{safe_labels_link}" class="return-label-link">Print your return label</a></p>
        </div>
    </body>
    </html>
    """

        await send_email(order.email, subject, html_content, text_content)
