"""
Email Service for BlastDesk
===========================
Two SMTP transports share one server but authenticate separately:
- verification: sender-address verification codes and other system mail
- blast: campaign mail, sent with the campaign's sender display name and
  optional attachments (the personalised e-card PDF)
"""

import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.mime.application import MIMEApplication
from email.utils import formataddr
from dataclasses import dataclass
from typing import Optional, List

from blastdesk.core.config import settings
from blastdesk.core.logging_config import logger


VERIFICATION_TRANSPORT = "verification"
BLAST_TRANSPORT = "blast"


@dataclass
class EmailAttachment:
    filename: str
    content: bytes
    content_type: str = "application/pdf"


class EmailService:
    """Async email service over SMTP"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.use_tls = settings.SMTP_USE_TLS
        self.start_tls = settings.SMTP_START_TLS
        self.validate_certs = settings.SMTP_VALIDATE_CERTS
        self.timeout = settings.SMTP_TIMEOUT

        self.verification_user = settings.SMTP_USER
        self.verification_password = settings.SMTP_PASSWORD
        self.verification_from_name = settings.VERIFICATION_FROM_NAME

        self.blast_user = settings.BLAST_SMTP_USER
        self.blast_password = settings.BLAST_SMTP_PASSWORD
        self.default_sender_name = settings.DEFAULT_SENDER_NAME

    @property
    def is_configured(self) -> bool:
        """Check if the verification transport has credentials"""
        return bool(self.verification_user and self.verification_password)

    @property
    def is_blast_configured(self) -> bool:
        """Check if the blast transport has credentials"""
        return bool(self.blast_user and self.blast_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send a system email through the verification transport.

        Returns True if successful, False otherwise.
        """
        if not self.is_configured:
            logger.warning("[Email] Verification transport not configured, skipping email send")
            return False

        message = MIMEMultipart("alternative")
        message["From"] = formataddr((self.verification_from_name, self.verification_user))
        message["To"] = to_email
        message["Subject"] = subject

        if text_content:
            message.attach(MIMEText(text_content, "plain"))
        message.attach(MIMEText(html_content, "html"))

        return await self._send_via_smtp(
            message,
            to_email=to_email,
            username=self.verification_user,
            password=self.verification_password,
            transport=VERIFICATION_TRANSPORT,
        )

    async def send_blast_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        sender_name: Optional[str] = None,
        attachments: Optional[List[EmailAttachment]] = None
    ) -> bool:
        """
        Send one campaign email through the blast transport.

        The From header carries the campaign sender's display name with the
        blast account's address, falling back to DEFAULT_SENDER_NAME.
        """
        if not self.is_blast_configured:
            logger.warning("[Email] Blast transport not configured, skipping email send")
            return False

        message = MIMEMultipart("mixed")
        message["From"] = formataddr((sender_name or self.default_sender_name, self.blast_user))
        message["To"] = to_email
        message["Subject"] = subject
        message.attach(MIMEText(html_content, "html"))

        for attachment in attachments or []:
            subtype = attachment.content_type.split("/", 1)[-1]
            part = MIMEApplication(attachment.content, _subtype=subtype)
            part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
            message.attach(part)

        return await self._send_via_smtp(
            message,
            to_email=to_email,
            username=self.blast_user,
            password=self.blast_password,
            transport=BLAST_TRANSPORT,
        )

    async def _send_via_smtp(
        self,
        message: MIMEMultipart,
        to_email: str,
        username: str,
        password: str,
        transport: str
    ) -> bool:
        """Send a prepared message via SMTP"""
        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=username,
                password=password,
                use_tls=self.use_tls,
                start_tls=self.start_tls and not self.use_tls,
                validate_certs=self.validate_certs,
                timeout=self.timeout,
            )

            logger.log_email_event(transport, to_email, True, subject=message["Subject"])
            return True

        except Exception as e:
            logger.error(f"[Email/SMTP] Failed to send {transport} email to {to_email}: {e}")
            logger.log_email_event(transport, to_email, False, subject=message["Subject"], error=str(e))
            return False

    async def send_verification_code(self, to_email: str, code: str) -> bool:
        """Send a sender-verification code"""
        return await self.send_email(
            to_email=to_email,
            subject="Your Verification Code",
            html_content=f"<b>Your verification code is: {code}</b>",
            text_content=f"Your verification code is: {code}",
        )


# Singleton instance
email_service = EmailService()
