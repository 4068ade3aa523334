import mimetypes
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)


class EmailConfig(BaseSettings):
    """
    SMTP settings, loaded from environment variables / .env.
    """
    model_config = SettingsConfigDict(env_file='.env', env_ignore_empty=True, extra='ignore')

    smtp_server: str
    smtp_port: int = 25
    sender_email: str
    smtp_user: Optional[str] = None  # Optional if no authentication is needed
    smtp_password: Optional[str] = None
    default_recipients: str = ""  # Comma-separated, DEFAULT_RECIPIENTS in .env

    @property
    def recipients(self) -> List[str]:
        return [r.strip() for r in self.default_recipients.split(",") if r.strip()]


def _attachment_type(path: Path) -> tuple:
    guessed, _ = mimetypes.guess_type(path.name)
    if path.suffix.lower() == ".xlsx":
        guessed = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    maintype, _, subtype = (guessed or "application/octet-stream").partition("/")
    return maintype, subtype


def build_message(
    config: EmailConfig,
    subject: str,
    body: str,
    recipients: List[str],
    attachments: Optional[List[Path]] = None,
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = config.sender_email
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = subject
    msg.set_content(body)

    for path in attachments or []:
        path = Path(path)
        if not path.exists():
            logger.warning("Attachment not found: %s", path)
            continue
        maintype, subtype = _attachment_type(path)
        msg.add_attachment(
            path.read_bytes(),
            maintype=maintype,
            subtype=subtype,
            filename=path.name,
        )
    return msg


def send_email(
    config: EmailConfig,
    subject: str,
    body: str,
    recipients: List[str],
    attachments: Optional[List[Path]] = None,
) -> None:
    """
    Sends a plain-text email with the given report files attached.

    :raises RuntimeError: no recipients
    :raises smtplib.SMTPException: If an SMTP error occurs during sending.
    """
    if not recipients:
        raise RuntimeError("No email recipients given and DEFAULT_RECIPIENTS is empty.")

    msg = build_message(config, subject, body, recipients, attachments)

    try:
        with smtplib.SMTP(config.smtp_server, config.smtp_port) as server:
            if config.smtp_user and config.smtp_password:
                server.login(config.smtp_user, config.smtp_password)
            server.send_message(msg)
        logger.info("Email sent successfully to: %s", ", ".join(recipients))
    except smtplib.SMTPException as e:
        logger.error("SMTP error occurred: %s", e)
        raise
