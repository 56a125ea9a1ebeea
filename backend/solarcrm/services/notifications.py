import smtplib
from email.message import EmailMessage

from solarcrm.core.config import settings
from solarcrm.core.logging import logger
from solarcrm.db.models.reclamation import Reclamation


def build_reclamation_email(r: Reclamation, to_addr: str, name: str) -> EmailMessage:
    p = r.project
    address = (p.installation_person_address or "") if p else ""
    msg = EmailMessage()
    msg["Subject"] = f"Reclamation #{r.id} assigned to your crew"
    msg["From"] = settings.MAIL_FROM
    msg["To"] = to_addr
    msg.set_content(
        f"Hello {name},\n\n"
        f"Reclamation #{r.id} for project #{r.project_id} has been assigned to your crew.\n"
        f"Deadline: {r.deadline.isoformat()}\n"
        f"Address: {address or '-'}\n\n"
        f"{r.description}\n\n"
        "Open the worker app to accept or decline it.\n"
    )
    return msg


def send_messages(messages: list[EmailMessage]) -> int:
    if not settings.SMTP_HOST:
        logger.info("smtp_not_configured", skipped=len(messages))
        return 0
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as s:
        s.starttls()
        if settings.SMTP_USER and settings.SMTP_PASSWORD:
            s.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        for msg in messages:
            s.send_message(msg)
    return len(messages)
