from sqlalchemy.orm import Session

from solarcrm.worker.celery_app import celery_app
from solarcrm.core.logging import logger
from solarcrm.db.session import SessionLocal
import solarcrm.db.models  # noqa: F401
from solarcrm.crud.crews import list_member_emails
from solarcrm.crud.reclamations import get_reclamation
from solarcrm.services.notifications import build_reclamation_email, send_messages


@celery_app.task(name="notifications.reclamation_assigned", bind=True, max_retries=3, default_retry_delay=60)
def reclamation_assigned_task(self, reclamation_id: int):
    db: Session = SessionLocal()
    try:
        r = get_reclamation(db, reclamation_id)
        if not r:
            logger.error("reclamation_missing", reclamation_id=reclamation_id)
            return 0

        recipients = list_member_emails(db, r.current_crew_id)
        if not recipients:
            logger.info("reclamation_notify_no_recipients", reclamation_id=r.id, crew_id=r.current_crew_id)
            return 0

        messages = [build_reclamation_email(r, addr, name) for addr, name in recipients]
        sent = send_messages(messages)
        logger.info("reclamation_notified", reclamation_id=r.id, crew_id=r.current_crew_id, sent=sent)
        return sent

    except OSError as e:
        # smtplib errors are OSError subclasses; the reclamation itself is already stored
        logger.warning("reclamation_notify_failed", reclamation_id=reclamation_id, error=str(e))
        if celery_app.conf.task_always_eager:
            return 0
        raise self.retry(exc=e)

    finally:
        db.close()