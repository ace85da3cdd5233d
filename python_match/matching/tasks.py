"""
Celery tasks for matching, notification and scheduled maintenance.
"""
import logging
from celery import shared_task
import httpx
from django.conf import settings
from django.db import DatabaseError, transaction

from matching.models import Assignment
from matching.services.counters import reset_weekly_counts
from matching.services.errors import LeadNotFound, PersistenceFailure
from matching.services.expiry import sweep_expired
from matching.services.notification_client import (
    build_notification_payload,
    send_assignment_notification,
)
from matching.services.orchestrator import match_lead

logger = logging.getLogger(__name__)


class NotificationServerError(Exception):
    """Raised on a 5xx webhook response so Celery retries the notification."""
    pass


def enqueue_notifications(assignment_ids) -> None:
    """Queue one notification per assignment once the current transaction commits."""
    for assignment_id in assignment_ids:
        transaction.on_commit(lambda pk=assignment_id: notify_assignment.delay(pk))


@shared_task(
    bind=True,
    autoretry_for=(PersistenceFailure,),
    retry_backoff=30,  # Exponential backoff starting at 30s
    retry_backoff_max=480,  # Max backoff of 480s (8 minutes)
    max_retries=5,
    retry_jitter=False
)
def match_lead_task(self, lead_id: int):
    """
    Match a lead that could not be matched inline.

    Retries on persistence failures; the lead stays NEW until a run commits.

    Args:
        lead_id: ID of the Lead to match
    """
    try:
        result = match_lead(lead_id)
    except LeadNotFound:
        logger.error(f"Lead {lead_id} not found, giving up")
        return None
    except PersistenceFailure:
        logger.warning(
            f"Lead {lead_id}: match attempt {self.request.retries + 1}/{self.max_retries + 1} failed"
        )
        raise

    if not result.already_matched:
        enqueue_notifications(
            m.assignment_id for m in result.matched_professionals if not m.is_fallback
        )
    logger.info(f"Lead {lead_id}: {len(result.matched_professionals)} professionals matched")
    return result.as_dict()


@shared_task(
    bind=True,
    autoretry_for=(httpx.TimeoutException, httpx.ConnectError, NotificationServerError),
    retry_backoff=30,
    retry_backoff_max=480,
    max_retries=5,
    retry_jitter=False
)
def notify_assignment(self, assignment_id: int):
    """
    Announce an assignment to its professional and mark it notified.

    2xx marks the assignment notified, 4xx is logged and dropped, 5xx and
    network errors are retried.

    Args:
        assignment_id: ID of the Assignment to announce
    """
    try:
        assignment = Assignment.objects.select_related('professional').get(id=assignment_id)
    except Assignment.DoesNotExist:
        logger.error(f"Assignment {assignment_id} not found in database")
        raise

    if assignment.notified or assignment.fallback_professional:
        logger.debug(f"Assignment {assignment_id}: nothing to notify")
        return False

    if not settings.NOTIFICATION_WEBHOOK_URL:
        logger.warning(f"Assignment {assignment_id}: NOTIFICATION_WEBHOOK_URL not configured, skipping")
        return False

    response = send_assignment_notification(build_notification_payload(assignment))

    if 200 <= response.status_code < 300:
        Assignment.objects.filter(id=assignment_id).update(notified=True)
        logger.info(f"Assignment {assignment_id} notified")
        return True

    if 500 <= response.status_code < 600:
        logger.warning(
            f"Assignment {assignment_id}: webhook server error {response.status_code}, "
            f"will retry (attempt {self.request.retries + 1}/{self.max_retries + 1})"
        )
        raise NotificationServerError(f"Server error: {response.status_code}")

    logger.error(
        f"Assignment {assignment_id}: webhook rejected notification "
        f"with {response.status_code}, no retry"
    )
    return False


@shared_task
def sweep_expired_assignments():
    """Hourly: expire assignments past their response window."""
    try:
        expired = sweep_expired()
    except DatabaseError:
        logger.exception("Expiry sweep failed, will retry on the next run")
        raise
    return expired


@shared_task
def reset_weekly_lead_counts():
    """Weekly: zero every professional's weekly lead counter."""
    try:
        updated = reset_weekly_counts()
    except DatabaseError:
        logger.exception("Weekly lead count reset failed, will retry on the next run")
        raise
    return updated
