"""
Expiry sweeper for assignments past their response window.
"""
import logging
from collections import OrderedDict
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from matching.models import Assignment, Lead

logger = logging.getLogger(__name__)


def sweep_expired(now=None) -> int:
    """
    Expire unanswered assignments and record the non-responsive professionals.

    Every ASSIGNED assignment older than the response window becomes EXPIRED
    and its professional is appended to the lead's non-responsive list. A
    professional already listed on the lead is not appended again. The whole
    sweep commits in one transaction; on failure nothing is applied and the
    next scheduled run picks the same assignments up again.

    Returns:
        Number of assignments expired
    """
    now = now or timezone.now()
    cutoff = now - timedelta(hours=getattr(settings, 'MATCHING_RESPONSE_WINDOW_HOURS', 48))

    with transaction.atomic():
        stale = list(
            Assignment.objects.select_for_update()
            .filter(status=Assignment.Status.ASSIGNED, assigned_at__lt=cutoff)
            .order_by('assigned_at', 'id')
        )
        if not stale:
            logger.debug("No expired assignments found")
            return 0

        by_lead = OrderedDict()
        for assignment in stale:
            by_lead.setdefault(assignment.lead_id, []).append({
                'professional_id': assignment.professional_ref,
                'professional_name': assignment.professional_name,
            })

        Assignment.objects.filter(
            pk__in=[a.pk for a in stale],
            status=Assignment.Status.ASSIGNED,
        ).update(status=Assignment.Status.EXPIRED)

        for lead in Lead.objects.select_for_update().filter(pk__in=list(by_lead)):
            entries = list(lead.non_responsive_professionals or [])
            listed = {str(e.get('professional_id')) for e in entries}
            for entry in by_lead[lead.pk]:
                if entry['professional_id'] not in listed:
                    entries.append(entry)
                    listed.add(entry['professional_id'])
            lead.non_responsive_professionals = entries
            lead.save(update_fields=['non_responsive_professionals', 'updated_at'])

    logger.info(f"Expired {len(stale)} assignments across {len(by_lead)} leads")
    return len(stale)
