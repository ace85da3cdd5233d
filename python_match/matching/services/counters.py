"""
Weekly lead counter maintenance.
"""
import logging

from matching.models import Professional

logger = logging.getLogger(__name__)


def reset_weekly_counts() -> int:
    """
    Zero ``leads_received_this_week`` for every professional in one UPDATE.

    Running it twice in the same week is harmless.

    Returns:
        Number of professional records updated
    """
    updated = Professional.objects.update(leads_received_this_week=0)
    logger.info(f"Weekly lead counts reset for {updated} professionals")
    return updated
