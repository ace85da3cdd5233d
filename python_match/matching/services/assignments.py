"""
Professional-facing assignment operations.
"""
import logging
from typing import List

from django.db import transaction
from django.utils import timezone

from matching.models import Assignment
from matching.services.errors import AssignmentNotFound, InvalidStatusTransition

logger = logging.getLogger(__name__)

PROFESSIONAL_ACTIONS = (
    Assignment.Status.VIEWED,
    Assignment.Status.CONTACTED,
    Assignment.Status.DECLINED,
)


def update_assignment_status(assignment_id, status: str) -> Assignment:
    """
    Record a professional's response to an assignment.

    Allowed: ASSIGNED -> VIEWED/CONTACTED/DECLINED and VIEWED ->
    CONTACTED/DECLINED. CONTACTED, DECLINED and EXPIRED never change.

    Raises:
        ValueError: If status is not a professional action
        AssignmentNotFound: If the assignment does not exist
        InvalidStatusTransition: If the current state does not allow it
    """
    if status not in PROFESSIONAL_ACTIONS:
        raise ValueError(f"Unsupported assignment status: {status}")

    with transaction.atomic():
        try:
            assignment = Assignment.objects.select_for_update().get(id=assignment_id)
        except Assignment.DoesNotExist:
            raise AssignmentNotFound(f"Assignment {assignment_id} not found")

        if not assignment.can_transition_to(status):
            logger.warning(
                f"Assignment {assignment_id}: rejected transition {assignment.status} -> {status}"
            )
            raise InvalidStatusTransition(assignment.status, status)

        previous = assignment.status
        assignment.status = status
        assignment.responded_at = timezone.now()
        assignment.save(update_fields=['status', 'responded_at'])

    logger.info(f"Assignment {assignment_id}: {previous} -> {status}")
    return assignment


def get_professional_assignments(professional_id) -> List[Assignment]:
    """Assignments for one professional, newest first."""
    return list(
        Assignment.objects.filter(professional_ref=str(professional_id))
        .select_related('lead')
        .order_by('-assigned_at', '-id')
    )
