"""
API views for Match Gateway Service.
"""
import logging
import uuid
from django.conf import settings
from rest_framework.exceptions import ParseError
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from django.views.decorators.csrf import csrf_exempt
from django.utils.decorators import method_decorator

from matching.models import Lead
from matching.services.assignments import (
    PROFESSIONAL_ACTIONS,
    get_professional_assignments,
    update_assignment_status,
)
from matching.services.errors import (
    AssignmentNotFound,
    InvalidStatusTransition,
    MatchingError,
)
from matching.services.mapping import map_to_lead
from matching.services.normalization import normalize
from matching.services.orchestrator import match_lead
from matching.services.preferences import ACTIONS, update_preference
from matching.services.validation import validate_lead
from matching.tasks import enqueue_notifications, match_lead_task

logger = logging.getLogger(__name__)


def _serialize_assignment(assignment) -> dict:
    return {
        'id': assignment.id,
        'lead_id': assignment.lead_id,
        'professional_id': assignment.professional_ref,
        'professional_name': assignment.professional_name,
        'customer_name': assignment.customer_name,
        'material': assignment.material,
        'zip_code': assignment.zip_code,
        'status': assignment.status,
        'score': assignment.score,
        'match_reasons': assignment.match_reasons,
        'distance_miles': assignment.distance_miles,
        'notified': assignment.notified,
        'fallback_professional': assignment.fallback_professional,
        'assigned_at': assignment.assigned_at.isoformat(),
        'expires_at': assignment.expires_at.isoformat(),
        'responded_at': assignment.responded_at.isoformat() if assignment.responded_at else None,
    }


@method_decorator(csrf_exempt, name='dispatch')
class LeadSubmissionView(APIView):
    """
    Lead submission endpoint.

    POST /api/leads/
    - Validates and stores the lead
    - Matches it against the professional directory
    - Returns the matches, or a pending status when matching must be retried
    """

    def post(self, request):
        """
        Handle a lead submission.

        Returns:
            201 Created: Lead stored; matched or no professionals qualified
            202 Accepted: Lead stored, matching failed and will be retried
            400 Bad Request: Malformed JSON or invalid payload
            500 Internal Server Error: Unexpected error
        """
        correlation_id = str(uuid.uuid4())

        try:
            payload = request.data

            if not payload:
                logger.warning(f"Empty payload received, correlation_id={correlation_id}")
                return Response(
                    {
                        'error': 'Empty payload',
                        'correlation_id': correlation_id
                    },
                    status=status.HTTP_400_BAD_REQUEST
                )

            is_valid, rejection_reason = validate_lead(payload)
            if not is_valid:
                logger.info(f"Lead rejected: {rejection_reason}, correlation_id={correlation_id}")
                return Response(
                    {
                        'error': 'Invalid lead',
                        'rejection_reason': rejection_reason,
                        'correlation_id': correlation_id
                    },
                    status=status.HTTP_400_BAD_REQUEST
                )

            lead = Lead.objects.create(
                raw_payload=payload,
                status=Lead.Status.NEW,
                **map_to_lead(normalize(payload))
            )
            logger.info(f"Lead {lead.id} stored, correlation_id={correlation_id}")

            try:
                result = match_lead(lead.id, lead_data=lead)
            except MatchingError as e:
                logger.warning(
                    f"Lead {lead.id} matching failed ({e}), retry scheduled, "
                    f"correlation_id={correlation_id}"
                )
                match_lead_task.apply_async((lead.id,), countdown=settings.MATCH_RETRY_COUNTDOWN)
                return Response(
                    {
                        'status': 'pending',
                        'lead_id': lead.id,
                        'message': 'Could not find matches yet, will retry',
                        'correlation_id': correlation_id
                    },
                    status=status.HTTP_202_ACCEPTED
                )

            if not result.matched_professionals:
                return Response(
                    {
                        'status': 'no_matches',
                        'lead_id': lead.id,
                        'matched_professionals': [],
                        'correlation_id': correlation_id
                    },
                    status=status.HTTP_201_CREATED
                )

            enqueue_notifications(
                m.assignment_id for m in result.matched_professionals if not m.is_fallback
            )
            return Response(
                {
                    'status': 'matched',
                    'correlation_id': correlation_id,
                    **result.as_dict()
                },
                status=status.HTTP_201_CREATED
            )

        except ParseError as e:
            logger.warning(
                f"Malformed JSON payload: {e}, "
                f"correlation_id={correlation_id}"
            )
            return Response(
                {
                    'error': 'Malformed JSON',
                    'correlation_id': correlation_id
                },
                status=status.HTTP_400_BAD_REQUEST
            )
        except Exception as e:
            logger.error(
                f"Error processing lead submission: {e}, "
                f"correlation_id={correlation_id}",
                exc_info=True
            )
            return Response(
                {
                    'error': 'Internal server error',
                    'correlation_id': correlation_id
                },
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )


class LeadMatchesView(APIView):
    """GET /api/leads/<lead_id>/matches/ - match list for the customer dashboard."""

    def get(self, request, lead_id):
        try:
            lead = Lead.objects.get(id=lead_id)
        except Lead.DoesNotExist:
            return Response({'error': 'Lead not found'}, status=status.HTTP_404_NOT_FOUND)

        return Response({
            'lead_id': lead.id,
            'status': lead.status,
            'matched_at': lead.matched_at.isoformat() if lead.matched_at else None,
            'matched_professionals': lead.matched_professionals,
            'non_responsive_professionals': lead.non_responsive_professionals,
        })


class ProfessionalAssignmentsView(APIView):
    """GET /api/professionals/<professional_id>/assignments/ - professional dashboard."""

    def get(self, request, professional_id):
        assignments = get_professional_assignments(professional_id)
        return Response({
            'professional_id': str(professional_id),
            'assignments': [_serialize_assignment(a) for a in assignments],
        })


@method_decorator(csrf_exempt, name='dispatch')
class AssignmentStatusView(APIView):
    """
    POST /api/assignments/<assignment_id>/status/ with {"status": ...}

    Records a professional's response: viewed, contacted or declined.
    """

    def post(self, request, assignment_id):
        new_status = request.data.get('status') if isinstance(request.data, dict) else None
        if new_status not in PROFESSIONAL_ACTIONS:
            return Response(
                {
                    'error': 'Invalid status',
                    'allowed': [str(s) for s in PROFESSIONAL_ACTIONS]
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            assignment = update_assignment_status(assignment_id, new_status)
        except AssignmentNotFound:
            return Response({'error': 'Assignment not found'}, status=status.HTTP_404_NOT_FOUND)
        except InvalidStatusTransition as e:
            return Response(
                {
                    'error': str(e),
                    'current_status': e.current
                },
                status=status.HTTP_409_CONFLICT
            )

        return Response(_serialize_assignment(assignment))


@method_decorator(csrf_exempt, name='dispatch')
class CustomerPreferenceView(APIView):
    """
    POST /api/customers/<customer_id>/preferences/
    with {"action": "favorite|unfavorite|block|unblock", "professional_id": ...}
    """

    def post(self, request, customer_id):
        data = request.data if isinstance(request.data, dict) else {}
        action = data.get('action')
        professional_id = data.get('professional_id')

        if action not in ACTIONS or professional_id in (None, ''):
            return Response(
                {
                    'error': 'action and professional_id are required',
                    'allowed_actions': list(ACTIONS)
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        preferences = update_preference(customer_id, action, professional_id)
        return Response({
            'customer_id': customer_id,
            'favorite_professionals': sorted(preferences.favorites),
            'blocked_professionals': sorted(preferences.blocked),
        })
