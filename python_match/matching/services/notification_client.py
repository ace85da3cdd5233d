"""
Notification client for announcing new assignments to professionals.
"""
import logging
import json
import httpx
from django.conf import settings

from matching.models import Assignment

logger = logging.getLogger(__name__)


def _format_response(response: httpx.Response) -> str:
    """Return a readable response string (pretty JSON if possible)."""
    try:
        data = response.json()
        return json.dumps(data, indent=2, ensure_ascii=False)
    except (ValueError, TypeError):
        return response.text


def build_notification_payload(assignment: Assignment) -> dict:
    """Payload describing one assignment for the professional."""
    return {
        'assignment_id': assignment.id,
        'lead_id': assignment.lead_id,
        'professional_id': assignment.professional_ref,
        'professional_name': assignment.professional_name,
        'professional_email': assignment.professional.email if assignment.professional else None,
        'customer_name': assignment.customer_name,
        'material': assignment.material,
        'zip_code': assignment.zip_code,
        'score': assignment.score,
        'match_reasons': assignment.match_reasons,
        'expires_at': assignment.expires_at.isoformat(),
    }


def send_assignment_notification(payload: dict) -> httpx.Response:
    """
    Sends an assignment notification to the notification webhook.

    Args:
        payload: Notification payload from build_notification_payload()

    Returns:
        HTTP response from the webhook

    Raises:
        httpx.HTTPError: On network/timeout errors
    """
    url = settings.NOTIFICATION_WEBHOOK_URL
    token = settings.NOTIFICATION_TOKEN

    headers = {
        'Content-Type': 'application/json',
    }
    if token:
        headers['Authorization'] = f'Bearer {token}'

    logger.info(f"Sending assignment {payload.get('assignment_id')} notification to {url}")
    logger.debug(f"Payload: {payload}")

    try:
        response = httpx.post(
            url,
            json=payload,
            headers=headers,
            timeout=30.0
        )

        logger.info(f"Notification webhook response: {response.status_code}")
        logger.debug("Notification webhook response body:\n%s", _format_response(response))

        return response

    except httpx.TimeoutException as e:
        logger.error(f"Timeout sending notification: {e}")
        raise
    except httpx.ConnectError as e:
        logger.error(f"Connection error sending notification: {e}")
        raise
    except httpx.HTTPError as e:
        logger.error(f"HTTP error sending notification: {e}")
        raise
