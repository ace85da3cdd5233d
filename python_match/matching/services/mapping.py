"""
Mapping service for turning a normalized submission into Lead fields.

The submission uses the web form's camelCase names; the Lead model uses
snake_case fields with defaults for everything optional.
"""
import logging
from typing import Any

from matching.models import Lead
from matching.services.intent import calculate_intent_score
from matching.services.validation import get_material_categories, parse_budget

logger = logging.getLogger(__name__)


class MissingRequiredFieldError(Exception):
    """Raised when a field the Lead cannot do without is missing."""
    pass


def _text(payload: dict, key: str, default: str = '') -> str:
    value: Any = payload.get(key)
    if value is None:
        return default
    return str(value).strip()


def _flag(payload: dict, key: str) -> bool:
    value = payload.get(key)
    if isinstance(value, str):
        return value.strip().lower() == 'true'
    return value is True


def _professional_type(payload: dict) -> str:
    """
    Explicit professionalType wins; otherwise a customer looking for a pro
    (isLookingForPro) wants trades, and everyone else wants vendors.
    """
    professional_type = _text(payload, 'professionalType').lower()
    if professional_type:
        return professional_type
    if _flag(payload, 'isLookingForPro'):
        return Lead.ProfessionalType.TRADE
    return Lead.ProfessionalType.VENDOR


def map_to_lead(payload: dict) -> dict:
    """
    Maps a normalized lead submission to Lead model fields.

    Defaults:
    - customer_id: the customer's email when no customerId is given
    - urgency: medium
    - professional_type: trade when isLookingForPro is set, else vendor

    Args:
        payload: Normalized submission

    Returns:
        Keyword arguments for Lead.objects.create()

    Raises:
        MissingRequiredFieldError: If name, email, zipCode or material is missing
    """
    for field in ('name', 'email', 'zipCode'):
        if not _text(payload, field):
            raise MissingRequiredFieldError(f"Missing required field: {field}")

    materials = get_material_categories(payload)
    if not materials:
        raise MissingRequiredFieldError("Missing required field: materialCategory")

    email = _text(payload, 'email').lower()
    lead_fields = {
        'customer_id': _text(payload, 'customerId') or email,
        'customer_name': _text(payload, 'name'),
        'customer_email': email,
        'customer_phone': _text(payload, 'phone'),
        'zip_code': _text(payload, 'zipCode'),
        'material_categories': materials,
        'project_type': _text(payload, 'projectType'),
        'budget': parse_budget(payload.get('budget')),
        'timeline': _text(payload, 'timeline'),
        'description': _text(payload, 'description') or _text(payload, 'projectDetails'),
        'urgency': _text(payload, 'urgency').lower() or Lead.Urgency.MEDIUM,
        'professional_type': _professional_type(payload),
    }
    lead_fields['intent_score'] = calculate_intent_score(lead_fields)

    logger.debug(f"Mapped submission to {len(lead_fields)} lead fields")
    return lead_fields
