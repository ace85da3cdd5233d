"""
Validation service for lead submission payloads.
"""
import re
import logging
from decimal import Decimal, InvalidOperation
from typing import Tuple, Optional

from django.conf import settings

from matching.models import Assignment, Lead

logger = logging.getLogger(__name__)

# Rejection codes (configurable in settings)
ZIPCODE_PATTERN_ERROR = getattr(settings, 'ZIPCODE_PATTERN_ERROR', 'ZIPCODE_INVALID')
MISSING_REQUIRED_FIELD = getattr(settings, 'MISSING_REQUIRED_FIELD', 'MISSING_REQUIRED_FIELD')
INVALID_PROFESSIONAL_TYPE = getattr(settings, 'INVALID_PROFESSIONAL_TYPE', 'INVALID_PROFESSIONAL_TYPE')
INVALID_URGENCY = getattr(settings, 'INVALID_URGENCY', 'INVALID_URGENCY')
INVALID_BUDGET = getattr(settings, 'INVALID_BUDGET', 'INVALID_BUDGET')
FIELD_TOO_LONG = getattr(settings, 'FIELD_TOO_LONG', 'FIELD_TOO_LONG')

# Zipcode pattern (configurable in settings)
ZIPCODE_PATTERN = re.compile(getattr(settings, 'ZIPCODE_PATTERN', r'^\d{5}$'))

PROFESSIONAL_TYPES = ('vendor', 'trade', 'both')
URGENCY_LEVELS = ('low', 'medium', 'high')

# Submission field -> the column it is stored in
FIELD_MAX_LENGTHS = {
    'customerId': Lead._meta.get_field('customer_id').max_length,
    'name': Lead._meta.get_field('customer_name').max_length,
    'email': Lead._meta.get_field('customer_email').max_length,
    'phone': Lead._meta.get_field('customer_phone').max_length,
    'zipCode': Lead._meta.get_field('zip_code').max_length,
    'projectType': Lead._meta.get_field('project_type').max_length,
    'timeline': Lead._meta.get_field('timeline').max_length,
}
MATERIAL_MAX_LENGTH = Assignment._meta.get_field('material').max_length


def get_material_categories(payload: dict) -> list:
    """
    Collect material categories from ``materialCategories`` (list) and
    ``materialCategory`` (single value), preserving order without duplicates.
    """
    categories = []
    listed = payload.get('materialCategories')
    if isinstance(listed, str):
        listed = [listed]
    for value in listed or []:
        if isinstance(value, str) and value.strip() and value.strip() not in categories:
            categories.append(value.strip())

    single = payload.get('materialCategory')
    if isinstance(single, str) and single.strip() and single.strip() not in categories:
        categories.insert(0, single.strip())
    return categories


def parse_budget(value) -> Optional[Decimal]:
    """
    Parse a budget value such as 800, "800" or "$1,200.50".

    Raises:
        ValueError: If the value is not a non-negative number
    """
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid budget: {value!r}")
    if isinstance(value, str):
        value = value.replace('$', '').replace(',', '').strip()
    try:
        budget = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid budget: {value!r}")
    if not budget.is_finite() or budget < 0:
        raise ValueError(f"Invalid budget: {value!r}")
    return budget


def _choice(value) -> Optional[str]:
    """Strip and lowercase an enum-style value; None when it was not given."""
    if value is None:
        return None
    text = str(value).strip().lower()
    return text or None


def _too_long_field(payload: dict) -> Optional[str]:
    for field, limit in FIELD_MAX_LENGTHS.items():
        value = payload.get(field)
        if value is not None and len(str(value).strip()) > limit:
            return field
    for category in get_material_categories(payload):
        if len(category) > MATERIAL_MAX_LENGTH:
            return 'materialCategory'
    return None


def validate_lead(payload: dict) -> Tuple[bool, Optional[str]]:
    """
    Validates a lead submission against business rules.

    Business Rules:
    1. Required fields: name, email, zipCode and at least one material category
    2. zipCode must match ZIPCODE_PATTERN (5 digits by default)
    3. professionalType, when given, is one of vendor, trade, both
    4. urgency, when given, is one of low, medium, high
    5. budget, when given, is a non-negative number
    6. text fields fit the columns they are stored in

    professionalType and urgency are compared stripped and lowercased.

    Args:
        payload: Raw lead submission

    Returns:
        Tuple of (is_valid, rejection_reason)
        - is_valid: True if lead passes all validation rules
        - rejection_reason: Rejection code if validation fails, None otherwise
    """
    logger.debug("Validating lead payload: %s", payload)
    if not payload or not isinstance(payload, dict):
        logger.debug("Validation failed: empty payload")
        return False, MISSING_REQUIRED_FIELD

    for field in ('name', 'email'):
        value = payload.get(field)
        if not isinstance(value, str) or not value.strip():
            logger.debug(f"Validation failed: missing or empty required field '{field}'")
            return False, MISSING_REQUIRED_FIELD

    zipcode = payload.get('zipCode')
    if zipcode is None or str(zipcode).strip() == '':
        logger.debug("Validation failed: missing zipCode")
        return False, MISSING_REQUIRED_FIELD

    zipcode_str = str(zipcode).strip()
    if not ZIPCODE_PATTERN.match(zipcode_str):
        logger.debug(f"Validation failed: zipCode '{zipcode_str}' does not match {ZIPCODE_PATTERN.pattern}")
        return False, ZIPCODE_PATTERN_ERROR

    if not get_material_categories(payload):
        logger.debug("Validation failed: no material category")
        return False, MISSING_REQUIRED_FIELD

    professional_type = _choice(payload.get('professionalType'))
    if professional_type is not None and professional_type not in PROFESSIONAL_TYPES:
        logger.debug(f"Validation failed: professionalType '{professional_type}'")
        return False, INVALID_PROFESSIONAL_TYPE

    urgency = _choice(payload.get('urgency'))
    if urgency is not None and urgency not in URGENCY_LEVELS:
        logger.debug(f"Validation failed: urgency '{urgency}'")
        return False, INVALID_URGENCY

    try:
        parse_budget(payload.get('budget'))
    except ValueError:
        logger.debug(f"Validation failed: budget {payload.get('budget')!r}")
        return False, INVALID_BUDGET

    too_long = _too_long_field(payload)
    if too_long:
        logger.debug(f"Validation failed: '{too_long}' exceeds its maximum length")
        return False, FIELD_TOO_LONG

    logger.debug("Validation passed")
    return True, None
