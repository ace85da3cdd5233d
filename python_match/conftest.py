import os
import sys
from datetime import timedelta
from decimal import Decimal

import pytest

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'match_gateway.settings')
os.environ.setdefault('USE_SQLITE_FOR_TESTS', 'true')


@pytest.fixture(autouse=True)
def matching_settings(settings):
    """Pin matching settings so tests do not depend on the environment."""
    settings.MATCHING_MAX_RESULTS = 5
    settings.MATCHING_RESPONSE_WINDOW_HOURS = 48
    settings.MATCHING_GEOCODER = 'matching.services.geocoding.StaticZipGeocoder'
    settings.MATCHING_FALLBACK_ENABLED = True
    settings.NOTIFICATION_WEBHOOK_URL = ''
    settings.NOTIFICATION_TOKEN = ''
    return settings


@pytest.fixture
def valid_lead_payload():
    """Return a valid lead submission for testing."""
    return {
        'name': 'Jamie Rivera',
        'email': 'Jamie.Rivera@Example.com ',
        'phone': '303-555-0142',
        'zipCode': '80301',
        'materialCategory': 'tiles',
        'projectType': 'Kitchen backsplash',
        'budget': '$1,500',
        'timeline': 'Within a month',
        'description': 'Replacing the kitchen backsplash with ceramic tiles, about 30 sq ft.',
        'urgency': 'medium',
        'professionalType': 'vendor',
    }


@pytest.fixture
def invalid_zipcode_payload(valid_lead_payload):
    """Return a payload with an invalid zipCode."""
    return {**valid_lead_payload, 'zipCode': '8030'}


@pytest.fixture
def make_professional(db):
    """Factory for Professional records."""
    from matching.models import Professional

    counter = {'n': 0}

    def _make(**overrides):
        counter['n'] += 1
        fields = {
            'email': f"pro{counter['n']}@example.com",
            'name': f"Professional {counter['n']}",
            'role': Professional.Role.VENDOR,
            'materials': ['tiles'],
            'zip_codes_served': ['80301'],
            'zip_code': '80301',
            'service_radius': 50,
            'weekly_lead_limit': 10,
            'leads_received_this_week': 0,
            'tier': Professional.Tier.FREE,
            'rating_average': 0,
            'total_reviews': 0,
        }
        fields.update(overrides)
        return Professional.objects.create(**fields)

    return _make


@pytest.fixture
def make_lead(db):
    """Factory for NEW Lead records."""
    from matching.models import Lead

    def _make(**overrides):
        fields = {
            'customer_id': 'customer-1',
            'customer_name': 'Jamie Rivera',
            'customer_email': 'jamie.rivera@example.com',
            'zip_code': '80301',
            'material_categories': ['tiles'],
            'budget': Decimal('1000'),
            'urgency': Lead.Urgency.MEDIUM,
            'professional_type': Lead.ProfessionalType.VENDOR,
            'status': Lead.Status.NEW,
        }
        fields.update(overrides)
        return Lead.objects.create(**fields)

    return _make


@pytest.fixture
def make_assignment(db):
    """Factory for Assignment records on an existing lead."""
    from matching.models import Assignment

    def _make(lead, professional=None, assigned_at=None, **overrides):
        from django.utils import timezone

        assigned_at = assigned_at or timezone.now()
        fields = {
            'lead': lead,
            'professional': professional,
            'professional_ref': str(professional.pk) if professional else 'fallback-rocky-mountain-tile',
            'professional_name': professional.display_name if professional else 'Rocky Mountain Tile Supply',
            'customer_id': lead.customer_id,
            'customer_name': lead.customer_name,
            'material': lead.material,
            'zip_code': lead.zip_code,
            'assigned_at': assigned_at,
            'expires_at': assigned_at + timedelta(hours=48),
            'score': 80.0,
            'match_reasons': ['Serves your ZIP code'],
            'fallback_professional': professional is None,
        }
        fields.update(overrides)
        return Assignment.objects.create(**fields)

    return _make
