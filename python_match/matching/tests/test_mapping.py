"""
Unit tests for mapping service.
"""
from decimal import Decimal

import pytest

from matching.models import Lead
from matching.services.mapping import MissingRequiredFieldError, map_to_lead
from matching.services.normalization import normalize


class TestMapToLead:
    """Tests for mapping a normalized submission to Lead fields."""

    def test_full_submission(self, valid_lead_payload):
        fields = map_to_lead(normalize(valid_lead_payload))

        assert fields['customer_id'] == 'jamie.rivera@example.com'
        assert fields['customer_name'] == 'Jamie Rivera'
        assert fields['customer_email'] == 'jamie.rivera@example.com'
        assert fields['customer_phone'] == '303-555-0142'
        assert fields['zip_code'] == '80301'
        assert fields['material_categories'] == ['tiles']
        assert fields['project_type'] == 'Kitchen backsplash'
        assert fields['budget'] == Decimal('1500')
        assert fields['timeline'] == 'Within a month'
        assert fields['urgency'] == 'medium'
        assert fields['professional_type'] == 'vendor'
        assert fields['intent_score'] == 100

    def test_defaults(self):
        fields = map_to_lead({
            'name': 'Sam',
            'email': 'sam@example.com',
            'zipCode': '80202',
            'materialCategories': ['hardwood'],
        })

        assert fields['customer_id'] == 'sam@example.com'
        assert fields['urgency'] == Lead.Urgency.MEDIUM
        assert fields['professional_type'] == Lead.ProfessionalType.VENDOR
        assert fields['budget'] is None
        assert fields['customer_phone'] == ''
        assert fields['description'] == ''
        assert fields['intent_score'] == 50

    def test_explicit_customer_id(self, valid_lead_payload):
        valid_lead_payload['customerId'] = 'cust-42'

        assert map_to_lead(normalize(valid_lead_payload))['customer_id'] == 'cust-42'

    def test_project_details_used_when_no_description(self, valid_lead_payload):
        del valid_lead_payload['description']
        valid_lead_payload['projectDetails'] = 'Patio pavers'

        assert map_to_lead(normalize(valid_lead_payload))['description'] == 'Patio pavers'

    def test_numeric_zipcode_becomes_text(self, valid_lead_payload):
        valid_lead_payload['zipCode'] = 80301

        assert map_to_lead(valid_lead_payload)['zip_code'] == '80301'

    def test_output_creates_lead(self, db, valid_lead_payload):
        lead = Lead.objects.create(**map_to_lead(normalize(valid_lead_payload)))

        assert lead.status == Lead.Status.NEW
        assert lead.material == 'tiles'

    def test_text_that_reads_like_a_boolean_is_kept(self, valid_lead_payload):
        valid_lead_payload['customerId'] = 'true'
        valid_lead_payload['materialCategory'] = 'False'

        fields = map_to_lead(normalize(valid_lead_payload))

        assert fields['customer_id'] == 'true'
        assert fields['material_categories'] == ['False']

    def test_enum_values_lowercased(self, valid_lead_payload):
        valid_lead_payload['urgency'] = ' HIGH'
        valid_lead_payload['professionalType'] = 'Both '

        fields = map_to_lead(normalize(valid_lead_payload))

        assert fields['urgency'] == Lead.Urgency.HIGH
        assert fields['professional_type'] == Lead.ProfessionalType.BOTH


class TestMapToLeadProfessionalType:
    """professionalType falls back to isLookingForPro when it is not given."""

    @pytest.fixture
    def payload(self, valid_lead_payload):
        del valid_lead_payload['professionalType']
        return valid_lead_payload

    @pytest.mark.parametrize('flag', [True, 'true', ' TRUE '])
    def test_looking_for_pro_means_trade(self, payload, flag):
        payload['isLookingForPro'] = flag

        assert map_to_lead(normalize(payload))['professional_type'] == Lead.ProfessionalType.TRADE

    @pytest.mark.parametrize('flag', [False, 'false', None, 'yes'])
    def test_not_looking_for_pro_means_vendor(self, payload, flag):
        payload['isLookingForPro'] = flag

        assert map_to_lead(normalize(payload))['professional_type'] == Lead.ProfessionalType.VENDOR

    def test_explicit_professional_type_wins(self, payload):
        payload['isLookingForPro'] = True
        payload['professionalType'] = 'vendor'

        assert map_to_lead(normalize(payload))['professional_type'] == Lead.ProfessionalType.VENDOR


class TestMapToLeadMissingFields:

    @pytest.mark.parametrize('field', ['name', 'email', 'zipCode'])
    def test_missing_required_field(self, valid_lead_payload, field):
        del valid_lead_payload[field]

        with pytest.raises(MissingRequiredFieldError) as exc_info:
            map_to_lead(valid_lead_payload)
        assert field in str(exc_info.value)

    def test_missing_material(self, valid_lead_payload):
        del valid_lead_payload['materialCategory']

        with pytest.raises(MissingRequiredFieldError):
            map_to_lead(valid_lead_payload)
