"""
Tests for the match orchestrator.
"""
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from matching.models import Assignment, CustomerPreference, Lead, Professional
from matching.services.directory import ProfessionalProfile
from matching.services.errors import LeadNotFound, PersistenceFailure
from matching.services.orchestrator import match_lead, rank_candidates
from matching.services.preferences import CustomerPreferences, NO_PREFERENCES, update_preference
from matching.services.scoring import LeadCriteria, score_professional


@pytest.mark.django_db
class TestMatchLeadHappyPath:

    def test_creates_assignments_and_activates_lead(self, make_lead, make_professional):
        """NEW lead with qualified professionals becomes ACTIVE with one assignment each."""
        first = make_professional()
        second = make_professional(zip_codes_served=['80202'], zip_code='80202')
        lead = make_lead()

        result = match_lead(lead.id)

        lead.refresh_from_db()
        assert lead.status == Lead.Status.ACTIVE
        assert lead.matched_at is not None
        assert result.fallback_used is False
        assert result.already_matched is False
        assert [m.professional.id for m in result.matched_professionals] == [str(first.pk), str(second.pk)]
        assert [m['professional_id'] for m in lead.matched_professionals] == [str(first.pk), str(second.pk)]

        assignments = Assignment.objects.filter(lead=lead)
        assert assignments.count() == 2
        for assignment in assignments:
            assert assignment.status == Assignment.Status.ASSIGNED
            assert assignment.notified is False
            assert assignment.fallback_professional is False
            assert assignment.customer_id == lead.customer_id
            assert assignment.material == 'tiles'
            assert (assignment.expires_at - assignment.assigned_at).total_seconds() == 48 * 3600
        assert set(result.assignment_ids) == set(assignments.values_list('id', flat=True))

    def test_counters_incremented_once_per_assignment(self, make_lead, make_professional):
        professional = make_professional(leads_received_this_week=3)
        lead = make_lead()

        match_lead(lead.id)

        professional.refresh_from_db()
        assert professional.leads_received_this_week == 4

    def test_caps_results(self, make_lead, make_professional):
        for _ in range(7):
            make_professional()
        lead = make_lead()

        result = match_lead(lead.id)

        assert len(result.matched_professionals) == 5
        assert Assignment.objects.filter(lead=lead).count() == 5
        scores = [m.score for m in result.matched_professionals]
        assert scores == sorted(scores, reverse=True)
        assert all(score > 0 for score in scores)

    def test_respects_configured_limit(self, make_lead, make_professional, settings):
        settings.MATCHING_MAX_RESULTS = 2
        for _ in range(4):
            make_professional()

        result = match_lead(make_lead().id)

        assert len(result.matched_professionals) == 2

    def test_higher_score_ranks_first(self, make_lead, make_professional):
        plain = make_professional()
        premium = make_professional(tier=Professional.Tier.PREMIUM)

        result = match_lead(make_lead().id)

        assert [m.professional.id for m in result.matched_professionals] == [str(premium.pk), str(plain.pk)]

    def test_role_filter(self, make_lead, make_professional):
        vendor = make_professional(role=Professional.Role.VENDOR)
        make_professional(role=Professional.Role.TRADE)

        result = match_lead(make_lead(professional_type=Lead.ProfessionalType.VENDOR).id)

        assert [m.professional.id for m in result.matched_professionals] == [str(vendor.pk)]

    def test_inactive_professionals_ignored(self, make_lead, make_professional, settings):
        settings.MATCHING_FALLBACK_ENABLED = False
        make_professional(active=False)
        lead = make_lead()

        result = match_lead(lead.id)

        assert result.matched_professionals == []

    def test_lead_data_skips_lookup(self, make_lead, make_professional):
        make_professional()
        lead = make_lead()

        with patch('matching.services.orchestrator._load_lead') as mock_load:
            result = match_lead(lead.id, lead_data=lead)

        mock_load.assert_not_called()
        assert len(result.matched_professionals) == 1


@pytest.mark.django_db
class TestMatchLeadPreferences:

    def test_blocked_professional_excluded(self, make_lead, make_professional):
        blocked = make_professional(tier=Professional.Tier.PREMIUM)
        allowed = make_professional()
        CustomerPreference.objects.create(customer_id='customer-1', blocked_professionals=[str(blocked.pk)])

        result = match_lead(make_lead(customer_id='customer-1').id)

        assert [m.professional.id for m in result.matched_professionals] == [str(allowed.pk)]
        blocked.refresh_from_db()
        assert blocked.leads_received_this_week == 0

    def test_favorite_gets_bonus(self, make_lead, make_professional):
        make_professional(tier=Professional.Tier.PREMIUM)
        favorite = make_professional()
        update_preference('customer-1', 'favorite', favorite.pk)

        result = match_lead(make_lead(customer_id='customer-1').id)

        top = result.matched_professionals[0]
        assert top.professional.id == str(favorite.pk)
        assert 'Your favorite professional' in top.reasons

    def test_blocking_after_match_only_affects_future_leads(self, make_lead, make_professional):
        """A professional blocked after being matched stays on the old lead only."""
        professional_b = make_professional()
        other = make_professional()
        first_lead = make_lead(customer_id='customer-1')
        match_lead(first_lead.id)

        update_preference('customer-1', 'block', professional_b.pk)
        second_result = match_lead(make_lead(customer_id='customer-1').id)

        first_lead.refresh_from_db()
        assert str(professional_b.pk) in [m['professional_id'] for m in first_lead.matched_professionals]
        assert Assignment.objects.filter(lead=first_lead, professional=professional_b).exists()
        assert [m.professional.id for m in second_result.matched_professionals] == [str(other.pk)]


@pytest.mark.django_db
class TestMatchLeadFallback:

    def test_empty_directory_uses_flagged_fallback_pool(self, make_lead):
        lead = make_lead(zip_code='80301', material_categories=['tiles'])

        result = match_lead(lead.id)

        assert result.fallback_used is True
        assert result.matched_professionals
        assert result.matched_professionals[0].professional.id == 'fallback-rocky-mountain-tile'
        assert all(m.is_fallback for m in result.matched_professionals)
        assert all(m['fallback_professional'] for m in result.as_dict()['matched_professionals'])

        assignments = Assignment.objects.filter(lead=lead)
        assert assignments.count() == len(result.matched_professionals)
        assert all(a.fallback_professional and a.professional is None for a in assignments)
        lead.refresh_from_db()
        assert lead.status == Lead.Status.ACTIVE

    def test_fallback_skipped_when_live_candidates_match(self, make_lead, make_professional):
        make_professional()

        result = match_lead(make_lead().id)

        assert result.fallback_used is False
        assert not any(m.is_fallback for m in result.matched_professionals)

    def test_no_matches_leaves_lead_new(self, make_lead, settings):
        settings.MATCHING_FALLBACK_ENABLED = False
        lead = make_lead()

        result = match_lead(lead.id)

        assert result.matched_professionals == []
        lead.refresh_from_db()
        assert lead.status == Lead.Status.NEW
        assert not Assignment.objects.filter(lead=lead).exists()


@pytest.mark.django_db
class TestMatchLeadIdempotency:

    def test_second_call_returns_stored_matches(self, make_lead, make_professional):
        professional = make_professional()
        lead = make_lead()
        first = match_lead(lead.id)

        second = match_lead(lead.id)

        assert second.already_matched is True
        assert second.assignment_ids == first.assignment_ids
        assert Assignment.objects.filter(lead=lead).count() == 1
        professional.refresh_from_db()
        assert professional.leads_received_this_week == 1

    def test_concurrent_activation_writes_nothing(self, make_lead, make_professional):
        """Another worker activated the lead between load and persist."""
        make_professional()
        lead = make_lead()
        Lead.objects.filter(pk=lead.pk).update(status=Lead.Status.ACTIVE)

        result = match_lead(lead.id, lead_data=lead)

        assert result.already_matched is True
        assert result.matched_professionals == []
        assert not Assignment.objects.filter(lead=lead).exists()
        assert Professional.objects.get().leads_received_this_week == 0


@pytest.mark.django_db
class TestMatchLeadFailures:

    def test_unknown_lead(self):
        with pytest.raises(LeadNotFound):
            match_lead(999999)

    def test_directory_failure(self, make_lead):
        lead = make_lead()

        with patch(
            'matching.services.orchestrator.list_active_professionals',
            side_effect=DatabaseError('directory down')
        ):
            with pytest.raises(PersistenceFailure):
                match_lead(lead.id)

        lead.refresh_from_db()
        assert lead.status == Lead.Status.NEW

    def test_preference_failure(self, make_lead, make_professional):
        make_professional()
        lead = make_lead()

        with patch(
            'matching.services.orchestrator.get_customer_preferences',
            side_effect=DatabaseError('preferences down')
        ):
            with pytest.raises(PersistenceFailure):
                match_lead(lead.id)

        assert not Assignment.objects.exists()

    def test_partial_write_rolls_back(self, make_lead, make_professional):
        """A failure on the second assignment undoes the first one and its counter bump."""
        first = make_professional(tier=Professional.Tier.PREMIUM)
        second = make_professional()
        lead = make_lead()
        real_create = Assignment.objects.create
        calls = {'n': 0}

        def flaky_create(**kwargs):
            calls['n'] += 1
            if calls['n'] == 2:
                raise DatabaseError('write failed')
            return real_create(**kwargs)

        with patch.object(Assignment.objects, 'create', side_effect=flaky_create):
            with pytest.raises(PersistenceFailure):
                match_lead(lead.id)

        lead.refresh_from_db()
        assert lead.status == Lead.Status.NEW
        assert lead.matched_professionals == []
        assert not Assignment.objects.exists()
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.leads_received_this_week == 0
        assert second.leads_received_this_week == 0

    def test_retry_after_failure_succeeds(self, make_lead, make_professional):
        make_professional()
        lead = make_lead()

        with patch(
            'matching.services.orchestrator.list_active_professionals',
            side_effect=DatabaseError('directory down')
        ):
            with pytest.raises(PersistenceFailure):
                match_lead(lead.id)

        result = match_lead(lead.id)

        assert len(result.matched_professionals) == 1
        lead.refresh_from_db()
        assert lead.status == Lead.Status.ACTIVE


class TestRankCandidates:

    def profile(self, professional_id, **overrides):
        fields = {
            'id': professional_id,
            'name': professional_id,
            'email': '',
            'role': 'vendor',
            'zip_codes_served': ('80301',),
        }
        fields.update(overrides)
        return ProfessionalProfile(**fields)

    def test_ties_broken_by_id(self):
        criteria = LeadCriteria(zip_code='80301')
        candidates = [self.profile('b'), self.profile('c'), self.profile('a')]

        ranked = rank_candidates(candidates, criteria, NO_PREFERENCES, limit=5)

        assert [m.professional.id for m in ranked] == ['a', 'b', 'c']

    def test_non_positive_scores_dropped(self):
        criteria = LeadCriteria(zip_code='80301')
        nobody = self.profile('z', zip_codes_served=(), weekly_lead_limit=0, total_reviews=7)

        assert rank_candidates([nobody], criteria, NO_PREFERENCES, limit=5) == []

    def test_blocked_dropped_before_scoring(self):
        criteria = LeadCriteria(zip_code='80301')
        preferences = CustomerPreferences(blocked=frozenset({'a'}))

        with patch('matching.services.orchestrator.score_professional', wraps=score_professional) as mock_score:
            ranked = rank_candidates([self.profile('a'), self.profile('b')], criteria, preferences, limit=5)

        assert [m.professional.id for m in ranked] == ['b']
        assert mock_score.call_count == 1
