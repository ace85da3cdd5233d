"""
Match orchestrator: turns a lead into a ranked set of assignments.

Workflow:
1. Load active professionals for the requested professional type
2. Drop professionals the customer blocked
3. Score every remaining candidate and keep positive scores
4. Rank by score (ties by professional id) and keep the top N
5. Fall back to the seed/demo pool when nothing survived step 3
6. Persist assignments, counter increments and the lead update in one
   transaction
"""
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from matching.models import Assignment, Lead, Professional
from matching.services.directory import (
    ProfessionalProfile,
    list_active_professionals,
    load_fallback_pool,
    roles_for,
)
from matching.services.errors import LeadNotFound, PersistenceFailure
from matching.services.geocoding import get_geocoder
from matching.services.preferences import CustomerPreferences, get_customer_preferences
from matching.services.scoring import LeadCriteria, score_professional

logger = logging.getLogger(__name__)


@dataclass
class ProfessionalMatch:
    professional: ProfessionalProfile
    score: float
    reasons: List[str]
    distance: Optional[float] = None
    assignment_id: Optional[int] = None

    @property
    def is_fallback(self) -> bool:
        return self.professional.fallback

    def as_dict(self) -> dict:
        return {
            'professional_id': self.professional.id,
            'professional_name': self.professional.name,
            'role': self.professional.role,
            'score': round(self.score, 2),
            'match_reasons': list(self.reasons),
            'distance_miles': round(self.distance, 1) if self.distance is not None else None,
            'tier': self.professional.tier,
            'rating': self.professional.rating_average,
            'total_reviews': self.professional.total_reviews,
            'fallback_professional': self.professional.fallback,
            'assignment_id': self.assignment_id,
        }


@dataclass
class MatchResult:
    lead_id: int
    matched_professionals: List[ProfessionalMatch] = field(default_factory=list)
    fallback_used: bool = False
    already_matched: bool = False

    @property
    def assignment_ids(self) -> List[int]:
        return [m.assignment_id for m in self.matched_professionals if m.assignment_id is not None]

    def as_dict(self) -> dict:
        return {
            'lead_id': self.lead_id,
            'matched_professionals': [m.as_dict() for m in self.matched_professionals],
            'fallback_used': self.fallback_used,
        }


def _max_results() -> int:
    return getattr(settings, 'MATCHING_MAX_RESULTS', 5)


def _response_window() -> timedelta:
    return timedelta(hours=getattr(settings, 'MATCHING_RESPONSE_WINDOW_HOURS', 48))


def rank_candidates(
    candidates: List[ProfessionalProfile],
    criteria: LeadCriteria,
    preferences: CustomerPreferences,
    geocoder=None,
    now=None,
    limit: Optional[int] = None,
) -> List[ProfessionalMatch]:
    """
    Score, filter and rank candidates.

    Blocked professionals are removed before scoring. Only positive scores
    survive. Equal scores are ordered by professional id.
    """
    limit = _max_results() if limit is None else limit
    matches = []
    for professional in candidates:
        if preferences.is_blocked(professional.id):
            logger.debug(f"Skipping blocked professional {professional.id}")
            continue
        result = score_professional(professional, criteria, preferences, geocoder=geocoder, now=now)
        if result.score > 0:
            matches.append(ProfessionalMatch(
                professional=professional,
                score=result.score,
                reasons=result.reasons,
                distance=result.distance,
            ))

    matches.sort(key=lambda m: (-m.score, m.professional.id))
    return matches[:limit]


def _load_lead(lead_id) -> Lead:
    try:
        return Lead.objects.get(id=lead_id)
    except Lead.DoesNotExist:
        logger.error(f"Lead {lead_id} not found in database")
        raise LeadNotFound(f"Lead {lead_id} not found")


def _existing_result(lead: Lead) -> MatchResult:
    matches = []
    for assignment in lead.assignments.select_related('professional').order_by('-score', 'professional_ref'):
        if assignment.professional is not None:
            profile = ProfessionalProfile.from_model(assignment.professional)
        else:
            profile = ProfessionalProfile(
                id=assignment.professional_ref,
                name=assignment.professional_name,
                email='',
                role='',
                fallback=assignment.fallback_professional,
            )
        matches.append(ProfessionalMatch(
            professional=profile,
            score=assignment.score,
            reasons=list(assignment.match_reasons),
            distance=assignment.distance_miles,
            assignment_id=assignment.id,
        ))
    return MatchResult(
        lead_id=lead.id,
        matched_professionals=matches,
        fallback_used=any(m.is_fallback for m in matches),
        already_matched=True,
    )


def _persist_matches(lead: Lead, matches: List[ProfessionalMatch], now) -> bool:
    """
    Write assignments, bump weekly counters and activate the lead atomically.

    Counters are incremented with an F() expression so concurrent matches
    never lose an update.

    Returns:
        False when another worker activated the lead first; nothing is written
    """
    expires_at = now + _response_window()

    with transaction.atomic():
        locked_lead = Lead.objects.select_for_update().get(id=lead.id)
        if locked_lead.status != Lead.Status.NEW:
            return False

        for match in matches:
            profile = match.professional
            assignment = Assignment.objects.create(
                lead=locked_lead,
                professional_id=profile.pk if not profile.fallback else None,
                professional_ref=profile.id,
                professional_name=profile.name,
                customer_id=locked_lead.customer_id,
                customer_name=locked_lead.customer_name,
                material=locked_lead.material,
                zip_code=locked_lead.zip_code,
                assigned_at=now,
                expires_at=expires_at,
                status=Assignment.Status.ASSIGNED,
                notified=False,
                score=match.score,
                match_reasons=match.reasons,
                distance_miles=match.distance,
                fallback_professional=profile.fallback,
            )
            match.assignment_id = assignment.id

            if not profile.fallback:
                Professional.objects.filter(pk=profile.pk).update(
                    leads_received_this_week=F('leads_received_this_week') + 1
                )

        locked_lead.status = Lead.Status.ACTIVE
        locked_lead.matched_at = now
        locked_lead.matched_professionals = [m.as_dict() for m in matches]
        locked_lead.save(update_fields=['status', 'matched_at', 'matched_professionals', 'updated_at'])
        lead.status = locked_lead.status
    return True


def match_lead(lead_id, lead_data: Optional[Lead] = None, now=None) -> MatchResult:
    """
    Match a lead against the professional directory and record assignments.

    Matching is all-or-nothing: either every assignment is written and the
    lead becomes ACTIVE, or nothing changes and the lead stays NEW. Calling
    it again for a lead that is already matched returns the stored matches.

    Args:
        lead_id: ID of the Lead to match
        lead_data: Already-loaded Lead instance, to skip the lookup
        now: Reference time (defaults to timezone.now())

    Returns:
        MatchResult with the ranked matches (empty when nobody qualified)

    Raises:
        LeadNotFound: If the lead does not exist
        PersistenceFailure: If any directory, preference or write query fails
    """
    now = now or timezone.now()

    try:
        lead = lead_data if lead_data is not None else _load_lead(lead_id)
        logger.info(f"Matching lead {lead.id}, current status: {lead.status}")

        if lead.status != Lead.Status.NEW:
            logger.info(f"Lead {lead.id} already {lead.status}, returning stored matches")
            return _existing_result(lead)

        criteria = LeadCriteria.from_lead(lead)
        roles = roles_for(lead.professional_type)
        geocoder = get_geocoder()

        candidates = list_active_professionals(roles)
        preferences = get_customer_preferences(lead.customer_id)

        matches = rank_candidates(candidates, criteria, preferences, geocoder=geocoder, now=now)
        fallback_used = False

        if not matches:
            logger.warning(
                f"Lead {lead.id}: no live candidates among {len(candidates)} professionals, "
                f"scoring fallback pool"
            )
            fallback_pool = load_fallback_pool(roles)
            matches = rank_candidates(fallback_pool, criteria, preferences, geocoder=geocoder, now=now)
            fallback_used = bool(matches)

        if not matches:
            logger.warning(f"Lead {lead.id}: no professionals matched, lead stays {lead.status}")
            return MatchResult(lead_id=lead.id)

        if not _persist_matches(lead, matches, now):
            logger.info(f"Lead {lead.id} was matched concurrently, returning stored matches")
            lead.refresh_from_db()
            return _existing_result(lead)

    except DatabaseError as e:
        logger.error(f"Lead {lead_id}: matching aborted by persistence failure: {e}", exc_info=True)
        raise PersistenceFailure(str(e)) from e

    logger.info(
        f"Lead {lead.id} matched with {len(matches)} professionals "
        f"(fallback={fallback_used}): {[m.professional.id for m in matches]}"
    )
    return MatchResult(lead_id=lead.id, matched_professionals=matches, fallback_used=fallback_used)
