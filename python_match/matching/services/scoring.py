"""
Scoring engine for (lead, professional) pairs.

Scoring is additive. Each factor below contributes up to its maximum and,
when awarded, appends a reason shown to the professional:

    Exact ZIP match           50
    Proximity (no exact ZIP)  30   scaled by distance / service radius
    Material specialization   30
    Capacity availability     20   4 points per remaining weekly slot
    Customer favorite         25
    Reputation                15   or a flat 10 for new professionals
    Tier                      10   premium 10, pro 5
    Budget alignment          10   -5 when the budget is below the minimum
    Urgency                    5
    Experience                 5
    Recent activity            5

Missing data never fails scoring; the affected factor contributes nothing.
Filtering non-positive scores is the orchestrator's job.
"""
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from django.utils import timezone

from matching.models import Lead, Professional
from matching.services.directory import ProfessionalProfile
from matching.services.distance import distance_miles
from matching.services.geocoding import Coordinates
from matching.services.preferences import CustomerPreferences, NO_PREFERENCES

logger = logging.getLogger(__name__)

EXACT_ZIP_POINTS = 50
PROXIMITY_POINTS = 30
MATERIAL_POINTS = 30
CAPACITY_POINTS = 20
CAPACITY_POINTS_PER_SLOT = 4
FAVORITE_POINTS = 25
REPUTATION_POINTS = 15
NEW_PROFESSIONAL_POINTS = 10
TIER_POINTS = {
    Professional.Tier.PREMIUM: 10,
    Professional.Tier.PRO: 5,
}
BUDGET_ALIGNED_POINTS = 10
BUDGET_MISALIGNED_PENALTY = -5
URGENCY_POINTS = 5
EXPERIENCE_POINTS = 5
RECENT_ACTIVITY_POINTS = 5

ESTABLISHED_REVIEW_COUNT = 10
NEW_PROFESSIONAL_REVIEW_COUNT = 5
HIGHLY_RATED_THRESHOLD = 4.5
EXPERIENCED_YEARS = 5
RECENT_ACTIVITY_WINDOW = timedelta(days=7)


@dataclass(frozen=True)
class LeadCriteria:
    """The lead fields the scoring factors look at."""

    zip_code: str
    materials: Tuple[str, ...] = ()
    budget: Optional[Decimal] = None
    urgency: str = Lead.Urgency.MEDIUM

    @classmethod
    def from_lead(cls, lead: Lead) -> 'LeadCriteria':
        return cls(
            zip_code=lead.zip_code,
            materials=tuple(lead.material_categories or ()),
            budget=lead.budget,
            urgency=lead.urgency,
        )


@dataclass
class ScoreResult:
    score: float = 0
    reasons: List[str] = field(default_factory=list)
    distance: Optional[float] = None

    def award(self, points, reason: Optional[str] = None) -> None:
        self.score += points
        if reason:
            self.reasons.append(reason)


def _materials_match(lead_materials, professional_materials) -> bool:
    for wanted in lead_materials:
        wanted = (wanted or '').strip().lower()
        if not wanted:
            continue
        for offered in professional_materials:
            offered = (offered or '').strip().lower()
            if offered and (wanted in offered or offered in wanted):
                return True
    return False


def _professional_coordinates(professional: ProfessionalProfile, geocoder) -> Optional[Coordinates]:
    if professional.latitude is not None and professional.longitude is not None:
        return Coordinates(professional.latitude, professional.longitude)
    if geocoder is not None and professional.zip_code:
        return geocoder.resolve(professional.zip_code)
    return None


def score_professional(
    professional: ProfessionalProfile,
    lead: LeadCriteria,
    preferences: CustomerPreferences = NO_PREFERENCES,
    geocoder=None,
    now=None,
) -> ScoreResult:
    """
    Compute the match score and reasons for one professional.

    Args:
        professional: Candidate profile
        lead: Lead criteria
        preferences: The lead customer's preferences
        geocoder: Object with ``resolve(postal_code)``; None disables proximity
        now: Reference time for the recent-activity factor

    Returns:
        ScoreResult with the additive score, reasons in evaluation order and
        the distance in miles when it was computed
    """
    now = now or timezone.now()
    result = ScoreResult()

    # 1. Geography
    if lead.zip_code and lead.zip_code in professional.zip_codes_served:
        result.award(EXACT_ZIP_POINTS, 'Serves your ZIP code')
    elif geocoder is not None and professional.service_radius:
        lead_coordinates = geocoder.resolve(lead.zip_code)
        professional_coordinates = _professional_coordinates(professional, geocoder)
        if lead_coordinates and professional_coordinates:
            distance = distance_miles(professional_coordinates, lead_coordinates)
            result.distance = distance
            if distance <= professional.service_radius:
                proximity = max(0, PROXIMITY_POINTS - (distance / professional.service_radius) * PROXIMITY_POINTS)
                result.award(proximity, f"Within {round(distance)} miles")

    # 2. Material specialization
    if _materials_match(lead.materials, professional.materials):
        result.award(MATERIAL_POINTS, 'Specializes in your material')

    # 3. Capacity
    remaining = professional.remaining_capacity
    if remaining > 0:
        result.award(min(CAPACITY_POINTS, remaining * CAPACITY_POINTS_PER_SLOT), 'Has available capacity')

    # 4. Customer favorite
    if preferences.is_favorite(professional.id):
        result.award(FAVORITE_POINTS, 'Your favorite professional')

    # 5. Reputation
    if professional.total_reviews >= ESTABLISHED_REVIEW_COUNT:
        reputation = min(REPUTATION_POINTS, (professional.rating_average - 3) * 5)
        reason = 'Highly rated' if professional.rating_average >= HIGHLY_RATED_THRESHOLD else None
        result.award(reputation, reason)
    elif professional.total_reviews < NEW_PROFESSIONAL_REVIEW_COUNT:
        result.award(NEW_PROFESSIONAL_POINTS, 'New professional')

    # 6. Tier
    tier_points = TIER_POINTS.get(professional.tier, 0)
    if tier_points:
        result.award(tier_points, f"{Professional.Tier(professional.tier).label} professional")

    # 7. Budget alignment
    if lead.budget and professional.minimum_project:
        if Decimal(lead.budget) >= Decimal(professional.minimum_project):
            result.award(BUDGET_ALIGNED_POINTS, 'Budget aligned')
        else:
            result.award(BUDGET_MISALIGNED_PENALTY)

    # 8. Urgency
    if lead.urgency == Lead.Urgency.HIGH and professional.tier != Professional.Tier.FREE:
        result.award(URGENCY_POINTS, 'Available for urgent projects')

    # 9. Experience
    if professional.years_experience and professional.years_experience >= EXPERIENCED_YEARS:
        result.award(EXPERIENCE_POINTS, 'Experienced professional')

    # 10. Recent activity
    if professional.last_active and now - professional.last_active < RECENT_ACTIVITY_WINDOW:
        result.award(RECENT_ACTIVITY_POINTS, 'Recently active')

    logger.debug(f"Professional {professional.id} scored {result.score:.1f}: {result.reasons}")
    return result
