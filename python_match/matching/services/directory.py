"""
Professional directory: read-only view over professional records.

The live directory is the Professional table. A configured seed/demo pool
(MATCHING_FALLBACK_POOL_PATH) stands in when the live directory produces no
candidates for a lead; every profile loaded from it is flagged with
``fallback=True`` so downstream consumers never mistake it for live data.
"""
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from django.conf import settings

from matching.models import Lead, Professional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfessionalProfile:
    """Snapshot of the professional fields used for scoring."""

    id: str
    name: str
    email: str
    role: str
    materials: Tuple[str, ...] = ()
    zip_codes_served: Tuple[str, ...] = ()
    zip_code: str = ''
    service_radius: int = 50
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    weekly_lead_limit: int = 10
    leads_received_this_week: int = 0
    tier: str = Professional.Tier.FREE
    years_experience: Optional[int] = None
    rating_average: float = 0.0
    total_reviews: int = 0
    minimum_project: Optional[Decimal] = None
    last_active: Optional[datetime] = None
    fallback: bool = False
    pk: Optional[int] = field(default=None, compare=False)

    @property
    def remaining_capacity(self) -> int:
        return self.weekly_lead_limit - self.leads_received_this_week

    @classmethod
    def from_model(cls, professional: Professional) -> 'ProfessionalProfile':
        return cls(
            id=str(professional.pk),
            name=professional.display_name,
            email=professional.email,
            role=professional.role,
            materials=tuple(professional.materials or ()),
            zip_codes_served=tuple(str(z) for z in professional.zip_codes_served or ()),
            zip_code=professional.zip_code,
            service_radius=professional.service_radius,
            latitude=professional.latitude,
            longitude=professional.longitude,
            weekly_lead_limit=professional.weekly_lead_limit,
            leads_received_this_week=professional.leads_received_this_week,
            tier=professional.tier,
            years_experience=professional.years_experience,
            rating_average=professional.rating_average,
            total_reviews=professional.total_reviews,
            minimum_project=professional.minimum_project,
            last_active=professional.last_active,
            pk=professional.pk,
        )

    @classmethod
    def from_seed(cls, entry: dict) -> 'ProfessionalProfile':
        """Build a fallback profile from one seed pool entry."""
        zip_code = str(entry.get('zip_code', ''))
        minimum = entry.get('minimum_project')
        return cls(
            id=str(entry['id']),
            name=entry.get('business_name') or entry['name'],
            email=entry.get('email', ''),
            role=entry['role'],
            materials=tuple(entry.get('materials', ())),
            zip_codes_served=tuple(str(z) for z in entry.get('zip_codes_served', [zip_code] if zip_code else [])),
            zip_code=zip_code,
            service_radius=int(entry.get('service_radius', 50)),
            latitude=entry.get('latitude'),
            longitude=entry.get('longitude'),
            weekly_lead_limit=int(entry.get('weekly_lead_limit', 10)),
            leads_received_this_week=int(entry.get('leads_received_this_week', 0)),
            tier=entry.get('tier', Professional.Tier.FREE),
            years_experience=entry.get('years_experience'),
            rating_average=float(entry.get('rating_average', 0)),
            total_reviews=int(entry.get('total_reviews', 0)),
            minimum_project=Decimal(str(minimum)) if minimum is not None else None,
            fallback=True,
        )


def roles_for(professional_type: str) -> List[str]:
    """Map a lead's requested professional type to directory roles."""
    if professional_type == Lead.ProfessionalType.BOTH:
        return [Professional.Role.VENDOR, Professional.Role.TRADE]
    if professional_type == Lead.ProfessionalType.TRADE:
        return [Professional.Role.TRADE]
    return [Professional.Role.VENDOR]


def list_active_professionals(roles: Optional[Sequence[str]] = None) -> List[ProfessionalProfile]:
    """
    Return active professionals, optionally restricted to the given roles.

    Database errors propagate to the caller.
    """
    queryset = Professional.objects.filter(active=True)
    if roles:
        queryset = queryset.filter(role__in=list(roles))

    profiles = [ProfessionalProfile.from_model(p) for p in queryset.order_by('id')]
    logger.debug(f"Directory returned {len(profiles)} active professionals for roles {roles}")
    return profiles


def load_fallback_pool(roles: Optional[Sequence[str]] = None) -> List[ProfessionalProfile]:
    """
    Load the seed/demo pool configured in MATCHING_FALLBACK_POOL_PATH.

    Returns:
        Fallback profiles for the requested roles, or an empty list when the
        pool is disabled, missing or unreadable.
    """
    if not getattr(settings, 'MATCHING_FALLBACK_ENABLED', True):
        return []

    pool_path = Path(settings.MATCHING_FALLBACK_POOL_PATH)
    if not pool_path.exists():
        logger.warning(f"Fallback pool file not found: {pool_path}")
        return []

    try:
        with open(pool_path, 'r', encoding='utf-8') as f:
            entries = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Error loading fallback pool: {e}")
        return []

    profiles = []
    for entry in entries:
        try:
            profile = ProfessionalProfile.from_seed(entry)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed fallback entry {entry.get('id')}: {e}")
            continue
        if roles and profile.role not in roles:
            continue
        profiles.append(profile)

    logger.debug(f"Loaded {len(profiles)} fallback professionals")
    return profiles
