"""
Customer preference store: favorite and blocked professionals per customer.
"""
import logging
from dataclasses import dataclass
from typing import FrozenSet

from django.db import transaction

from matching.models import CustomerPreference

logger = logging.getLogger(__name__)

FAVORITE = 'favorite'
UNFAVORITE = 'unfavorite'
BLOCK = 'block'
UNBLOCK = 'unblock'
ACTIONS = (FAVORITE, UNFAVORITE, BLOCK, UNBLOCK)


@dataclass(frozen=True)
class CustomerPreferences:
    favorites: FrozenSet[str] = frozenset()
    blocked: FrozenSet[str] = frozenset()

    def is_blocked(self, professional_id) -> bool:
        return str(professional_id) in self.blocked

    def is_favorite(self, professional_id) -> bool:
        return str(professional_id) in self.favorites


NO_PREFERENCES = CustomerPreferences()


def get_customer_preferences(customer_id) -> CustomerPreferences:
    """
    Load a customer's preferences.

    A customer without a preference record has no preferences. Database
    errors propagate.
    """
    if not customer_id:
        return NO_PREFERENCES

    try:
        record = CustomerPreference.objects.get(customer_id=str(customer_id))
    except CustomerPreference.DoesNotExist:
        logger.debug(f"No preferences stored for customer {customer_id}")
        return NO_PREFERENCES

    return CustomerPreferences(
        favorites=frozenset(str(p) for p in record.favorite_professionals or ()),
        blocked=frozenset(str(p) for p in record.blocked_professionals or ()),
    )


def update_preference(customer_id, action: str, professional_id) -> CustomerPreferences:
    """
    Apply a customer favorite/block action.

    Blocking a professional also removes them from the favorites. Blocking
    only affects future matches; existing assignments are left untouched.

    Raises:
        ValueError: If the action is unknown
    """
    if action not in ACTIONS:
        raise ValueError(f"Unknown preference action: {action}")

    professional_id = str(professional_id)

    with transaction.atomic():
        record, _ = CustomerPreference.objects.select_for_update().get_or_create(
            customer_id=str(customer_id)
        )
        favorites = [str(p) for p in record.favorite_professionals or ()]
        blocked = [str(p) for p in record.blocked_professionals or ()]

        if action == FAVORITE:
            if professional_id not in favorites:
                favorites.append(professional_id)
            blocked = [p for p in blocked if p != professional_id]
        elif action == UNFAVORITE:
            favorites = [p for p in favorites if p != professional_id]
        elif action == BLOCK:
            if professional_id not in blocked:
                blocked.append(professional_id)
            favorites = [p for p in favorites if p != professional_id]
        elif action == UNBLOCK:
            blocked = [p for p in blocked if p != professional_id]

        record.favorite_professionals = favorites
        record.blocked_professionals = blocked
        record.save(update_fields=['favorite_professionals', 'blocked_professionals', 'updated_at'])

    logger.info(f"Customer {customer_id}: {action} professional {professional_id}")
    return CustomerPreferences(favorites=frozenset(favorites), blocked=frozenset(blocked))
