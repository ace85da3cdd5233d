"""
Purchase-intent estimate for a lead, on a 0-100 scale.
"""

BASE_SCORE = 50
URGENT_WORDS = ('urgent', 'asap')
HIGH_BUDGET_THRESHOLD = 1000


def calculate_intent_score(lead_fields: dict) -> int:
    """
    Estimate how ready the customer is to buy.

    Starts at 50 and adds points for urgent wording in the description (+30),
    a budget above 1000 (+20), both phone and email given (+10), a detailed
    description (+10) and a timeline in months (+10). Capped at 100.
    """
    score = BASE_SCORE
    description = (lead_fields.get('description') or '').lower()
    timeline = (lead_fields.get('timeline') or '').lower()
    budget = lead_fields.get('budget')

    if any(word in description for word in URGENT_WORDS):
        score += 30
    if budget and budget > HIGH_BUDGET_THRESHOLD:
        score += 20
    if lead_fields.get('customer_phone') and lead_fields.get('customer_email'):
        score += 10
    if len(description) > 50:
        score += 10
    if 'month' in timeline:
        score += 10

    return min(score, 100)
