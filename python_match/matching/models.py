"""
Data models for Match Gateway Service.
"""
from django.db import models
from django.utils import timezone


class Professional(models.Model):
    """
    A vendor (material supplier) or trade (installer) eligible to receive leads.
    Profile fields are owned by profile management; matching only reads them
    and bumps the weekly counter.
    """

    class Role(models.TextChoices):
        VENDOR = 'vendor', 'Vendor'
        TRADE = 'trade', 'Trade'

    class Tier(models.TextChoices):
        FREE = 'free', 'Free'
        PRO = 'pro', 'Pro'
        PREMIUM = 'premium', 'Premium'

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=200)
    business_name = models.CharField(max_length=200, blank=True, default='')
    role = models.CharField(max_length=10, choices=Role.choices, db_index=True)
    materials = models.JSONField(default=list, blank=True)
    zip_codes_served = models.JSONField(default=list, blank=True)
    zip_code = models.CharField(max_length=10, blank=True, default='')
    service_radius = models.PositiveIntegerField(default=50)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    weekly_lead_limit = models.PositiveIntegerField(default=10)
    leads_received_this_week = models.PositiveIntegerField(default=0)
    active = models.BooleanField(default=True, db_index=True)
    tier = models.CharField(max_length=10, choices=Tier.choices, default=Tier.FREE)
    years_experience = models.PositiveIntegerField(null=True, blank=True)
    rating_average = models.FloatField(default=0)
    total_reviews = models.PositiveIntegerField(default=0)
    report_count = models.PositiveIntegerField(default=0)
    minimum_project = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    last_active = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']
        indexes = [
            models.Index(fields=['role', 'active'], name='matching_pr_role_0a1b2c_idx'),
        ]

    def __str__(self):
        return f"{self.display_name} ({self.role})"

    @property
    def display_name(self):
        return self.business_name or self.name


class CustomerPreference(models.Model):
    """Favorite and blocked professional ids for one customer."""

    customer_id = models.CharField(max_length=200, unique=True)
    favorite_professionals = models.JSONField(default=list, blank=True)
    blocked_professionals = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Preferences for {self.customer_id}"


class Lead(models.Model):
    """
    A customer's project request.
    Starts NEW, becomes ACTIVE once assignments are recorded. Leads are
    archived, never deleted.
    """

    class Status(models.TextChoices):
        NEW = 'new', 'New'
        ACTIVE = 'active', 'Active'
        COMPLETED = 'completed', 'Completed'
        ARCHIVED = 'archived', 'Archived'

    class Urgency(models.TextChoices):
        LOW = 'low', 'Low'
        MEDIUM = 'medium', 'Medium'
        HIGH = 'high', 'High'

    class ProfessionalType(models.TextChoices):
        VENDOR = 'vendor', 'Vendor'
        TRADE = 'trade', 'Trade'
        BOTH = 'both', 'Both'

    customer_id = models.CharField(max_length=200, db_index=True)
    customer_name = models.CharField(max_length=200)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=50, blank=True, default='')
    zip_code = models.CharField(max_length=10, db_index=True)
    material_categories = models.JSONField(default=list)
    project_type = models.CharField(max_length=100, blank=True, default='')
    budget = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    timeline = models.CharField(max_length=100, blank=True, default='')
    description = models.TextField(blank=True, default='')
    urgency = models.CharField(max_length=10, choices=Urgency.choices, default=Urgency.MEDIUM)
    professional_type = models.CharField(
        max_length=10,
        choices=ProfessionalType.choices,
        default=ProfessionalType.VENDOR
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.NEW,
        db_index=True
    )
    intent_score = models.PositiveSmallIntegerField(null=True, blank=True)
    matched_professionals = models.JSONField(default=list, blank=True)
    non_responsive_professionals = models.JSONField(default=list, blank=True)
    matched_at = models.DateTimeField(null=True, blank=True)
    raw_payload = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='matching_le_status_3d4e5f_idx'),
        ]

    def __str__(self):
        return f"Lead {self.id} - {self.status}"

    @property
    def material(self):
        """Primary material category."""
        return self.material_categories[0] if self.material_categories else ''


class Assignment(models.Model):
    """
    Links one lead to one matched professional.
    Records the score and reasons shown to the professional and tracks the
    response window.
    """

    class Status(models.TextChoices):
        ASSIGNED = 'assigned', 'Assigned'
        VIEWED = 'viewed', 'Viewed'
        CONTACTED = 'contacted', 'Contacted'
        DECLINED = 'declined', 'Declined'
        EXPIRED = 'expired', 'Expired'

    TRANSITIONS = {
        Status.ASSIGNED: {Status.VIEWED, Status.CONTACTED, Status.DECLINED, Status.EXPIRED},
        Status.VIEWED: {Status.CONTACTED, Status.DECLINED},
        Status.CONTACTED: set(),
        Status.DECLINED: set(),
        Status.EXPIRED: set(),
    }

    lead = models.ForeignKey(
        Lead,
        on_delete=models.CASCADE,
        related_name='assignments'
    )
    # Null for seed/demo pool matches that have no directory record
    professional = models.ForeignKey(
        Professional,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assignments'
    )
    professional_ref = models.CharField(max_length=100)
    professional_name = models.CharField(max_length=200)
    customer_id = models.CharField(max_length=200)
    customer_name = models.CharField(max_length=200)
    material = models.CharField(max_length=100, blank=True, default='')
    zip_code = models.CharField(max_length=10)
    assigned_at = models.DateTimeField(default=timezone.now, db_index=True)
    expires_at = models.DateTimeField()
    responded_at = models.DateTimeField(null=True, blank=True)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ASSIGNED,
        db_index=True
    )
    notified = models.BooleanField(default=False)
    score = models.FloatField()
    match_reasons = models.JSONField(default=list)
    distance_miles = models.FloatField(null=True, blank=True)
    fallback_professional = models.BooleanField(default=False)

    class Meta:
        ordering = ['-assigned_at']
        constraints = [
            models.UniqueConstraint(
                fields=['lead', 'professional_ref'],
                name='unique_assignment_per_professional'
            ),
        ]
        indexes = [
            models.Index(fields=['status', 'assigned_at'], name='matching_as_status_6a7b8c_idx'),
        ]

    def __str__(self):
        return f"Assignment {self.id}: lead {self.lead_id} -> {self.professional_ref} ({self.status})"

    @property
    def is_terminal(self):
        return not self.TRANSITIONS[self.status]

    def can_transition_to(self, status):
        return status in self.TRANSITIONS[self.status]
