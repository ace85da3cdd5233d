"""
Django admin configuration for matching app.
"""
from django.contrib import admin
from matching.models import Assignment, CustomerPreference, Lead, Professional


class AssignmentInline(admin.TabularInline):
    """Inline display of assignments for a lead."""
    model = Assignment
    extra = 0
    fields = ('professional_ref', 'professional_name', 'status', 'score', 'assigned_at', 'expires_at',
              'notified', 'fallback_professional')
    readonly_fields = fields
    can_delete = False


@admin.register(Professional)
class ProfessionalAdmin(admin.ModelAdmin):
    """Admin interface for Professional model."""

    list_display = ('id', 'display_name', 'role', 'tier', 'zip_code', 'leads_received_this_week',
                    'weekly_lead_limit', 'active')
    list_filter = ('role', 'tier', 'active')
    search_fields = ('name', 'business_name', 'email', 'zip_code')
    readonly_fields = ('leads_received_this_week', 'created_at', 'updated_at')

    fieldsets = (
        ('Profile', {
            'fields': ('name', 'business_name', 'email', 'role', 'tier', 'active')
        }),
        ('Service Area', {
            'fields': ('zip_code', 'zip_codes_served', 'service_radius', 'latitude', 'longitude')
        }),
        ('Matching', {
            'fields': ('materials', 'minimum_project', 'years_experience', 'weekly_lead_limit',
                       'leads_received_this_week')
        }),
        ('Reputation', {
            'fields': ('rating_average', 'total_reviews', 'report_count', 'last_active'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    """Admin interface for Lead model."""

    list_display = ('id', 'customer_name', 'zip_code', 'status', 'urgency', 'intent_score', 'created_at')
    list_filter = ('status', 'urgency', 'professional_type', 'created_at')
    search_fields = ('id', 'customer_id', 'customer_email', 'zip_code')
    readonly_fields = ('created_at', 'updated_at', 'matched_at', 'raw_payload', 'matched_professionals',
                       'non_responsive_professionals', 'intent_score')

    fieldsets = (
        ('Status', {
            'fields': ('status', 'intent_score', 'matched_at')
        }),
        ('Customer', {
            'fields': ('customer_id', 'customer_name', 'customer_email', 'customer_phone')
        }),
        ('Project', {
            'fields': ('zip_code', 'material_categories', 'project_type', 'budget', 'timeline',
                       'description', 'urgency', 'professional_type')
        }),
        ('Matches', {
            'fields': ('matched_professionals', 'non_responsive_professionals'),
            'classes': ('collapse',)
        }),
        ('Audit', {
            'fields': ('raw_payload', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    inlines = [AssignmentInline]

    def has_add_permission(self, request):
        """Leads only come in through the submission endpoint."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Leads are archived, never deleted."""
        return False


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    """Admin interface for Assignment model."""

    list_display = ('id', 'lead', 'professional_ref', 'professional_name', 'status', 'score',
                    'assigned_at', 'notified', 'fallback_professional')
    list_filter = ('status', 'notified', 'fallback_professional', 'assigned_at')
    search_fields = ('lead__id', 'professional_ref', 'professional_name', 'customer_id')
    readonly_fields = ('lead', 'professional', 'professional_ref', 'professional_name', 'customer_id',
                       'customer_name', 'material', 'zip_code', 'assigned_at', 'expires_at', 'score',
                       'match_reasons', 'distance_miles', 'fallback_professional')

    def has_add_permission(self, request):
        """Assignments are only created by matching."""
        return False


@admin.register(CustomerPreference)
class CustomerPreferenceAdmin(admin.ModelAdmin):
    list_display = ('customer_id', 'updated_at')
    search_fields = ('customer_id',)
