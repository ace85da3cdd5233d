"""
URL configuration for matching app.
"""
from django.urls import path
from matching.views import (
    AssignmentStatusView,
    CustomerPreferenceView,
    LeadMatchesView,
    LeadSubmissionView,
    ProfessionalAssignmentsView,
)

urlpatterns = [
    path('leads/', LeadSubmissionView.as_view(), name='lead-submit'),
    path('leads/<int:lead_id>/matches/', LeadMatchesView.as_view(), name='lead-matches'),
    path(
        'professionals/<str:professional_id>/assignments/',
        ProfessionalAssignmentsView.as_view(),
        name='professional-assignments'
    ),
    path(
        'assignments/<int:assignment_id>/status/',
        AssignmentStatusView.as_view(),
        name='assignment-status'
    ),
    path(
        'customers/<str:customer_id>/preferences/',
        CustomerPreferenceView.as_view(),
        name='customer-preferences'
    ),
]
