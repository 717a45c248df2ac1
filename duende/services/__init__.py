"""Business-logic layer.

    filter_builder        - search parameters → store-agnostic EventFilter
    reconciler            - collapses duplicate postings of one event
    event_search_service  - builder → store → reconciler, upcoming counts
    night_plan_service    - cached one-evening guides per event
    trip_planner_service  - multi-day itineraries for a destination
    analytics_service     - enriched, failure-tolerant search/interaction logs
    prompts               - Spanish prompt templates for the LLM features
"""

from duende.services.analytics_service import AnalyticsService, request_metadata
from duende.services.event_search_service import EventSearchService
from duende.services.filter_builder import EventFilterBuilder
from duende.services.night_plan_service import NightPlanService
from duende.services.reconciler import reconcile_events
from duende.services.trip_planner_service import TripPlannerService

__all__ = [
    "AnalyticsService",
    "EventFilterBuilder",
    "EventSearchService",
    "NightPlanService",
    "TripPlannerService",
    "reconcile_events",
    "request_metadata",
]
