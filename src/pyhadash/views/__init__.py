"""Derived, read-only projections of the dashboard state."""

from pyhadash.views.areas import build_area_view, build_area_view_for_state
from pyhadash.views.filters import RelevanceFilter, default_relevance_filter, show_everything
from pyhadash.views.related import entity_type_for, related_entities

__all__ = [
    "RelevanceFilter",
    "build_area_view",
    "build_area_view_for_state",
    "default_relevance_filter",
    "entity_type_for",
    "related_entities",
    "show_everything",
]
