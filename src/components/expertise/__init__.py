"""
Expertise component - certifications, competitions and expertise areas.
"""

from ._impl import ExpertiseService, OrderedCollectionService

__all__ = [
    "ExpertiseService",
    "OrderedCollectionService",
]
