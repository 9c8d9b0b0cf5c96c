"""
TebiTrip planning core: trip request validation, daily quota, itinerary
generation with caching, place photos and saved trips.
"""

__version__ = "1.0.0"
