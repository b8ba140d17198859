from .listing_session import ListingSession, SessionState

__all__ = ["ListingSession", "SessionState"]
