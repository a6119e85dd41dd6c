"""
Listing Board
Internship/project listings with signup, login and an admin dashboard API.

Architecture:
- PostgreSQL: users and listings
- FastAPI: auth and listings endpoints
- listingboard.session: client-side idle timeout and auto-logout
"""

__version__ = "1.0.0"
