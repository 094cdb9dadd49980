"""
Verdant - Plant marketplace backend.

Packages:
- care: Care-plan parsing, scheduling and the post-purchase care calendar
- billing: Payment webhook intake (Stripe)
- web: FastAPI application
"""

__version__ = "1.0.0"
