"""
Real Estate Listings API: listings, images, favorites and users over FastAPI.
"""

__version__ = "1.0.0"
