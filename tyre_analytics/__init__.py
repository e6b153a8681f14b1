"""
Tyre Depot Analytics

Sales analytics and intelligence reports for a tyre retailer's admin dashboard.
"""

__version__ = "1.0.0"
