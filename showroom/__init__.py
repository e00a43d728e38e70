"""
Showroom catalog sync

Keeps the product and case-study catalog in sync between a hosted JSON
document store, a local cache and the admin's edits.
"""

__version__ = "1.0.0"
