"""
Showroom services

- sync/ - Cloud document sync, local cache and catalog editing
"""
