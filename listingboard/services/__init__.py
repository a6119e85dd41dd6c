"""
Services module - data access for users and listings.
"""
