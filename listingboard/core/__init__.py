"""
Core module - configuration, logging, errors and auth helpers.
"""
