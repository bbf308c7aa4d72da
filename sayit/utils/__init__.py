"""
Shared helpers: logging setup, request parsing and access decorators
"""
