"""
Domain services: complaint lifecycle, notifications, queries, directory, storage and email
"""
