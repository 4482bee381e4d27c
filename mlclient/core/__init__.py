"""
Core definitions shared by the API layer and the local engine.

Status codes, resource id patterns and the exception hierarchy.
"""
