"""
Gateway package for the chat analysis dashboard.

This package provides a FastAPI application that hides a small ordered set
of interchangeable backend analysis services behind two stable routes,
with health probing and upload forwarding that fall back across replicas.
"""
