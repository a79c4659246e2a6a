"""Application package for the academic records backend.

This package exposes the store, service, repository and model modules
used by the FastAPI application. Individual modules contain the
concrete implementations and documentation.
"""
