"""
API server package: FastAPI routes for scoring and event history.
"""
