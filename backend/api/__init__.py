"""API layer - FastAPI app and routes"""
