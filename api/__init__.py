"""
Vibe Writer HTTP API (FastAPI application and routers).
"""
