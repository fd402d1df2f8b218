"""
HTTP API for the joke memory service (FastAPI).
"""
