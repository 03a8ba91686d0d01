"""
PharmaTrack Backend Package

FastAPI-based backend for tracking pharmaceutical manufacturer partnerships.
Provides REST API endpoints for project management, monthly sales records,
dashboard aggregates, and AI monthly reports.
"""
