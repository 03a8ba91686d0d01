"""
PharmaTrack API Routers

Each module in this package defines a FastAPI APIRouter for a specific
area of the application (projects, dashboard aggregates, AI reports).
Routers are included in the main FastAPI app in main.py.
"""
