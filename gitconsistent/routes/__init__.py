"""Route blueprints package for API endpoints.

One blueprint per route group: habits, dashboard (progress views and logs),
coach, insights, journal and settings. Each module documents its endpoints
and JSON contracts.
"""
