"""
Campus Recruitment API
REST backend for the campus recruitment platform.

Architecture:
- FastAPI application assembled in app.main
- MongoDB reached through one shared connection manager (app.db.mongodb)
- Diagnostics under /api (health, test-db, db-status)
"""

__version__ = "1.0.0"
