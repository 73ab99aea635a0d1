"""
GPIO Simulator - API Layer

Provides the REST interface to the simulator command surface.
All API endpoints are facades over SimulatorService.

Structure:
- routes/     : Endpoint handlers
- schemas/    : Pydantic schemas
- middleware/ : Error handling
"""

from api.main import create_app

__all__ = ["create_app"]
