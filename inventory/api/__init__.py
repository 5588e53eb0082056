"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from inventory.api import app

    uvicorn inventory.api:app --reload
"""

from inventory.api.app import app

__all__ = ["app"]
