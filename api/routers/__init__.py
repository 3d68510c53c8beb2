# API Routers
from api.routers import skills

__all__ = ["skills"]
