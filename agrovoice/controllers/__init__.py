"""FastAPI routers acting as controllers in the MVC architecture."""

from . import narration, reports

__all__ = ["narration", "reports"]
