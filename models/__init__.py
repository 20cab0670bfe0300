"""ORM models exposed by the TaskDesk application."""
from .category import Category
from .task import Task

__all__ = ["Task", "Category"]
