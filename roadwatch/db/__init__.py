"""
Database init - Exports for services
"""

from .base import Base, TimestampMixin, utcnow

__all__ = ["Base", "TimestampMixin", "utcnow"]
