"""Database models for the admin back-office."""

from .base import Base, TimestampMixin
from .models import Category, Product, Setting

__all__ = ["Base", "TimestampMixin", "Category", "Product", "Setting"]
