from .base import BatchInput

__all__ = ["BatchInput"]
