from .base import Deriver
from .nest import NestDeriver

__all__ = ["Deriver", "NestDeriver"]
