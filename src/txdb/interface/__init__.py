from .base import BaseInterface
from .postgres import PostgresPool

__all__ = ("BaseInterface", "PostgresPool")
