"""CLI command modules for carry-audit."""

from .inventory import inventory
from .lanes import lanes

__all__ = ["inventory", "lanes"]
