"""VeloxCache — Concrete cache strategies."""

from .memory import MemoryStrategy
from .null import NullStrategy

__all__ = ["MemoryStrategy", "NullStrategy"]
