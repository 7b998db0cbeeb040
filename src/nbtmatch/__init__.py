"""nbtmatch - predicate matching over NBT-like tag trees."""

__version__ = "0.1.0"
