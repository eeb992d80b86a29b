"""Voidloot: loot RPG generators, stat pipeline and combat simulation."""

__version__ = "1.0.0"
