"""LevelList - local-first game collection tracker core.

Persistence with debounced autosave, file import/export in several formats,
and ranked search over a personal game catalog.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
