"""Infrastructure layer for LevelList (storage backends)."""
