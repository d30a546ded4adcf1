from .dungeon_api import bp_dungeon  # noqa: F401

__all__ = ["bp_dungeon"]
