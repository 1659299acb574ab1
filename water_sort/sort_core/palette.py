"""
Palette
=======

Provides convenient access to the liquid colors loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple, Optional

from water_sort.sort_core.config_loader import (
    GameConfig,
    ColorConfig,
    get_config
)


@dataclass
class ColorType:
    """
    Runtime representation of a palette color.

    Wraps ColorConfig with convenience accessors.
    """
    config: ColorConfig

    @property
    def id(self) -> int:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return self.config.rgb

    @property
    def hex(self) -> str:
        """Color as #rrggbb."""
        return "#{:02x}{:02x}{:02x}".format(*self.rgb)

    def __repr__(self) -> str:
        return f"ColorType({self.id}: {self.name})"


class Palette:
    """
    Fixed ordered set of distinct colors available to levels.

    Color identifiers used on the board are the palette indices.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize palette from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._colors: Tuple[ColorType, ...] = tuple(
            ColorType(color_config) for color_config in config.palette
        )

    def __len__(self) -> int:
        """Total number of colors."""
        return len(self._colors)

    def __getitem__(self, color_id: int) -> ColorType:
        """Get color by ID."""
        if 0 <= color_id < len(self._colors):
            return self._colors[color_id]
        raise IndexError(f"Color ID {color_id} out of range [0, {len(self._colors)})")

    def __iter__(self):
        """Iterate over all colors."""
        return iter(self._colors)

    @property
    def all_colors(self) -> Tuple[ColorType, ...]:
        """All colors in order."""
        return self._colors

    def first(self, count: int) -> List[int]:
        """
        IDs of the first `count` colors, as used by level generation.

        Raises:
            ValueError: If the palette holds fewer than `count` colors.
        """
        if count > len(self._colors):
            raise ValueError(
                f"Palette has {len(self._colors)} colors, {count} requested"
            )
        return [c.id for c in self._colors[:count]]

    def get_by_name(self, name: str) -> Optional[ColorType]:
        """Get color by name (case-insensitive)."""
        name_lower = name.lower()
        for color in self._colors:
            if color.name.lower() == name_lower:
                return color
        return None

    def name_of(self, color_id) -> str:
        """Display name for a board color, falling back to str()."""
        if isinstance(color_id, int) and 0 <= color_id < len(self._colors):
            return self._colors[color_id].name
        return str(color_id)


# Module-level singleton
_cached_palette: Optional[Palette] = None


def get_palette(config: Optional[GameConfig] = None) -> Palette:
    """
    Get the palette singleton.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        Palette instance.
    """
    global _cached_palette
    if _cached_palette is None or config is not None:
        _cached_palette = Palette(config)
    return _cached_palette
