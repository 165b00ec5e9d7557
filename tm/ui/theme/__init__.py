"""Theme system — light/dark colors and stylesheet generation."""
from .colors import THEMES, LIGHT, DARK
from .stylesheet import build_stylesheet

__all__ = ["THEMES", "LIGHT", "DARK", "build_stylesheet"]
