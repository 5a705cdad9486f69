"""Application layer: commands, reducers, history and the palette store."""

from .store import PaletteStore

__all__ = ['PaletteStore']
