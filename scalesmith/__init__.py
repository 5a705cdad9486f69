"""scalesmith - palette document model, curve derivation and undo history."""

__version__ = "0.1.0"
