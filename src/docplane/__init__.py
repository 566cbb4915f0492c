"""DocPlane - builds a navigable documentation model from type-checked programs."""

__version__ = "0.1.0"
