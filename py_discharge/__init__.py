"""Live nearest-source relaxation and charge transport on a 2D grid."""

__version__ = "0.1.0"
