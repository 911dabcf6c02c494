"""torchquadrature: refinement quadrature for PyTorch."""

from . import integration

__all__ = [
    "integration",
]

__version__ = "0.1.0"
