from .builder import CslBuilder
from .coo import COO
from .csl import CSL
from .shape import Coordinate, Shape

__all__ = [
    "COO",
    "CSL",
    "CslBuilder",
    "Coordinate",
    "Shape",
]
