"""
Content-aware image shrinking by seam carving.

Based on "Seam Carving for Content-Aware Image Resizing"
by Avidan & Shamir, 2007.
"""

__version__ = "0.1.0"

from .errors import SeamCarvingError, InvalidTargetSize, UnsupportedChannelLayout
from .energy import Kernel, Border, sobel_energy, to_grayscale, normalize_energy
from .seam import Direction, build_cost_matrix, find_seam, seam_positions, remove_seam
from .carving import SeamCarver, EnergyMode, CarveResult, carve_image

__all__ = [
    'SeamCarvingError',
    'InvalidTargetSize',
    'UnsupportedChannelLayout',
    'Kernel',
    'Border',
    'sobel_energy',
    'to_grayscale',
    'normalize_energy',
    'Direction',
    'build_cost_matrix',
    'find_seam',
    'seam_positions',
    'remove_seam',
    'SeamCarver',
    'EnergyMode',
    'CarveResult',
    'carve_image',
]
