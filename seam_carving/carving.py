"""
High-level carving that orchestrates energy, cost, seam and removal.
"""

import logging
from enum import Enum
from typing import Callable, NamedTuple, Optional

import numpy as np
import torch

from .energy import Kernel, sobel_energy, to_grayscale
from .errors import InvalidTargetSize, SeamCarvingError, UnsupportedChannelLayout
from .seam import Direction, build_cost_matrix, find_seam, remove_seam

logger = logging.getLogger(__name__)


class EnergyMode(Enum):
    """When the energy map is measured.

    STATIC: once, from the original image; afterwards it is only shrunk
            along with the pixels, so cells next to removed seams go stale.
    RECOMPUTED: grayscale and energy are measured again from the current
            pixels after every removal. Slower, higher quality.
    """
    STATIC = 'static'
    RECOMPUTED = 'recomputed'


class CarveResult(NamedTuple):
    pixels: torch.Tensor
    width: int
    height: int
    channels: int

    def to_image(self) -> torch.Tensor:
        """Reshape the flat pixels to (H, W) or (H, W, C)."""
        if self.channels == 1:
            return self.pixels.reshape(self.height, self.width)
        return self.pixels.reshape(self.height, self.width, self.channels)


class SeamCarver:
    """
    Shrinks an image by removing low-energy seams.

    The pixel buffer, a grayscale cache and an energy cache are kept in
    lock-step: every seam is removed from all three, so they always share
    the same width and height.
    """

    def __init__(self, pixels: torch.Tensor, width: int, height: int,
                 channels: int, target_width: int, target_height: int,
                 energy_mode: EnergyMode = EnergyMode.STATIC,
                 kernel: Kernel = Kernel.X3):
        """
        Args:
            pixels: Flat uint8 buffer (H * W * C,), row-major
            width, height: Image dimensions
            channels: 1 (grayscale) or 3 (RGB)
            target_width, target_height: Output size, no larger than the input
            energy_mode: EnergyMode.STATIC (default) or EnergyMode.RECOMPUTED
            kernel: Sobel kernel used for the energy map
        """
        if target_width > width or target_height > height:
            raise InvalidTargetSize(
                f"Can only reduce image size: {width}x{height} -> "
                f"{target_width}x{target_height}")
        if target_width < 1 or target_height < 1:
            raise InvalidTargetSize(
                f"Target size must be positive, got {target_width}x{target_height}")
        if channels not in (1, 3):
            raise UnsupportedChannelLayout(f"Expected 1 or 3 channels, got {channels}")

        pixels = torch.as_tensor(pixels).reshape(-1)
        if pixels.numel() != width * height * channels:
            raise SeamCarvingError(
                f"Pixel buffer of length {pixels.numel()} does not match "
                f"{width}x{height}x{channels}")

        self.energy_mode = EnergyMode(energy_mode)
        self.kernel = Kernel(kernel)
        self.orig_width = width
        self.orig_height = height
        self.target_width = target_width
        self.target_height = target_height
        self.width = width
        self.height = height
        self.channels = channels
        self.pixels = pixels
        self._measure()
        self._applied = False

    def _measure(self):
        """Compute the grayscale and energy caches from the current pixels."""
        self.gray = to_grayscale(self.pixels, self.width, self.height, self.channels)
        self.energy = sobel_energy(self.gray, self.width, self.height, self.kernel)

    @property
    def n_seams(self) -> int:
        return ((self.orig_width - self.target_width)
                + (self.orig_height - self.target_height))

    def apply(self, callback: Optional[Callable[[int, int], None]] = None) -> CarveResult:
        """
        Remove horizontal seams down to the target height, then vertical
        seams down to the target width.

        Args:
            callback: Called as callback(done, total) after every seam

        Returns:
            CarveResult with the carved pixels and final dimensions
        """
        if self._applied:
            raise RuntimeError("SeamCarver.apply() can only be called once")
        self._applied = True

        total = self.n_seams
        h_diff = self.height - self.target_height
        w_diff = self.width - self.target_width
        logger.info("Carving %dx%d -> %dx%d (%d seams, %s energy)",
                    self.width, self.height, self.target_width,
                    self.target_height, total, self.energy_mode.value)

        done = 0
        for direction, count in ((Direction.COLUMN, h_diff), (Direction.ROW, w_diff)):
            for _ in range(count):
                self.remove_seam(direction)
                done += 1
                if callback is not None:
                    callback(done, total)

        return CarveResult(self.pixels, self.width, self.height, self.channels)

    def remove_seam(self, direction: Direction) -> torch.Tensor:
        """Find and remove one seam from all buffers. Returns the seam."""
        direction = Direction(direction)
        width, height = self.width, self.height

        cost = build_cost_matrix(self.energy, width, height, direction)
        seam = find_seam(cost, width, height, direction)

        self.gray = remove_seam(self.gray, seam, 1, direction, width)
        self.energy = remove_seam(self.energy, seam, 1, direction, width)
        self.pixels = remove_seam(self.pixels, seam, self.channels, direction, width)

        if direction is Direction.ROW:
            self.width -= 1
        else:
            self.height -= 1
        logger.debug("Removed %s seam, now %dx%d", direction.value,
                     self.width, self.height)

        if self.energy_mode is EnergyMode.RECOMPUTED:
            self._measure()
        return seam


def carve_image(image, target_width: int, target_height: int,
                energy_mode: EnergyMode = EnergyMode.STATIC,
                kernel: Kernel = Kernel.X3) -> torch.Tensor:
    """
    Seam carve an image array.

    Args:
        image: uint8 tensor or ndarray, (H, W) or (H, W, C)
        target_width, target_height: Output size
        energy_mode: See EnergyMode
        kernel: Sobel kernel variant

    Returns:
        Carved uint8 tensor, (target_height, target_width[, C])
    """
    if isinstance(image, np.ndarray):
        image = torch.from_numpy(np.ascontiguousarray(image))
    if image.dim() == 2:
        height, width = image.shape
        channels = 1
    elif image.dim() == 3:
        height, width, channels = image.shape
    else:
        raise ValueError(f"Expected (H, W) or (H, W, C) image, got shape {tuple(image.shape)}")

    carver = SeamCarver(image.reshape(-1), width, height, channels,
                        target_width, target_height,
                        energy_mode=energy_mode, kernel=kernel)
    result = carver.apply()
    if image.dim() == 3:
        return result.pixels.reshape(result.height, result.width, channels)
    return result.to_image()
