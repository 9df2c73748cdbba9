"""
Energy functions for seam carving.

The energy function determines which pixels are "important".
Low-energy seams are preferred for removal.

Energy is the Sobel gradient magnitude of a grayscale buffer:
E(x, y) = sqrt(Gx(x, y)^2 + Gy(x, y)^2)

All buffers are flat, row-major 1-D tensors; width and height travel
alongside them.
"""

from enum import Enum
from typing import Optional, Tuple

import torch
import torch.nn.functional as F

from .errors import UnsupportedChannelLayout


_SOBEL_WEIGHTS = {
    3: (
        [[-1, 0, 1],
         [-2, 0, 2],
         [-1, 0, 1]],
        [[-1, -2, -1],
         [ 0,  0,  0],
         [ 1,  2,  1]],
    ),
    5: (
        [[2, 1, 0, -1, -2],
         [2, 1, 0, -1, -2],
         [4, 2, 0, -2, -4],
         [2, 1, 0, -1, -2],
         [2, 1, 0, -1, -2]],
        [[ 2,  2,  4,  2,  2],
         [ 1,  1,  2,  1,  1],
         [ 0,  0,  0,  0,  0],
         [-1, -1, -2, -1, -1],
         [-2, -2, -4, -2, -2]],
    ),
}


class Border(Enum):
    """How the kernel treats pixels near the image edge.

    CLAMP: replicate padding. Out-of-bounds neighbours take the value of the
           nearest edge pixel (taps are never dropped), so every pixel
           gets an energy value and a flat image stays at zero.
    VALID: only pixels whose full k x k patch lies inside the image are
           convolved; the border band is left at zero.
    """
    CLAMP = 'clamp'
    VALID = 'valid'


class Kernel(Enum):
    """Sobel kernel variants, keyed by their size."""
    X3 = 3
    X5 = 5

    @property
    def size(self) -> int:
        return self.value

    def weights(self, dtype: torch.dtype = torch.float32,
                device: Optional[torch.device] = None) -> Tuple[torch.Tensor, torch.Tensor]:
        """Return the (Kx, Ky) kernels shaped (1, 1, k, k) for conv2d."""
        kx, ky = _SOBEL_WEIGHTS[self.value]
        k = self.size
        sobel_x = torch.tensor(kx, dtype=dtype, device=device).view(1, 1, k, k)
        sobel_y = torch.tensor(ky, dtype=dtype, device=device).view(1, 1, k, k)
        return sobel_x, sobel_y

    def apply(self, gray: torch.Tensor, width: int, height: int,
              border: Border = Border.CLAMP) -> torch.Tensor:
        """
        Convolve a flat grayscale buffer and return its gradient magnitude.

        Args:
            gray: Flat intensity buffer of length width * height
            width, height: Image dimensions
            border: Border handling, see Border

        Returns:
            Flat float32 energy buffer, same length as gray
        """
        if gray.numel() != width * height:
            raise ValueError(f"Buffer of length {gray.numel()} does not match "
                             f"{width}x{height}")

        border = Border(border)
        k = self.size
        pad = k // 2
        image = gray.to(torch.float32).reshape(1, 1, height, width)
        sobel_x, sobel_y = self.weights(device=gray.device)

        if border is Border.CLAMP:
            padded = F.pad(image, (pad, pad, pad, pad), mode='replicate')
            grad_x = F.conv2d(padded, sobel_x)
            grad_y = F.conv2d(padded, sobel_y)
            energy = torch.sqrt(grad_x ** 2 + grad_y ** 2)
            return energy.reshape(-1)

        energy = torch.zeros(height, width, dtype=torch.float32, device=gray.device)
        if height >= k and width >= k:
            grad_x = F.conv2d(image, sobel_x)
            grad_y = F.conv2d(image, sobel_y)
            energy[pad:height - pad, pad:width - pad] = torch.sqrt(grad_x ** 2 + grad_y ** 2)[0, 0]
        return energy.reshape(-1)


def sobel_energy(gray: torch.Tensor, width: int, height: int,
                 kernel: Kernel = Kernel.X3,
                 border: Border = Border.CLAMP) -> torch.Tensor:
    """
    Compute the Sobel gradient magnitude energy of a grayscale buffer.

    Values are not normalized and may exceed 255.

    Args:
        gray: Flat intensity buffer (H * W,)
        width, height: Image dimensions
        kernel: Kernel.X3 (default, used by the carver) or Kernel.X5
        border: Border.CLAMP (default) or Border.VALID

    Returns:
        Flat float32 energy buffer (H * W,)
    """
    return Kernel(kernel).apply(gray, width, height, border)


def to_grayscale(pixels: torch.Tensor, width: int, height: int,
                 channels: int) -> torch.Tensor:
    """
    Convert a flat uint8 pixel buffer to a flat uint8 luminance buffer.

    Uses the ITU-R 601 weights Y = 0.299 R + 0.587 G + 0.114 B.
    """
    if channels == 1:
        return pixels.to(torch.uint8).clone()
    if channels != 3:
        raise UnsupportedChannelLayout(
            f"Expected 1 or 3 channels, got {channels}")

    rgb = pixels.reshape(height * width, 3).to(torch.float32)
    gray = 0.299 * rgb[:, 0] + 0.587 * rgb[:, 1] + 0.114 * rgb[:, 2]
    return gray.round().clamp(0, 255).to(torch.uint8)


def normalize_energy(energy: torch.Tensor, eps: float = 1e-8) -> torch.Tensor:
    """Remap energy to the [0, 1] range for display.

    This is a monotonic transform so seam positions are unchanged.

    Args:
        energy: Energy buffer of any shape
        eps: Small value to avoid division by zero

    Returns:
        Normalized energy in [0, 1]
    """
    e_min = energy.min()
    e_max = energy.max()
    return (energy - e_min) / (e_max - e_min + eps)
