"""
Matplotlib figures for inspecting a carve.
"""

from pathlib import Path
from typing import Optional

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np
import torch

from .energy import normalize_energy
from .seam import Direction, seam_positions


def _to_numpy(image: torch.Tensor) -> np.ndarray:
    img = image.cpu().numpy()
    if img.ndim == 3 and img.shape[2] == 1:
        img = img[:, :, 0]
    return img


def plot_carving(original: torch.Tensor, energy: torch.Tensor,
                 carved: torch.Tensor, path,
                 seam: Optional[torch.Tensor] = None):
    """
    Save a three-panel figure: original, energy map, carved result.

    Args:
        original: uint8 image (H, W) or (H, W, C)
        energy: Flat energy buffer of the original (H * W,)
        carved: uint8 carved image
        path: Output file
        seam: Optional vertical seam (flat cell indices) drawn on the energy map
    """
    H, W = original.shape[:2]
    energy_np = normalize_energy(energy.reshape(H, W)).cpu().numpy()

    fig, axes = plt.subplots(1, 3, figsize=(15, 5))

    img = _to_numpy(original)
    axes[0].imshow(img, cmap='gray' if img.ndim == 2 else None, vmin=0, vmax=255)
    axes[0].set_title(f'Original ({W}x{H})')

    axes[1].imshow(energy_np, cmap='hot')
    if seam is not None:
        cols = seam_positions(seam, W, Direction.ROW).cpu().numpy()
        axes[1].plot(cols, np.arange(len(cols)), 'cyan', linewidth=1.5)
    axes[1].set_title('Sobel energy')

    out = _to_numpy(carved)
    axes[2].imshow(out, cmap='gray' if out.ndim == 2 else None, vmin=0, vmax=255)
    axes[2].set_title(f'Carved ({out.shape[1]}x{out.shape[0]})')

    for ax in axes:
        ax.axis('off')

    plt.tight_layout()
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
