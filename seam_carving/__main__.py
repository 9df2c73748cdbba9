"""
Command-line seam carving.

    python -m seam_carving photo.jpg -w 0.8 -l 1.0
    python -m seam_carving photo.jpg --width 640 --height 400 -o out.png
    python -m seam_carving photo.jpg --edges edges.png --kernel 5
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import torch
from PIL import Image

from .carving import EnergyMode, SeamCarver
from .energy import Kernel, sobel_energy, to_grayscale
from .errors import SeamCarvingError
from .seam import Direction, build_cost_matrix, find_seam

logger = logging.getLogger('seam_carving')


def load_image(path) -> Tuple[torch.Tensor, int]:
    """Load an image as a uint8 tensor (H, W, C) plus its channel count.

    Grayscale files stay single-channel; everything else becomes RGB.
    """
    img = Image.open(path)
    img = img.convert('L') if img.mode in ('L', '1') else img.convert('RGB')
    img_array = np.array(img, dtype=np.uint8)
    if img_array.ndim == 2:
        img_array = img_array[:, :, None]
    return torch.from_numpy(img_array), img_array.shape[2]


def save_image(tensor: torch.Tensor, path):
    """Save a uint8 tensor (H, W) or (H, W, C) as an image."""
    img_array = tensor.cpu().numpy().astype(np.uint8)
    if img_array.ndim == 3 and img_array.shape[2] == 1:
        img_array = img_array[:, :, 0]
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(img_array).save(path)
    logger.info("Saved: %s", path)


def default_output_path(path) -> Path:
    path = Path(path)
    return path.parent / f"{path.stem}_seamed.png"


def resolve_target_size(width: int, height: int,
                        width_ratio: float, height_ratio: float,
                        target_width: Optional[int] = None,
                        target_height: Optional[int] = None) -> Tuple[int, int]:
    """Absolute targets win over ratios; ratios are truncated to ints."""
    new_width = target_width if target_width is not None else int(width * width_ratio)
    new_height = target_height if target_height is not None else int(height * height_ratio)
    return new_width, new_height


def save_edges(image: torch.Tensor, channels: int, kernel: Kernel, path):
    """Save the Sobel energy of an image, saturated to 8 bits."""
    H, W = image.shape[:2]
    gray = to_grayscale(image.reshape(-1), W, H, channels)
    energy = sobel_energy(gray, W, H, kernel)
    edges = energy.clamp(0, 255).to(torch.uint8).reshape(H, W)
    save_image(edges, path)


def positive_int(value) -> int:
    """argparse type for counts that must be at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='seam_carving',
        description="Content-aware image shrinking by seam carving"
    )
    parser.add_argument('path', type=str, help='Path to image')
    parser.add_argument(
        '-o', '--output',
        type=str,
        help='Where to save the output image (default: {dir}/{stem}_seamed.png)'
    )
    parser.add_argument(
        '-w', '--width-ratio',
        type=float,
        default=0.9,
        help='Ratio of output/input width (default: 0.9)'
    )
    parser.add_argument(
        '-l', '--height-ratio',
        type=float,
        default=0.9,
        help='Ratio of output/input height (default: 0.9)'
    )
    parser.add_argument('--width', type=int, help='Target width in pixels (overrides -w)')
    parser.add_argument('--height', type=int, help='Target height in pixels (overrides -l)')
    parser.add_argument(
        '--kernel',
        type=int,
        choices=[3, 5],
        default=3,
        help='Sobel kernel size (default: 3)'
    )
    parser.add_argument(
        '--energy-mode',
        choices=[m.value for m in EnergyMode],
        default=EnergyMode.STATIC.value,
        help='static: measure energy once; recomputed: after every seam (default: static)'
    )
    parser.add_argument('--edges', type=str, help='Also save the input energy map here')
    parser.add_argument('--plot', type=str, help='Also save a comparison figure here')
    parser.add_argument(
        '--progress-every',
        type=positive_int,
        default=20,
        help='Log progress every N seams (default: 20)'
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        help='Logging level (default: INFO)'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stdout,
    )

    try:
        image, channels = load_image(args.path)
    except (FileNotFoundError, OSError) as ex:
        logger.error("Failed to open image '%s': %s", args.path, ex)
        return 1

    H, W = image.shape[:2]
    kernel = Kernel(args.kernel)
    new_width, new_height = resolve_target_size(W, H, args.width_ratio, args.height_ratio,
                                                args.width, args.height)
    logger.info("Image shape: %d x %d x %d", H, W, channels)

    try:
        carver = SeamCarver(image.reshape(-1), W, H, channels, new_width, new_height,
                            energy_mode=EnergyMode(args.energy_mode), kernel=kernel)
    except SeamCarvingError as ex:
        logger.error("%s", ex)
        return 1

    if args.edges:
        save_edges(image, channels, kernel, args.edges)

    original_energy = carver.energy.clone()

    def report(done, total):
        if done % args.progress_every == 0 or done == total:
            logger.info("  Removed %d/%d seams", done, total)

    result = carver.apply(callback=report)
    carved = result.pixels.reshape(result.height, result.width, result.channels)

    output = args.output or default_output_path(args.path)
    save_image(carved, output)

    if args.plot:
        from .visualize import plot_carving

        cost = build_cost_matrix(original_energy, W, H, Direction.ROW)
        seam = find_seam(cost, W, H, Direction.ROW)
        plot_carving(image, original_energy, carved, args.plot, seam=seam)
        logger.info("Saved: %s", args.plot)

    return 0


if __name__ == '__main__':
    sys.exit(main())
