"""
Seam computation and removal.

Buffers are flat and row-major. A direction picks which dimension is
scanned line by line:

- Direction.ROW scans rows: the seam holds one pixel per row (a vertical
  seam) and removing it shrinks the width.
- Direction.COLUMN scans columns: one pixel per column (a horizontal seam),
  removing it shrinks the height.

The cost matrix is accumulated from the far boundary (last row / last
column) back to the near one, and the seam is then read greedily from the
near boundary forward over the accumulated costs.
"""

from enum import Enum

import torch


class Direction(Enum):
    ROW = 'row'
    COLUMN = 'column'


def _as_lines(buffer: torch.Tensor, width: int, height: int,
              direction: Direction) -> torch.Tensor:
    """View a flat buffer as (outer, inner): one traversal line per row."""
    grid = buffer.reshape(height, width)
    if direction is Direction.ROW:
        return grid
    return grid.t()


def build_cost_matrix(energy: torch.Tensor, width: int, height: int,
                      direction: Direction = Direction.ROW) -> torch.Tensor:
    """
    Accumulate minimum path costs from the far boundary.

    The last line keeps its energy; every other pixel gets its own energy
    plus the cheapest of its (up to three) neighbours on the next line.

    Args:
        energy: Flat energy buffer (H * W,)
        width, height: Image dimensions
        direction: Direction.ROW or Direction.COLUMN

    Returns:
        Flat float32 cost buffer (H * W,)
    """
    direction = Direction(direction)
    energy_lines = _as_lines(energy.to(torch.float32), width, height, direction)
    outer, inner = energy_lines.shape

    cost = torch.empty(outer, inner, dtype=torch.float32, device=energy.device)
    cost[-1] = energy_lines[-1]
    inf = torch.full((1,), float('inf'), dtype=torch.float32, device=energy.device)

    for i in range(outer - 2, -1, -1):
        ahead = cost[i + 1]
        from_left = torch.cat([inf, ahead[:-1]])
        from_right = torch.cat([ahead[1:], inf])
        cost[i] = energy_lines[i] + torch.minimum(ahead, torch.minimum(from_left, from_right))

    if direction is Direction.COLUMN:
        cost = cost.t()
    return cost.reshape(-1)


def find_seam(cost: torch.Tensor, width: int, height: int,
              direction: Direction = Direction.ROW) -> torch.Tensor:
    """
    Read the minimum-cost seam out of a cost buffer.

    Starts at the cheapest pixel of the first line (lowest index on ties)
    and steps one line at a time to the cheapest of the same, previous and
    next position. Ties keep the same position, then prefer the previous.

    Args:
        cost: Flat cost buffer from build_cost_matrix
        width, height: Image dimensions
        direction: Direction.ROW or Direction.COLUMN

    Returns:
        Seam as flat cell indices (row * width + col), one per line:
        for ROW (H,), for COLUMN (W,)
    """
    direction = Direction(direction)
    cost_lines = _as_lines(cost, width, height, direction)
    outer, inner = cost_lines.shape
    lines = cost_lines.tolist()

    pos = torch.argmin(cost_lines[0]).item()
    positions = [pos]
    for line in lines[1:]:
        best = pos
        for candidate in (pos - 1, pos + 1):
            if 0 <= candidate < inner and line[candidate] < line[best]:
                best = candidate
        pos = best
        positions.append(pos)

    positions = torch.tensor(positions, dtype=torch.long, device=cost.device)
    line_idx = torch.arange(outer, dtype=torch.long, device=cost.device)
    if direction is Direction.ROW:
        return line_idx * width + positions
    return positions * width + line_idx


def seam_positions(seam: torch.Tensor, width: int,
                   direction: Direction = Direction.ROW) -> torch.Tensor:
    """Column (ROW) or row (COLUMN) of each seam cell."""
    if Direction(direction) is Direction.ROW:
        return seam % width
    return seam // width


def remove_seam(buffer: torch.Tensor, seam: torch.Tensor, channels: int,
                direction: Direction, width: int) -> torch.Tensor:
    """
    Remove a seam from a flat buffer.

    Each seam entry is a cell index; the `channels` samples of that cell are
    dropped and everything after it moves up. For ROW the cells may be any
    set of distinct cells, since the flat buffer is compacted in a single
    sweep. For COLUMN every column must lose exactly one cell; the rest of
    that column shifts up by one line.

    Args:
        buffer: Flat buffer of length H * W * channels
        seam: Flat cell indices to remove
        channels: Samples per cell
        direction: Direction.ROW or Direction.COLUMN
        width: Current image width in cells (used by COLUMN)

    Returns:
        New flat buffer, shorter by len(seam) * channels
    """
    direction = Direction(direction)
    if buffer.numel() % channels != 0:
        raise ValueError(f"Buffer of length {buffer.numel()} is not a multiple "
                         f"of {channels} channels")

    n_cells = buffer.numel() // channels
    keep = torch.ones(n_cells, dtype=torch.bool, device=buffer.device)
    keep[seam.to(torch.long)] = False
    if n_cells - int(keep.sum()) != seam.numel():
        raise ValueError("Seam contains duplicate cells")

    if direction is Direction.ROW:
        cells = buffer.reshape(n_cells, channels)
        return cells[keep].reshape(-1)

    if n_cells % width != 0:
        raise ValueError(f"Buffer of {n_cells} cells does not divide into "
                         f"rows of width {width}")
    height = n_cells // width
    keep_cols = keep.reshape(height, width).t()
    if not (keep_cols.sum(dim=1) == height - 1).all():
        raise ValueError("Column seam must remove exactly one cell per column")

    # (W, H, C): column-major, so each column's tail moves up one line
    columns = buffer.reshape(height, width, channels).transpose(0, 1)
    carved = columns[keep_cols].reshape(width, height - 1, channels)
    return carved.transpose(0, 1).reshape(-1)
