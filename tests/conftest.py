"""Shared test fixtures for the seam carving test suite."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import torch
import pytest


def grid(rows, dtype=torch.float32):
    """Flatten a list of rows into a row-major 1-D tensor."""
    return torch.tensor(rows, dtype=dtype).reshape(-1)


def brute_force_cost(rows, direction):
    """Reference cost matrix on nested lists, one cell at a time.

    direction is 'row' (lines are rows) or 'column' (lines are columns).
    """
    H, W = len(rows), len(rows[0])
    if direction == 'row':
        lines = [list(r) for r in rows]
    else:
        lines = [[rows[y][x] for y in range(H)] for x in range(W)]
    outer, inner = len(lines), len(lines[0])

    cost = [[0.0] * inner for _ in range(outer)]
    cost[-1] = list(lines[-1])
    for i in range(outer - 2, -1, -1):
        for j in range(inner):
            neighbours = [cost[i + 1][k] for k in (j, j - 1, j + 1) if 0 <= k < inner]
            cost[i][j] = lines[i][j] + min(neighbours)

    if direction == 'row':
        return cost
    return [[cost[x][y] for x in range(W)] for y in range(H)]


def make_step_image(H, W, edge_col, low=0, high=255, channels=1):
    """uint8 image, dark left of edge_col and bright from it on."""
    img = torch.full((H, W), low, dtype=torch.uint8)
    img[:, edge_col:] = high
    if channels > 1:
        img = img.unsqueeze(2).expand(H, W, channels).contiguous()
    return img


@pytest.fixture
def rgb_image():
    """Random 12x16 RGB uint8 image."""
    torch.manual_seed(42)
    return torch.randint(0, 256, (12, 16, 3), dtype=torch.uint8)


@pytest.fixture
def gray_image():
    """Random 10x14 grayscale uint8 image."""
    torch.manual_seed(7)
    return torch.randint(0, 256, (10, 14), dtype=torch.uint8)
