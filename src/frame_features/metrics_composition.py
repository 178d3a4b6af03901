#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Composition metrics.

Grid-based brightness sampling for rule-of-thirds and left/right (top/bottom)
balance scores.
"""

from typing import List, Tuple

import numpy as np
from loguru import logger

from .buffer import PixelBuffer, luminance


def grid_bounds(length: int, grid_size: int) -> List[Tuple[int, int]]:
    """
    Split [0, length) into grid_size cells.

    Cell i covers [floor(i*L/G), floor((i+1)*L/G)). When the image is
    smaller than the grid each cell is widened to one pixel, clamped to
    the image bounds, so tiny frames still produce defined scores.
    """
    bounds = []
    for i in range(grid_size):
        start = min(i * length // grid_size, max(length - 1, 0))
        end = min(max((i + 1) * length // grid_size, start + 1), length)
        bounds.append((start, end))
    return bounds


def create_brightness_grid(lum: np.ndarray, grid_size: int = 3) -> np.ndarray:
    """
    Average brightness per grid cell, normalized to [0, 1].

    Args:
        lum: (H, W) luminance on the 0-255 scale
        grid_size: Cells per side

    Returns:
        (grid_size, grid_size) array, row-major (grid[y][x])
    """
    height, width = lum.shape
    rows = grid_bounds(height, grid_size)
    cols = grid_bounds(width, grid_size)

    grid = np.zeros((grid_size, grid_size), dtype=np.float64)
    for gy, (y0, y1) in enumerate(rows):
        for gx, (x0, x1) in enumerate(cols):
            cell = lum[y0:y1, x0:x1]
            grid[gy, gx] = cell.mean() / 255.0 if cell.size > 0 else 0.0
    return grid


def thirds_indices(grid_size: int) -> Tuple[int, int]:
    """Grid cells containing the 1/3 and 2/3 lines."""
    return tuple(min(grid_size * k // 3, grid_size - 1) for k in (1, 2))


def rule_of_thirds_score(grid: np.ndarray) -> float:
    """Mean brightness of the cells at the four thirds intersections."""
    idx = thirds_indices(grid.shape[0])
    values = [grid[gy, gx] for gy in idx for gx in idx]
    return float(np.mean(values))


def balance_scores(grid: np.ndarray) -> Tuple[float, float]:
    """
    Left/right and top/bottom brightness balance.

    Returns:
        (horizontal, vertical): absolute difference between the outer
        thirds of columns (rows)
    """
    band = max(1, grid.shape[0] // 3)
    horizontal = abs(grid[:, :band].mean() - grid[:, -band:].mean())
    vertical = abs(grid[:band, :].mean() - grid[-band:, :].mean())
    return float(horizontal), float(vertical)


def analyze_composition(buffer: PixelBuffer, grid_size: int = 3) -> dict:
    """
    Analyze composition of a frame.

    Args:
        buffer: Validated pixel buffer
        grid_size: Brightness grid size

    Returns:
        dict: rule_of_thirds_score, balance_horizontal, balance_vertical,
        brightness_grid
    """
    if grid_size < 1:
        raise ValueError(f"grid_size must be positive, got {grid_size}")

    grid = create_brightness_grid(luminance(buffer.pixels()), grid_size)
    horizontal, vertical = balance_scores(grid)

    result = {
        "rule_of_thirds_score": rule_of_thirds_score(grid),
        "balance_horizontal": horizontal,
        "balance_vertical": vertical,
        "brightness_grid": tuple(tuple(float(v) for v in row) for row in grid),
    }
    logger.debug(
        f"Composition: thirds={result['rule_of_thirds_score']:.3f} "
        f"balance_h={horizontal:.3f} balance_v={vertical:.3f}"
    )
    return result
