#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Effect metrics: blur, noise and vignette estimates.

All three are single-pass, stateless computations over the same buffer.
"""

import numpy as np
from loguru import logger

from .buffer import PixelBuffer, luminance
from .utils import clamp01, safe_divide

# 8-neighbourhood offsets (dy, dx)
_NEIGHBOURS = [(dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)]


def calculate_blur_score(lum: np.ndarray, normalizer: float = 1000.0) -> float:
    """
    Mean local variance of interior pixels against their 8 neighbours,
    divided by `normalizer` and clamped to [0, 1].
    """
    height, width = lum.shape
    if height < 3 or width < 3:
        return 0.0

    center = lum[1:-1, 1:-1]
    variance = np.zeros_like(center)
    for dy, dx in _NEIGHBOURS:
        neighbour = lum[1 + dy:height - 1 + dy, 1 + dx:width - 1 + dx]
        variance += (center - neighbour) ** 2
    variance /= len(_NEIGHBOURS)

    return clamp01(variance.mean() / normalizer)


def calculate_noise_score(lum: np.ndarray) -> float:
    """Mean absolute luminance delta between consecutive pixels in raster order, / 255."""
    flat = lum.reshape(-1)
    if flat.size < 2:
        return 0.0
    return clamp01(np.abs(np.diff(flat)).mean() / 255.0)


def radial_weights(height: int, width: int) -> np.ndarray:
    """Weight 1 - d / d_max, with d measured from (W/2, H/2) and d_max to the corner."""
    cx, cy = width / 2.0, height / 2.0
    max_distance = np.hypot(cx, cy)
    ys, xs = np.mgrid[0:height, 0:width]
    distance = np.hypot(xs - cx, ys - cy)
    return 1.0 - distance / max_distance


def calculate_vignette_score(lum: np.ndarray) -> float:
    """
    Relative brightness drop from the centre to the border.

    The centre mean weights each pixel by w = 1 - d / d_max and the border
    mean by 1 - w. The score is (centre - border) / border, clamped to
    [0, 1]. A flat frame scores 0, a linear centre-to-corner falloff scores
    about 0.43 and a bright centre on a black border scores 1.
    """
    weights = radial_weights(*lum.shape)
    border_weights = 1.0 - weights
    centre = safe_divide(float((lum * weights).sum()), float(weights.sum()))
    border = safe_divide(float((lum * border_weights).sum()), float(border_weights.sum()))
    if centre <= 0:
        return 0.0
    if border <= 0:
        return 1.0
    return clamp01((centre - border) / border)


def analyze_effects(
    buffer: PixelBuffer,
    blur_normalizer: float = 1000.0,
    blur_threshold: float = 0.7,
    noise_threshold: float = 0.1,
    vignette_threshold: float = 0.3
) -> dict:
    """
    Estimate blur, noise and vignette.

    Returns:
        dict: {blur,noise,vignette}_detected and {blur,noise,vignette}_strength
    """
    lum = luminance(buffer.pixels())

    blur = calculate_blur_score(lum, blur_normalizer)
    noise = calculate_noise_score(lum)
    vignette = calculate_vignette_score(lum)

    result = {
        "blur_detected": blur > blur_threshold,
        "blur_strength": blur,
        "noise_detected": noise > noise_threshold,
        "noise_strength": noise,
        "vignette_detected": vignette > vignette_threshold,
        "vignette_strength": vignette,
    }
    logger.debug(f"Effects: blur={blur:.3f} noise={noise:.3f} vignette={vignette:.3f}")
    return result
