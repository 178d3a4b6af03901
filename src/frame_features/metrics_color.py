#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Color metrics.

Approximate palette, exact saturation:
- dominant color / palette / contrast come from strided samples
- mean saturation is computed over every pixel
"""

from typing import List, Tuple

import numpy as np
from loguru import logger

from .buffer import PixelBuffer

# Rec. 709 luminance weights
LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)

RGB = Tuple[int, int, int]


def effective_stride(pixel_count: int, stride: int = 10, min_samples: int = 64) -> int:
    """Sampling stride, shrunk for tiny frames so they keep enough samples."""
    return max(1, min(stride, pixel_count // max(min_samples, 1)))


def count_colors(
    pixels: np.ndarray,
    stride: int = 10,
    alpha_threshold: int = 128
) -> List[Tuple[RGB, int]]:
    """
    Count exact (r, g, b) triples over every `stride`-th opaque pixel.

    Returns:
        [(rgb, count), ...] sorted by count, ties by first occurrence
    """
    flat = pixels.reshape(-1, 4)[::stride]
    opaque = flat[flat[:, 3] > alpha_threshold]
    if len(opaque) == 0:
        return []

    rgb = opaque[:, :3].astype(np.uint32)
    packed = (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]
    values, first_index, counts = np.unique(packed, return_index=True, return_counts=True)

    order = np.lexsort((first_index, -counts))
    result = []
    for i in order:
        v = int(values[i])
        result.append((((v >> 16) & 0xFF, (v >> 8) & 0xFF, v & 0xFF), int(counts[i])))
    return result


def relative_luminance(rgb: RGB) -> float:
    r, g, b = (c / 255.0 for c in rgb)
    return LUMA_WEIGHTS[0] * r + LUMA_WEIGHTS[1] * g + LUMA_WEIGHTS[2] * b


def calculate_contrast(ranked: List[Tuple[RGB, int]]) -> float:
    """Normalized luminance spread between the two most frequent colors."""
    if len(ranked) < 2:
        return 0.0

    lum1 = relative_luminance(ranked[0][0])
    lum2 = relative_luminance(ranked[1][0])
    brightest = max(lum1, lum2)
    darkest = min(lum1, lum2)
    if brightest <= 0:
        return 0.0
    return float((brightest - darkest) / brightest)


def calculate_average_saturation(pixels: np.ndarray) -> float:
    """Mean HSV saturation (max - min) / max over all pixels."""
    rgb = pixels[..., :3].astype(np.float64) / 255.0
    if rgb.size == 0:
        return 0.0

    mx = rgb.max(axis=2)
    mn = rgb.min(axis=2)
    saturation = np.divide(mx - mn, mx, out=np.zeros_like(mx), where=mx > 0)
    return float(saturation.mean())


def extract_color_palette(
    buffer: PixelBuffer,
    stride: int = 10,
    min_samples: int = 64,
    alpha_threshold: int = 128,
    palette_size: int = 8
) -> dict:
    """
    Extract dominant color, palette, contrast and saturation.

    Args:
        buffer: Validated pixel buffer
        stride: Sample every Kth pixel
        min_samples: Minimum samples kept on tiny frames
        alpha_threshold: Opacity cutoff (exclusive)
        palette_size: Number of palette entries

    Returns:
        dict: dominant, palette [{rgb, percentage}], contrast, saturation,
        sampled_pixels
    """
    pixels = buffer.pixels()
    step = effective_stride(buffer.pixel_count, stride, min_samples)
    ranked = count_colors(pixels, step, alpha_threshold)

    total = sum(count for _, count in ranked)
    top = ranked[:palette_size]

    result = {
        "dominant": top[0][0] if top else (0, 0, 0),
        "palette": [
            {"rgb": rgb, "percentage": count / total}
            for rgb, count in top
        ],
        "contrast": calculate_contrast(top),
        "saturation": calculate_average_saturation(pixels),
        "sampled_pixels": total,
    }
    logger.debug(
        f"Color: stride={step} samples={total} distinct={len(ranked)} "
        f"contrast={result['contrast']:.3f} saturation={result['saturation']:.3f}"
    )
    return result
