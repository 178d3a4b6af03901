#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Structure/element metrics.

- Sobel edge density -> shape likelihood
- Local contrast map -> text likelihood
"""

import cv2
import numpy as np
from loguru import logger

from .buffer import PixelBuffer, luminance


def sobel_magnitude(lum: np.ndarray) -> np.ndarray:
    """
    3x3 Sobel gradient magnitude over interior pixels.

    Returns:
        (H-2, W-2) array, empty when the frame has no interior pixels
    """
    height, width = lum.shape
    if height < 3 or width < 3:
        return np.zeros((0, 0), dtype=np.float64)

    lum = np.ascontiguousarray(lum, dtype=np.float64)
    # Border rows and columns use cv2 reflection, so keep the interior only
    gx = cv2.Sobel(lum, cv2.CV_64F, 1, 0, ksize=3)[1:-1, 1:-1]
    gy = cv2.Sobel(lum, cv2.CV_64F, 0, 1, ksize=3)[1:-1, 1:-1]
    return np.hypot(gx, gy)


def edge_density(lum: np.ndarray, threshold: float = 100.0) -> float:
    """Percentage (0-100) of interior pixels whose Sobel magnitude exceeds threshold."""
    magnitude = sobel_magnitude(lum)
    if magnitude.size == 0:
        return 0.0
    return float(np.count_nonzero(magnitude > threshold) / magnitude.size * 100.0)


def create_contrast_map(pixels: np.ndarray) -> np.ndarray:
    """
    Local contrast per pixel.

    Sum of |dr| + |dg| + |db| to each in-bounds 4-neighbour, always divided
    by 4. Border pixels have fewer neighbours and so read lower.
    """
    rgb = pixels[..., :3].astype(np.int32)
    height, width = rgb.shape[:2]
    contrast = np.zeros((height, width), dtype=np.float64)

    if width > 1:
        dh = np.abs(rgb[:, 1:] - rgb[:, :-1]).sum(axis=2)
        contrast[:, :-1] += dh
        contrast[:, 1:] += dh
    if height > 1:
        dv = np.abs(rgb[1:, :] - rgb[:-1, :]).sum(axis=2)
        contrast[:-1, :] += dv
        contrast[1:, :] += dv

    return contrast / 4.0


def detect_visual_elements(
    buffer: PixelBuffer,
    edge_threshold: float = 100.0,
    shape_density_threshold: float = 30.0,
    shape_confidence_scale: float = 50.0,
    contrast_threshold: float = 100.0,
    text_ratio_threshold: float = 0.05,
    text_confidence_scale: float = 20.0
) -> dict:
    """
    Detect shapes and text-like regions.

    Returns:
        dict: shapes_detected, shape_confidence, text_detected,
        text_confidence, edge_density, high_contrast_ratio
    """
    pixels = buffer.pixels()

    density = edge_density(luminance(pixels), edge_threshold)
    shape_confidence = min(density / shape_confidence_scale, 1.0)

    contrast = create_contrast_map(pixels)
    high_contrast_ratio = float(np.count_nonzero(contrast > contrast_threshold) / buffer.pixel_count)
    text_confidence = min(high_contrast_ratio * text_confidence_scale, 1.0)

    result = {
        "shapes_detected": density > shape_density_threshold,
        "shape_confidence": float(shape_confidence),
        "text_detected": high_contrast_ratio > text_ratio_threshold,
        "text_confidence": float(text_confidence),
        "edge_density": density,
        "high_contrast_ratio": high_contrast_ratio,
    }
    logger.debug(f"Elements: edge_density={density:.1f}% high_contrast={high_contrast_ratio:.3f}")
    return result
