#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Color analysis step

- dominant color and ranked palette (strided samples)
- contrast between the two leading palette colors
- exact mean saturation (every pixel)
"""

from typing import Optional

from .base import PipelineStep, FrameInput, ColorFeatures, PaletteEntry
from ..config import ColorConfig
from ..metrics_color import extract_color_palette


class ColorAnalysisStep(PipelineStep[FrameInput, ColorFeatures]):
    """
    Color analysis step

    Input: FrameInput (pixel buffer)
    Output: ColorFeatures (dominant, palette, contrast, saturation)
    """

    def __init__(self, config: Optional[ColorConfig] = None):
        self.config = config or ColorConfig()

    @property
    def name(self) -> str:
        return "color"

    @property
    def description(self) -> str:
        return "Dominant color, palette, contrast and saturation"

    def run(self, input_data: FrameInput) -> ColorFeatures:
        self.log_start(input_data)

        try:
            input_data.validate()
            cfg = self.config
            raw = extract_color_palette(
                input_data.buffer,
                stride=cfg.sample_stride,
                min_samples=cfg.min_samples,
                alpha_threshold=cfg.alpha_threshold,
                palette_size=cfg.palette_size,
            )
            output = ColorFeatures(
                success=True,
                dominant=tuple(raw["dominant"]),
                palette=tuple(
                    PaletteEntry(rgb=tuple(p["rgb"]), percentage=float(p["percentage"]))
                    for p in raw["palette"]
                ),
                contrast=raw["contrast"],
                saturation=raw["saturation"],
                sampled_pixels=raw["sampled_pixels"],
            )
            self.log_complete(output)
            return output

        except Exception as e:
            self.log_complete(ColorFeatures(success=False, error_message=str(e)))
            raise
