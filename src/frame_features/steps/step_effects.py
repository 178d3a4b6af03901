#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Effects analysis step

- blur: mean local variance
- noise: raster-order luminance deltas
- vignette: radial brightness falloff
"""

from typing import Optional

from .base import PipelineStep, FrameInput, EffectFeatures
from ..config import EffectsConfig
from ..metrics_effects import analyze_effects


class EffectsAnalysisStep(PipelineStep[FrameInput, EffectFeatures]):
    """
    Effects analysis step

    Input: FrameInput (pixel buffer)
    Output: EffectFeatures (blur/noise/vignette detection and strength)
    """

    def __init__(self, config: Optional[EffectsConfig] = None):
        self.config = config or EffectsConfig()

    @property
    def name(self) -> str:
        return "effects"

    @property
    def description(self) -> str:
        return "Blur, noise and vignette estimates"

    def run(self, input_data: FrameInput) -> EffectFeatures:
        self.log_start(input_data)

        try:
            input_data.validate()
            cfg = self.config
            raw = analyze_effects(
                input_data.buffer,
                blur_normalizer=cfg.blur_normalizer,
                blur_threshold=cfg.blur_threshold,
                noise_threshold=cfg.noise_threshold,
                vignette_threshold=cfg.vignette_threshold,
            )
            output = EffectFeatures(success=True, **raw)
            self.log_complete(output)
            return output

        except Exception as e:
            self.log_complete(EffectFeatures(success=False, error_message=str(e)))
            raise
