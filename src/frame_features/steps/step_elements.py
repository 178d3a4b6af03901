#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Element detection step

- shapes: Sobel edge density
- text: local contrast map
"""

from typing import Optional

from .base import PipelineStep, FrameInput, ElementFeatures
from ..config import ElementsConfig
from ..metrics_elements import detect_visual_elements


class ElementDetectionStep(PipelineStep[FrameInput, ElementFeatures]):
    """
    Element detection step

    Input: FrameInput (pixel buffer)
    Output: ElementFeatures (shape/text likelihood)
    """

    def __init__(self, config: Optional[ElementsConfig] = None):
        self.config = config or ElementsConfig()

    @property
    def name(self) -> str:
        return "elements"

    @property
    def description(self) -> str:
        return "Shape likelihood from edges, text likelihood from local contrast"

    def run(self, input_data: FrameInput) -> ElementFeatures:
        self.log_start(input_data)

        try:
            input_data.validate()
            cfg = self.config
            raw = detect_visual_elements(
                input_data.buffer,
                edge_threshold=cfg.edge_magnitude_threshold,
                shape_density_threshold=cfg.shape_density_threshold,
                shape_confidence_scale=cfg.shape_confidence_scale,
                contrast_threshold=cfg.contrast_threshold,
                text_ratio_threshold=cfg.text_ratio_threshold,
                text_confidence_scale=cfg.text_confidence_scale,
            )
            output = ElementFeatures(success=True, **raw)
            self.log_complete(output)
            return output

        except Exception as e:
            self.log_complete(ElementFeatures(success=False, error_message=str(e)))
            raise
