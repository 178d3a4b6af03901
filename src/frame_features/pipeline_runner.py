#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Frame analysis runner

Design:
- Each step runs independently with explicit inputs and outputs
- The four analyzers fan out over one shared read-only buffer and are
  joined before the FeatureSet is built
- The cache is consulted before and updated after feature extraction
- Insight failures degrade to insight=None; the numeric result still returns
- Step-level debug hooks
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from loguru import logger

from .buffer import FrameSource, ImageFileSource, PixelBuffer
from .cache import CacheEntry, ResultCache, derive_cache_key
from .config import EngineConfig
from .errors import InsightUnavailable
from .insight import InsightGenerator
from .steps.base import (
    AnalysisResult,
    ExportInput,
    FeatureSet,
    FrameInput,
    InsightInput,
    Recommendation,
    RecommendationInput,
)
from .steps.step_composition import CompositionAnalysisStep
from .steps.step_color import ColorAnalysisStep
from .steps.step_elements import ElementDetectionStep
from .steps.step_effects import EffectsAnalysisStep
from .steps.step_insight import InsightStep
from .steps.step_recommend import RecommendationStep
from .steps.step_export import ExportStep
from .utils import log_execution_time, now_ms

# Type definitions
StepHook = Callable[[str, Dict[str, Any]], None]


class FrameAnalyzer:
    """
    Frame feature extraction engine.

    Usage (full analysis):
        analyzer = FrameAnalyzer(insight_generator=AnthropicInsightGenerator("claude-sonnet-4-5"))
        result = analyzer.analyze(buffer)
        for rec in result.recommendations:
            print(rec.priority.value, rec.message)

    Usage (single steps):
        analyzer = FrameAnalyzer()
        features = analyzer.extract_features(buffer)
        recommendations = analyzer.generate_recommendations(features)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        insight_generator: Optional[InsightGenerator] = None,
        step_hook: Optional[StepHook] = None
    ):
        """
        Args:
            config: Engine configuration (defaults when omitted)
            insight_generator: Text generator; None means no insight
            step_hook: Called with (stage, info) after each stage
        """
        self.config = config or EngineConfig()
        self.step_hook = step_hook
        cfg = self.config

        # Step instances
        self._composition_step = CompositionAnalysisStep(cfg.composition)
        self._color_step = ColorAnalysisStep(cfg.color)
        self._elements_step = ElementDetectionStep(cfg.elements)
        self._effects_step = EffectsAnalysisStep(cfg.effects)
        self._insight_step = InsightStep(insight_generator, cfg.insight)
        self._recommendation_step = RecommendationStep(cfg.recommendations)
        self._export_step = ExportStep()

        self._cache = ResultCache(cfg.cache.max_entries)
        self._executor: Optional[ThreadPoolExecutor] = None

        logger.info(
            f"Analyzer initialized | workers: {cfg.max_workers} | "
            f"cache: {'on' if cfg.cache.enabled else 'off'} ({cfg.cache.key_mode}) | "
            f"insight: {'on' if self._insight_step.enabled else 'off'}"
        )

    # =========================================================================
    # Feature extraction
    # =========================================================================

    def extract_features(self, buffer: PixelBuffer) -> FeatureSet:
        """
        Run the four analyzers over one buffer and merge their outputs.

        Raises:
            MalformedBuffer: if the buffer violates the size invariant
        """
        buffer.validate()
        frame_input = FrameInput(buffer=buffer)
        analyzers = (self._composition_step, self._color_step, self._elements_step, self._effects_step)

        if self.config.max_workers <= 1:
            outputs = [step.run(frame_input) for step in analyzers]
        else:
            executor = self._get_executor()
            futures = [executor.submit(step.run, frame_input) for step in analyzers]
            # Join all before merging; the first failure propagates
            outputs = [future.result() for future in futures]

        composition, colors, elements, effects = outputs
        feature_set = FeatureSet(composition=composition, colors=colors, elements=elements, effects=effects)

        self._emit("features", {
            "width": buffer.width,
            "height": buffer.height,
            "features": feature_set.to_dict(),
        })
        return feature_set

    def generate_insight(self, feature_set: FeatureSet) -> Optional[str]:
        """Insight text, or None when no generator is configured or it failed."""
        try:
            output = self._insight_step.run(InsightInput(feature_set=feature_set))
        except InsightUnavailable as e:
            logger.warning(f"Continuing without insight: {e}")
            return None

        if output.insight is not None:
            self._emit("insight", {"attempts": output.attempts, "length": len(output.insight)})
        return output.insight

    def generate_recommendations(self, feature_set: FeatureSet, insight: Optional[str] = None) -> List[Recommendation]:
        output = self._recommendation_step.run(RecommendationInput(feature_set=feature_set, insight=insight))
        return list(output.recommendations)

    # =========================================================================
    # Full analysis
    # =========================================================================

    @log_execution_time
    def analyze(self, buffer: PixelBuffer) -> AnalysisResult:
        """
        Analyze one frame.

        Flow:
        1. Validate the buffer and derive its cache key
        2. Return the cached analysis on a hit
        3. Extract features, request insight, apply recommendation rules
        4. Cache the result (evicting the oldest entry when full)

        Raises:
            MalformedBuffer: if the buffer violates the size invariant
        """
        buffer.validate()
        cache_cfg = self.config.cache
        cache_key = derive_cache_key(buffer, cache_cfg.key_mode, cache_cfg.prefix_bytes)

        if cache_cfg.enabled:
            entry = self._cache.lookup(cache_key)
            if entry is not None:
                logger.info(f"Cache hit: {cache_key}")
                self._emit("cache", {"cache_key": cache_key, "hit": True})
                return AnalysisResult(
                    frame=buffer,
                    feature_set=entry.feature_set,
                    insight=entry.insight,
                    recommendations=entry.recommendations,
                    timestamp=now_ms(),
                    cache_key=cache_key,
                    cache_hit=True,
                )

        logger.info(f"Analyzing {buffer.width}x{buffer.height} frame ({buffer.source})")
        feature_set = self.extract_features(buffer)
        insight = self.generate_insight(feature_set)
        recommendations = tuple(self.generate_recommendations(feature_set, insight))
        timestamp = now_ms()

        if cache_cfg.enabled:
            self._cache.insert(CacheEntry(
                key=cache_key,
                feature_set=feature_set,
                insight=insight,
                recommendations=recommendations,
                created_at=timestamp,
                frame_timestamp=buffer.timestamp,
            ))
            self._emit("cache", {"cache_key": cache_key, "hit": False, "size": len(self._cache)})

        logger.info(f"  ✓ {len(recommendations)} recommendation(s)")
        return AnalysisResult(
            frame=buffer,
            feature_set=feature_set,
            insight=insight,
            recommendations=recommendations,
            timestamp=timestamp,
            cache_key=cache_key,
        )

    def analyze_source(self, source: FrameSource) -> Optional[AnalysisResult]:
        """Capture from a frame source and analyze it; None when no frame is available."""
        if not source.available:
            logger.warning("No frame source available")
            return None
        buffer = source.capture()
        if buffer is None:
            logger.warning("Frame source returned no frame")
            return None
        return self.analyze(buffer)

    def analyze_image_file(self, path: Union[str, Path]) -> AnalysisResult:
        """Decode an image file onto the analysis canvas and analyze it."""
        source = ImageFileSource(path, canvas_size=self.config.source.canvas_size)
        return self.analyze(source.capture())

    def export(self, result: AnalysisResult, output_path: Union[str, Path], indent: int = 2) -> str:
        """Write a result as JSON; returns the written path."""
        output = self._export_step.run(ExportInput(result=result, output_path=str(output_path), indent=indent))
        return output.output_path

    # =========================================================================
    # Cache introspection
    # =========================================================================

    def get_analysis_history(self) -> List[CacheEntry]:
        """Cached analyses, oldest first."""
        return self._cache.entries()

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("Analysis cache cleared")

    @property
    def cache(self) -> ResultCache:
        return self._cache

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.max_workers, thread_name_prefix="analyzer"
            )
        return self._executor

    def _emit(self, stage: str, info: Dict[str, Any]) -> None:
        if self.step_hook:
            self.step_hook(stage, info)

    def close(self) -> None:
        """Shut down worker threads."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "FrameAnalyzer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def export_result_json(result: AnalysisResult, output_path: Union[str, Path], indent: int = 2) -> str:
    """Write an AnalysisResult as a JSON artifact; returns the written path."""
    output = ExportStep().run(ExportInput(result=result, output_path=str(output_path), indent=indent))
    return output.output_path
