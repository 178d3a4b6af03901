#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Insight generation step

Calls the injected InsightGenerator with a prompt built from the feature
set. Each call runs on a daemon thread with a timeout and is retried at most
`max_retries` times with a short backoff; after that the step raises
InsightUnavailable and the pipeline continues without insight text.
"""

import threading
import time
from typing import Optional

from loguru import logger

from .base import PipelineStep, InsightInput, InsightOutput
from ..config import InsightConfig
from ..errors import InsightUnavailable
from ..insight import InsightGenerator, NullInsightGenerator, build_insight_prompt


class InsightStep(PipelineStep[InsightInput, InsightOutput]):
    """
    Insight generation step

    Input: InsightInput (feature set)
    Output: InsightOutput (insight text or None when no generator is configured)
    Raises: InsightUnavailable when the generator fails or times out
    """

    def __init__(
        self,
        generator: Optional[InsightGenerator] = None,
        config: Optional[InsightConfig] = None
    ):
        self.generator = generator or NullInsightGenerator()
        self.config = config or InsightConfig()

    @property
    def name(self) -> str:
        return "insight"

    @property
    def description(self) -> str:
        return "AI-authored insight text from the feature summary"

    @property
    def enabled(self) -> bool:
        return self.config.enabled and self.generator.available

    def run(self, input_data: InsightInput) -> InsightOutput:
        if not self.enabled:
            return InsightOutput(success=True, insight=None, attempts=0)
        if input_data.feature_set is None:
            raise ValueError("InsightInput requires a feature set")

        self.log_start(input_data)
        prompt = build_insight_prompt(input_data.feature_set)

        try:
            text, attempts = self._generate_with_retry(prompt)
        except InsightUnavailable as e:
            self.log_complete(InsightOutput(success=False, error_message=str(e), attempts=e.attempts))
            raise

        output = InsightOutput(success=True, insight=text, attempts=attempts)
        self.log_complete(output)
        return output

    def _generate_with_retry(self, prompt: str):
        cfg = self.config
        total_attempts = 1 + max(cfg.max_retries, 0)
        last_error = None

        for attempt in range(1, total_attempts + 1):
            try:
                text = self._call_with_timeout(prompt, cfg.timeout_seconds)
                if text and text.strip():
                    return text.strip(), attempt
                last_error = "empty response"
            except TimeoutError:
                last_error = f"timed out after {cfg.timeout_seconds:.1f}s"
            except Exception as e:
                last_error = f"{type(e).__name__}: {e}"

            logger.warning(f"[{self.name}] attempt {attempt}/{total_attempts} failed: {last_error}")
            if attempt < total_attempts:
                time.sleep(cfg.retry_backoff_seconds)

        raise InsightUnavailable(
            f"Insight generator unavailable after {total_attempts} attempt(s): {last_error}",
            attempts=total_attempts
        )

    def _call_with_timeout(self, prompt: str, timeout: float) -> Optional[str]:
        """
        Run one generator call on a daemon thread and wait up to `timeout`.

        A call that outlives the timeout is abandoned; being a daemon, it
        never holds up interpreter exit.
        """
        outcome = {}

        def target():
            try:
                outcome["text"] = self.generator.generate(prompt)
            except Exception as e:
                outcome["error"] = e

        worker = threading.Thread(target=target, name=f"{self.name}-call", daemon=True)
        worker.start()
        worker.join(timeout)
        if worker.is_alive():
            raise TimeoutError(f"generator call exceeded {timeout}s")
        if "error" in outcome:
            raise outcome["error"]
        return outcome.get("text")
