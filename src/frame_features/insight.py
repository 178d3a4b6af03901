#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Insight generation - turns a feature summary into prose.

The generator is an injectable collaborator:
- NullInsightGenerator: explicit "no AI configured" state
- CallableInsightGenerator: wraps any prompt -> text function
- AnthropicInsightGenerator: Claude via the Messages API

The prompt only carries the numeric summary; the frame itself is never sent.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

import anthropic
from loguru import logger

from .config import InsightConfig

if TYPE_CHECKING:
    from .steps.base import FeatureSet

_SUGGESTION_PREFIX = re.compile(r"^[•\d.\-\s]+")
_NUMBERED = re.compile(r"^\d+\.")


class InsightGenerator(ABC):
    """Text-generation collaborator."""

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Return free text for the prompt. May raise on failure."""
        pass


class NullInsightGenerator(InsightGenerator):
    """No insight generator configured."""

    @property
    def available(self) -> bool:
        return False

    def generate(self, prompt: str) -> str:
        raise RuntimeError("No insight generator configured")


class CallableInsightGenerator(InsightGenerator):
    """Adapts a plain `prompt -> text` function."""

    def __init__(self, fn: Callable[[str], str]):
        self.fn = fn

    def generate(self, prompt: str) -> str:
        return self.fn(prompt)


class AnthropicInsightGenerator(InsightGenerator):
    """
    Claude-backed insight generator.

    Reads ANTHROPIC_API_KEY from the environment unless an api_key is given.
    The client enforces `timeout` itself and does not retry; retries belong
    to InsightStep.
    """

    def __init__(
        self,
        model: str,
        max_tokens: int = 1024,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: int = 0
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.max_retries = max_retries
        self._api_key = api_key
        self._client = None

    def _get_client(self):
        if self._client is None:
            kwargs = {"max_retries": self.max_retries}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            if self._api_key:
                kwargs["api_key"] = self._api_key
            self._client = anthropic.Anthropic(**kwargs)
        return self._client

    def generate(self, prompt: str) -> str:
        response = self._get_client().messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.content[0].text.strip()


def build_insight_prompt(feature_set: "FeatureSet") -> str:
    """
    Build the structured prompt from a feature set summary.
    """
    composition = feature_set.composition
    elements = feature_set.elements

    detected_elements = []
    if elements.shapes_detected:
        detected_elements.append("shapes")
    if elements.text_detected:
        detected_elements.append("text")
    detected_effects = feature_set.effects.detected_effects()

    composition_summary = json.dumps({
        "rule_of_thirds_score": round(composition.rule_of_thirds_score, 3),
        "balance_horizontal": round(composition.balance_horizontal, 3),
        "balance_vertical": round(composition.balance_vertical, 3),
    })

    return (
        "Analyze this motion-graphics frame/composition:\n"
        "\n"
        "Visual Features:\n"
        f"- Composition: {composition_summary}\n"
        f"- Colors: {len(feature_set.colors.palette)} colors detected, "
        f"contrast {feature_set.colors.contrast:.2f}, saturation {feature_set.colors.saturation:.2f}\n"
        f"- Elements: {', '.join(detected_elements) or 'none'}\n"
        f"- Effects: {', '.join(detected_effects) or 'none'}\n"
        "\n"
        "Please provide:\n"
        "1. Brief description of the frame\n"
        "2. Technical analysis (lighting, composition, effects)\n"
        "3. Suggestions for improvement\n"
        "4. Similar techniques or styles to explore\n"
        "\n"
        "Keep response focused and actionable."
    )


def parse_technical_analysis(text: str) -> Dict[str, str]:
    """Pick the first line mentioning lighting, composition and effects."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]

    def first(pattern: str, default: str) -> str:
        regex = re.compile(pattern, re.IGNORECASE)
        return next((line for line in lines if regex.search(line)), default)

    return {
        "lighting": first(r"light", "Standard lighting"),
        "composition": first(r"compos", "Balanced composition"),
        "effects": first(r"effect", "Minimal effects"),
    }


def parse_suggestions(text: str) -> List[str]:
    """Bullet points, numbered items and lines that suggest something."""
    suggestions = []
    for line in text.splitlines():
        stripped = line.strip()
        if "•" in stripped or _NUMBERED.match(stripped) or "suggest" in stripped.lower():
            cleaned = _SUGGESTION_PREFIX.sub("", stripped).strip()
            if cleaned:
                suggestions.append(cleaned)
    return suggestions


def build_generator(config: InsightConfig) -> InsightGenerator:
    """Generator for the CLI: Anthropic when enabled, otherwise absent."""
    if not config.enabled:
        return NullInsightGenerator()
    logger.info(f"Insight generator: Anthropic ({config.model}, timeout {config.timeout_seconds}s)")
    return AnthropicInsightGenerator(
        model=config.model,
        max_tokens=config.max_tokens,
        timeout=config.timeout_seconds,
        max_retries=0
    )
