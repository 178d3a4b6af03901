"""
Shared fixtures for all tests.

Synthetic RGBA frames plus feature-set builders for the rule tests.
"""
import pytest
import numpy as np
from PIL import Image

from frame_features.buffer import PixelBuffer
from frame_features.config import EngineConfig
from frame_features.steps.base import (
    ColorFeatures,
    CompositionFeatures,
    EffectFeatures,
    ElementFeatures,
    FeatureSet,
    PaletteEntry,
)


def rgba_frame(rgb, width=32, height=32):
    """Uniform opaque RGBA array."""
    frame = np.zeros((height, width, 4), dtype=np.uint8)
    frame[..., :3] = rgb
    frame[..., 3] = 255
    return frame


def gray_frame(lum):
    """Opaque RGBA array from an (H, W) 0-255 luminance array."""
    lum = np.clip(lum, 0, 255).astype(np.uint8)
    frame = np.empty(lum.shape + (4,), dtype=np.uint8)
    frame[..., 0] = lum
    frame[..., 1] = lum
    frame[..., 2] = lum
    frame[..., 3] = 255
    return frame


def to_buffer(frame, source="capture", timestamp=None):
    height, width = frame.shape[:2]
    return PixelBuffer(width=width, height=height, data=frame, source=source, timestamp=timestamp)


# =============================================================================
# Buffer Fixtures
# =============================================================================

@pytest.fixture
def make_buffer():
    """Factory: (H, W, 4) uint8 array -> PixelBuffer."""
    return to_buffer


@pytest.fixture
def uniform_buffer():
    """32x32 frame of a single saturated-ish color."""
    return to_buffer(rgba_frame((120, 80, 200)))


@pytest.fixture
def checkerboard_buffer():
    """32x32 black/white checkerboard with a 1-pixel period."""
    ys, xs = np.mgrid[0:32, 0:32]
    return to_buffer(gray_frame(np.where((xs + ys) % 2 == 0, 255, 0)))


@pytest.fixture
def stripes_buffer():
    """32x32 vertical black/white stripes, 2 pixels wide."""
    xs = np.tile(np.arange(32), (32, 1))
    return to_buffer(gray_frame(np.where((xs // 2) % 2 == 0, 255, 0)))


@pytest.fixture
def two_by_two_buffer():
    """2x2 frame: top row white, bottom row black."""
    frame = np.zeros((2, 2, 4), dtype=np.uint8)
    frame[0, :, :3] = 255
    frame[..., 3] = 255
    return to_buffer(frame)


@pytest.fixture
def vignette_buffer():
    """100x100 black frame with a bright centered disk."""
    ys, xs = np.mgrid[0:100, 0:100]
    distance = np.hypot(xs - 50.0, ys - 50.0)
    max_distance = np.hypot(50.0, 50.0)
    return to_buffer(gray_frame(np.where(distance < 0.3 * max_distance, 255, 0)))


@pytest.fixture
def radial_falloff_buffer():
    """100x100 frame whose brightness falls off linearly from the centre."""
    ys, xs = np.mgrid[0:100, 0:100]
    distance = np.hypot(xs - 50.0, ys - 50.0)
    max_distance = np.hypot(50.0, 50.0)
    return to_buffer(gray_frame(255.0 * (1.0 - distance / max_distance)))


@pytest.fixture
def noise_buffer():
    """64x48 random RGBA frame (alpha included)."""
    rng = np.random.default_rng(42)
    return to_buffer(rng.integers(0, 256, (48, 64, 4), dtype=np.uint8))


@pytest.fixture
def sample_png(tmp_path):
    """40x20 PNG on disk: left half red, right half blue."""
    frame = np.zeros((20, 40, 3), dtype=np.uint8)
    frame[:, :20] = (255, 0, 0)
    frame[:, 20:] = (0, 0, 255)
    path = tmp_path / "frame.png"
    Image.fromarray(frame).save(path, format="PNG")
    return path


# =============================================================================
# Config / Feature Fixtures
# =============================================================================

@pytest.fixture
def sequential_config():
    """Engine config with the analyzers run inline."""
    config = EngineConfig()
    config.max_workers = 1
    return config


def build_feature_set(**overrides):
    """
    FeatureSet on which no recommendation rule fires.

    Keyword overrides are routed to the family that owns the field.
    """
    composition = {"rule_of_thirds_score": 0.5, "balance_horizontal": 0.0, "balance_vertical": 0.0}
    colors = {
        "dominant": (200, 60, 60),
        "palette": (PaletteEntry(rgb=(200, 60, 60), percentage=1.0),),
        "contrast": 0.8,
        "saturation": 0.5,
    }
    elements = {"shapes_detected": False, "shape_confidence": 0.0, "text_detected": False, "text_confidence": 0.0}
    effects = {
        "blur_detected": False, "blur_strength": 0.1,
        "noise_detected": False, "noise_strength": 0.0,
        "vignette_detected": False, "vignette_strength": 0.1,
    }
    for key, value in overrides.items():
        for family in (composition, colors, elements, effects):
            if key in family:
                family[key] = value
                break
        else:
            raise KeyError(key)

    return FeatureSet(
        composition=CompositionFeatures(**composition),
        colors=ColorFeatures(**colors),
        elements=ElementFeatures(**elements),
        effects=EffectFeatures(**effects),
    )


@pytest.fixture
def feature_set_factory():
    return build_feature_set
