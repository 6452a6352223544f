"""
Generation settings resolution.

Merges caller-supplied options with defaults. Invalid values are replaced
by the default for that field; resolution never fails.
"""
import re
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

VALID_RESOLUTIONS = ("480p", "720p", "1080p")
VALID_QUALITIES = ("low", "medium", "high")
VALID_FORMATS = ("mp4", "webm")
FPS_MIN = 15
FPS_MAX = 60

DEFAULT_RESOLUTION = "720p"
DEFAULT_FPS = 24
DEFAULT_QUALITY = "high"
DEFAULT_FORMAT = "mp4"

SETTING_FIELDS = ("resolution", "fps", "quality", "format")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class GenerationSettings:
    resolution: str = DEFAULT_RESOLUTION
    fps: int = DEFAULT_FPS
    quality: str = DEFAULT_QUALITY
    format: str = DEFAULT_FORMAT

    def to_dict(self) -> dict:
        return asdict(self)


def _parse_fps(value: Any) -> Optional[int]:
    """Parse an integer prefix the way a lenient form parser would."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            try:
                return int(match.group(1))
            except ValueError:
                # Digit strings past the interpreter's int conversion limit
                return None
    return None


def _as_mapping(overrides: Any) -> Mapping[str, Any]:
    if overrides is None:
        return {}
    if isinstance(overrides, GenerationSettings):
        return overrides.to_dict()
    if hasattr(overrides, "model_dump"):
        return overrides.model_dump()
    if isinstance(overrides, Mapping):
        return overrides
    return {}


def resolve_generation_settings(overrides: Any = None) -> GenerationSettings:
    """
    Build a complete GenerationSettings from partial input.

    Args:
        overrides: Mapping, pydantic model or GenerationSettings holding any
            of resolution, fps, quality, format. Unknown keys are ignored.

    Returns:
        GenerationSettings with every field set to a legal value
    """
    data = _as_mapping(overrides)

    resolution = data.get("resolution") or DEFAULT_RESOLUTION
    if resolution not in VALID_RESOLUTIONS:
        resolution = DEFAULT_RESOLUTION

    fps = _parse_fps(data.get("fps") or DEFAULT_FPS)
    if fps is None or fps < FPS_MIN or fps > FPS_MAX:
        fps = DEFAULT_FPS

    quality = data.get("quality") or DEFAULT_QUALITY
    if quality not in VALID_QUALITIES:
        quality = DEFAULT_QUALITY

    fmt = data.get("format") or DEFAULT_FORMAT
    if fmt not in VALID_FORMATS:
        fmt = DEFAULT_FORMAT

    return GenerationSettings(resolution=resolution, fps=fps, quality=quality, format=fmt)
