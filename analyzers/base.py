"""
🧩 FACTOR ANALYZER FOUNDATION
=============================
Shared plumbing for every factor analyzer.

HOW IT WORKS:
1. An AnalysisContext bundles the snapshots one evaluation looks at
2. Analyzers read fields through a FieldReader, which remembers what was missing
3. The @factor_analyzer decorator turns the analyzer's (value, indicators, details)
   into a SubScore whose confidence drops with every missing field
4. Nothing raised inside an analyzer escapes: the worst case is a
   zero-confidence SubScore with an explanatory indicator
"""

import functools
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from config.settings import Settings, settings as default_settings
from models.errors import PartialData
from models.profiles import CompetitiveIntel, EntityProfile, HealthSnapshot
from models.results import Dimension, SubScore

AnalyzerOutput = Tuple[float, List[str], Dict[str, Any]]

_MISSING = object()


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp a score into [low, high]."""
    return min(max(value, low), high)


@dataclass(frozen=True)
class AnalysisContext:
    """Everything one evaluation of one entity may look at."""
    entity_id: str
    now: datetime
    profile: Optional[EntityProfile] = None
    health: Optional[HealthSnapshot] = None
    intel: Optional[CompetitiveIntel] = None
    settings: Settings = field(default_factory=lambda: default_settings)


class FieldReader:
    """
    Reads dotted paths off an AnalysisContext and records missing fields.

    Usage:
        reader = FieldReader(ctx)
        employees = reader.get("profile.firmographics.employee_count", 0)
        stage = reader.optional("intel.evaluation_stage")

    `get` counts a None as missing data; `optional` is for inputs whose
    absence is itself meaningful (no funding round, no competitive intel).
    """

    def __init__(self, context: AnalysisContext):
        self.context = context
        self.consulted: List[str] = []
        self.missing: List[str] = []

    @property
    def rules(self) -> Settings:
        return self.context.settings

    def get(self, path: str, default: Any = None) -> Any:
        if path not in self.consulted:
            self.consulted.append(path)
        value = self._resolve(path)
        if value is _MISSING or value is None:
            if path not in self.missing:
                self.missing.append(path)
            return default
        return value

    def optional(self, path: str, default: Any = None) -> Any:
        value = self._resolve(path)
        if value is _MISSING or value is None:
            return default
        return value

    def require(self, *paths: str) -> None:
        """Raise PartialData if none of the given paths is present."""
        if all(self._resolve(p) in (None, _MISSING) for p in paths):
            raise PartialData(paths)

    def confidence(self, base: float) -> float:
        if not self.consulted:
            return clamp(base, 0.0, 1.0)
        penalty = self.rules.analysis.missing_field_penalty
        ratio = len(self.missing) / len(self.consulted)
        return round(clamp(base * (1 - penalty * ratio), 0.0, 1.0), 4)

    def _resolve(self, path: str) -> Any:
        value: Any = self.context
        for part in path.split("."):
            if value is None:
                return _MISSING
            value = getattr(value, part, _MISSING)
            if value is _MISSING:
                return _MISSING
        return value


def factor_analyzer(dimension: Dimension, confidence: Callable[[Settings], float]):
    """
    Decorate `func(reader) -> (value, indicators, details)` into
    `analyzer(context) -> SubScore`.

    Args:
        dimension: Dimension the analyzer scores
        confidence: Picks the analyzer's base confidence out of the settings
    """
    def decorator(func: Callable[[FieldReader], AnalyzerOutput]) -> Callable[[AnalysisContext], SubScore]:
        @functools.wraps(func)
        def wrapper(context: AnalysisContext) -> SubScore:
            reader = FieldReader(context)
            base = confidence(context.settings)
            try:
                value, indicators, details = func(reader)
            except PartialData as e:
                logger.warning(f"{dimension.value} analysis degraded for {context.entity_id}: {e}")
                return SubScore(
                    dimension=dimension,
                    value=0.0,
                    indicators=(f"Insufficient data ({', '.join(e.fields)})",),
                    confidence=0.0,
                    details={"missing": list(e.fields)},
                )
            except Exception as e:
                logger.error(f"{dimension.value} analysis failed for {context.entity_id}: {e}")
                return SubScore(
                    dimension=dimension,
                    value=0.0,
                    indicators=(f"Analysis unavailable: {e}",),
                    confidence=0.0,
                    details={"error": str(e)},
                )

            if reader.missing:
                details = {**details, "missing": list(reader.missing)}
                logger.debug(f"{dimension.value} for {context.entity_id} missing {reader.missing}")

            return SubScore(
                dimension=dimension,
                value=round(clamp(value), 2),
                indicators=tuple(indicators),
                confidence=reader.confidence(base),
                details=details,
            )

        wrapper.dimension = dimension
        return wrapper

    return decorator


def matches_any(items: List[str], terms: List[str]) -> List[str]:
    """Items containing any of the terms (case-insensitive substring)."""
    lowered = [t.lower() for t in terms]
    return [item for item in items if any(t in item.lower() for t in lowered)]
