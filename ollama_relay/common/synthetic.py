"""
Synthetic Metadata Generation

Local-runner and OpenAI clients expect timing counters, digests and catalog
metadata that the upstream never provides. Every fabricated value goes
through a MetadataGenerator so formatters stay deterministic under test.

Durations are nanoseconds. Totals are built from their parts, so
total_duration always covers load + prompt eval + eval.
"""

from __future__ import annotations

import random
import time
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone

QUANTIZATION_LEVELS = ("Q4_K_M", "F16")

CATALOG_SIZE_MIN = 100_000_000
CATALOG_SIZE_MAX = 600_000_000

# Upper bounds (ns) and count ranges per response kind
_TIMING_PROFILES: dict[str, dict[str, tuple[int, int]]] = {
    "chat": {
        "load_duration": (0, 2_000_000),
        "prompt_eval_duration": (0, 400_000_000),
        "eval_duration": (0, 5_000_000_000),
        "eval_count": (100, 400),
    },
    "generate": {
        "load_duration": (0, 60_000_000),
        "prompt_eval_duration": (0, 50_000_000),
        "eval_duration": (0, 14_000_000_000),
        "eval_count": (100, 600),
    },
    "stream": {
        "load_duration": (0, 3_000_000_000),
        "prompt_eval_duration": (0, 500_000_000),
        "eval_duration": (0, 17_000_000_000),
        "eval_count": (100, 1100),
        "prompt_eval_count": (10, 60),
    },
}


class MetadataGenerator(ABC):
    """Source of every synthetic value the formatters emit."""

    @abstractmethod
    def timings(self, profile: str) -> dict[str, int]:
        """
        Timing/usage counters for a terminal local-runner frame.

        Args:
            profile: "chat", "generate" or "stream"

        Returns:
            dict: total_duration, load_duration, prompt_eval_duration,
            eval_count, eval_duration and, for "stream", prompt_eval_count
        """

    @abstractmethod
    def context_tokens(self, count: int) -> list[int]:
        """Fake token ids for the local-runner generate `context` field."""

    @abstractmethod
    def digest(self) -> str:
        """64 hex characters."""

    @abstractmethod
    def size_bytes(self) -> int:
        """Model size in [100_000_000, 600_000_000)."""

    @abstractmethod
    def quantization_level(self) -> str:
        pass

    @abstractmethod
    def completion_id(self, prefix: str) -> str:
        pass

    @abstractmethod
    def now(self) -> datetime:
        """Current UTC time."""

    def created_at(self) -> str:
        return format_timestamp(self.now())

    def created_unix(self) -> int:
        return int(self.now().timestamp())

    def modified_at(self) -> str:
        """One year ahead of now."""
        return format_timestamp(add_one_year(self.now()))


class RandomMetadataGenerator(MetadataGenerator):
    """
    Default generator backed by random.Random.

    Pass a seeded Random for reproducible output.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def timings(self, profile: str) -> dict[str, int]:
        bounds = _TIMING_PROFILES[profile]
        load = self._rng.randrange(*bounds["load_duration"])
        prompt_eval = self._rng.randrange(*bounds["prompt_eval_duration"])
        evaluation = self._rng.randrange(*bounds["eval_duration"])
        # Scheduling overhead on top of the measured phases
        overhead = self._rng.randrange(0, 50_000_000)

        result = {
            "total_duration": load + prompt_eval + evaluation + overhead,
            "load_duration": load,
            "prompt_eval_duration": prompt_eval,
            "eval_count": self._rng.randrange(*bounds["eval_count"]),
            "eval_duration": evaluation,
        }
        if "prompt_eval_count" in bounds:
            result["prompt_eval_count"] = self._rng.randrange(*bounds["prompt_eval_count"])
        return result

    def context_tokens(self, count: int) -> list[int]:
        return [self._rng.randrange(100_000) for _ in range(count)]

    def digest(self) -> str:
        return "".join(self._rng.choice("0123456789abcdef") for _ in range(64))

    def size_bytes(self) -> int:
        return self._rng.randrange(CATALOG_SIZE_MIN, CATALOG_SIZE_MAX)

    def quantization_level(self) -> str:
        return self._rng.choice(QUANTIZATION_LEVELS)

    def completion_id(self, prefix: str) -> str:
        suffix = uuid.UUID(int=self._rng.getrandbits(128)).hex[:9]
        return f"{prefix}-{int(time.time() * 1000)}-{suffix}"

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def add_one_year(value: datetime) -> datetime:
    try:
        return value.replace(year=value.year + 1)
    except ValueError:
        # Feb 29 -> Mar 1
        return value.replace(year=value.year + 1, month=3, day=1)
