"""
Synthetic Metadata Unit Tests
"""

import random
import re
from datetime import datetime, timezone

import pytest

from ollama_relay.common.synthetic import (
    CATALOG_SIZE_MAX,
    CATALOG_SIZE_MIN,
    QUANTIZATION_LEVELS,
    RandomMetadataGenerator,
    add_one_year,
    format_timestamp,
)


@pytest.mark.parametrize("profile", ["chat", "generate", "stream"])
def test_total_duration_covers_its_parts(profile):
    generator = RandomMetadataGenerator(random.Random(7))
    for _ in range(50):
        timings = generator.timings(profile)
        parts = timings["load_duration"] + timings["prompt_eval_duration"] + timings["eval_duration"]
        assert timings["total_duration"] >= parts
        assert timings["eval_count"] >= 100


def test_stream_profile_reports_prompt_eval_count():
    timings = RandomMetadataGenerator(random.Random(1)).timings("stream")
    assert 10 <= timings["prompt_eval_count"] < 60
    assert "prompt_eval_count" not in RandomMetadataGenerator(random.Random(1)).timings("chat")


def test_seeded_generators_are_reproducible():
    first = RandomMetadataGenerator(random.Random(42))
    second = RandomMetadataGenerator(random.Random(42))
    assert first.digest() == second.digest()
    assert first.context_tokens(5) == second.context_tokens(5)
    assert first.timings("chat") == second.timings("chat")


def test_catalog_values_are_in_range():
    generator = RandomMetadataGenerator(random.Random(3))
    for _ in range(20):
        assert CATALOG_SIZE_MIN <= generator.size_bytes() < CATALOG_SIZE_MAX
        assert generator.quantization_level() in QUANTIZATION_LEVELS
        assert re.fullmatch(r"[0-9a-f]{64}", generator.digest())


def test_completion_id_format():
    completion_id = RandomMetadataGenerator(random.Random(3)).completion_id("chatcmpl")
    assert re.fullmatch(r"chatcmpl-\d+-[0-9a-f]{9}", completion_id)


def test_format_timestamp_uses_milliseconds_and_z_suffix():
    value = datetime(2024, 5, 1, 8, 9, 10, 987654, tzinfo=timezone.utc)
    assert format_timestamp(value) == "2024-05-01T08:09:10.987Z"


def test_add_one_year_handles_leap_day():
    assert add_one_year(datetime(2024, 2, 29, tzinfo=timezone.utc)) == datetime(2025, 3, 1, tzinfo=timezone.utc)
    assert add_one_year(datetime(2023, 6, 15, tzinfo=timezone.utc)).year == 2024


def test_modified_at_is_one_year_ahead(metadata):
    assert metadata.modified_at().startswith("2025-03-01T12:30:45.123")
    assert metadata.created_at() == "2024-02-29T12:30:45.123Z"
