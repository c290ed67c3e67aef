"""Tests for clients.commentary_prompts."""

import json

import pytest

from clients.commentary_prompts import (
    DEBUG_TIMECODES,
    DEFAULT_MODE,
    FUNCTION_DECLARATIONS,
    MODES,
    build_initial_prompt,
    build_optimize_prompt,
)
from narration_sync.commentary_store import Ok, normalize_entries


class TestPrompts:
    def test_initial_prompt_mentions_duration(self):
        prompt = build_initial_prompt(12.5)
        assert prompt.startswith(MODES[DEFAULT_MODE]["prompt"])
        assert "12.5 seconds long" in prompt

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            build_initial_prompt(10, mode="Haiku")

    def test_optimize_prompt_embeds_timecodes(self):
        timecodes = [{"time": "00:00", "text": "Go!"}]
        prompt = build_optimize_prompt(timecodes, 15)
        assert prompt.endswith(json.dumps(timecodes))
        # Last 20% of a 15 second clip
        assert "around 12 to 15 seconds" in prompt


class TestDeclarations:
    def test_set_timecodes_schema(self):
        (declaration,) = FUNCTION_DECLARATIONS
        assert declaration["name"] == "set_timecodes"
        item = declaration["parameters"]["properties"]["timecodes"]["items"]
        assert set(item["properties"]) == {"time", "text", "excitementLevel"}

    def test_debug_fixture_is_valid_commentary(self):
        assert isinstance(normalize_entries(DEBUG_TIMECODES), Ok)
