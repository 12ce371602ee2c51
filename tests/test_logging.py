"""Tests for logging configuration and console noise filtering."""

import json
import logging

import pytest
import structlog

from focusfeed.utils.logging import (
    ConsoleNoiseFilter,
    ConsoleNoiseFilterProcessor,
    HighVolumeEventPolicy,
    configure_logging,
    flush_logging,
    get_logger,
)


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_high_volume_events_are_rate_limited():
    clock = _Clock()
    processor = ConsoleNoiseFilterProcessor(
        high_volume_policies={"generation_cache_hit": HighVolumeEventPolicy(2, 10.0)},
        time_func=clock,
    )
    event = {"event": "generation_cache_hit", "level": "debug"}

    processor(None, "debug", dict(event))
    processor(None, "debug", dict(event))
    with pytest.raises(structlog.DropEvent):
        processor(None, "debug", dict(event))

    clock.now = 11.0
    assert processor(None, "debug", dict(event))["event"] == "generation_cache_hit"


def test_other_events_pass_through():
    processor = ConsoleNoiseFilterProcessor(
        high_volume_policies={"generation_cache_hit": HighVolumeEventPolicy(1, 10.0)}
    )
    for _ in range(5):
        processor(None, "info", {"event": "generation_completed", "level": "info"})


def test_level_overrides_drop_quiet_modules():
    processor = ConsoleNoiseFilterProcessor(
        level_overrides={"focusfeed.providers.factory": "WARNING"}
    )
    with pytest.raises(structlog.DropEvent):
        processor(
            None,
            "debug",
            {"event": "creating_provider", "logger": "focusfeed.providers.factory", "level": "debug"},
        )
    result = processor(
        None,
        "error",
        {"event": "provider_creation_failed", "logger": "focusfeed.providers.factory", "level": "error"},
    )
    assert result["event"] == "provider_creation_failed"


def test_handler_filter_reads_structlog_event_dict():
    noise_filter = ConsoleNoiseFilter(
        ConsoleNoiseFilterProcessor(
            high_volume_policies={"dedup_filtered": HighVolumeEventPolicy(1, 60.0)}
        )
    )
    record = logging.LogRecord(
        "focusfeed.application", logging.DEBUG, __file__, 1, {"event": "dedup_filtered"}, None, None
    )

    assert noise_filter.filter(record) is True
    assert noise_filter.filter(record) is False


def test_file_logging_writes_json(tmp_path):
    configure_logging("INFO", log_dir=tmp_path)
    try:
        get_logger("focusfeed.tests").warning("provider_call_completed", topic="Chess")
        get_logger("focusfeed.tests").error("generation_unexpected_error", topic="Chess")
        flush_logging()

        lines = (tmp_path / "focusfeed.log").read_text(encoding="utf-8").splitlines()
        events = [json.loads(line) for line in lines]
        assert any(
            e["event"] == "provider_call_completed" and e["topic"] == "Chess"
            for e in events
        )

        errors = (tmp_path / "errors.log").read_text(encoding="utf-8")
        assert "generation_unexpected_error" in errors
        assert "provider_call_completed" not in errors
    finally:
        configure_logging("INFO")
