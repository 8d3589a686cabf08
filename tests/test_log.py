from __future__ import annotations

import json

from fieldrec.io.config import StorageSettings
from fieldrec.log import configure_from_settings, configure_logging, get_logger


def test_json_logging_renders_event_and_fields(capsys) -> None:
    configure_logging(level="INFO", json_format=True)
    get_logger("fieldrec.test").info("user_written", key="user/alice")
    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["event"] == "user_written"
    assert payload["key"] == "user/alice"
    assert payload["level"] == "info"
    assert payload["logger_name"] == "fieldrec.test"


def test_level_filtering_from_settings(capsys) -> None:
    configure_from_settings(StorageSettings(log_level="WARNING", log_json=True))
    logger = get_logger("fieldrec.test")
    logger.info("hidden")
    logger.warning("shown")
    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out
