from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from logjson import ArrayMergeHandling, JsonFormatter, ResolvedConfig
from logjson.config.builder import ConfigBuilder


def write_config(path: Path, content: str) -> None:
    (path / "config.yml").write_text(content.strip(), encoding="utf-8")


def test_defaults_without_directory() -> None:
    settings = ResolvedConfig().get()
    assert settings.array_merge is ArrayMergeHandling.CONCAT
    assert settings.ignore_null_on_merge is True
    assert settings.inner_exception_depth == 1
    assert settings.utc_timestamps is False
    assert settings.hostname is None
    assert settings.composite_message_types == ("BraceMessage", "DollarMessage")
    assert settings.log_level == logging.INFO


def test_yaml_values_are_used_and_cached(tmp_path: Path) -> None:
    write_config(
        tmp_path,
        """
merge:
  array_handling: union
  ignore_null: false
exception:
  inner_depth: 3
host:
  name: web-1
log:
  level: debug
""",
    )
    settings = ResolvedConfig(tmp_path).get()

    assert settings.array_merge is ArrayMergeHandling.UNION
    assert settings.ignore_null_on_merge is False
    assert settings.inner_exception_depth == 3
    assert settings.hostname == "web-1"
    assert settings.log_level == logging.DEBUG

    cached = json.loads((tmp_path / ".config.resolved.json").read_text())
    assert cached["array_merge"] == "union"


def test_cached_resolution_is_reused(tmp_path: Path) -> None:
    write_config(tmp_path, "exception:\n  inner_depth: 2")
    assert ResolvedConfig(tmp_path).get().inner_exception_depth == 2

    write_config(tmp_path, "exception:\n  inner_depth: 5")
    assert ResolvedConfig(tmp_path).get().inner_exception_depth == 2


def test_environment_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOGJSON_ARRAY_MERGE", "UNION")
    monkeypatch.setenv("LOGJSON_UTC", "true")
    monkeypatch.setenv("LOGJSON_INNER_DEPTH", "2")
    monkeypatch.setenv("LOGJSON_COMPOSITE_TYPES", "StyleMessage, LazyMessage")
    monkeypatch.setenv("LOGJSON_PROCESS_NAME", "billing")

    settings = ResolvedConfig().get()

    assert settings.array_merge is ArrayMergeHandling.UNION
    assert settings.utc_timestamps is True
    assert settings.inner_exception_depth == 2
    assert settings.composite_message_types == ("StyleMessage", "LazyMessage")
    assert settings.process_name == "billing"


def test_yaml_takes_precedence_over_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LOGJSON_HOSTNAME", "from-env")
    write_config(tmp_path, "host:\n  name: from-yaml")
    assert ConfigBuilder(tmp_path).build()["hostname"] == "from-yaml"


def test_missing_directory_is_not_written(tmp_path: Path) -> None:
    missing = tmp_path / "absent"
    assert ResolvedConfig(missing).get().inner_exception_depth == 1
    assert not missing.exists()


def test_overrides_are_applied(tmp_path: Path) -> None:
    settings = ResolvedConfig(tmp_path, inner_exception_depth=0, unknown="x").get()
    assert settings.inner_exception_depth == 0
    assert not hasattr(settings, "unknown")


def test_invalid_values_raise() -> None:
    with pytest.raises(ValidationError):
        ResolvedConfig(array_merge="replace").get()
    with pytest.raises(ValidationError):
        ResolvedConfig(inner_exception_depth=-1).get()
    with pytest.raises(ValidationError):
        ResolvedConfig(log_level="LOUD").get()


def test_formatter_reads_config_directory(tmp_path: Path, make_record) -> None:
    write_config(tmp_path, "host:\n  name: yaml-host\n  process: yaml-proc")
    formatter = JsonFormatter(config_dir=tmp_path)
    doc = json.loads(formatter.format_one(make_record("x")))
    assert doc["hostName"] == "yaml-host"
    assert doc["process"] == "yaml-proc"


def test_formatter_keyword_overrides(make_record) -> None:
    formatter = JsonFormatter(hostname="override-host", utc_timestamps=True)
    doc = json.loads(formatter.format_one(make_record("x", created=0.0)))
    assert doc["hostName"] == "override-host"
    assert doc["timestamp"] == "1970-01-01T00:00:00.000+00:00"


def test_log_level_names_and_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOGJSON_LOG_LEVEL", "warning")
    assert ResolvedConfig().get().log_level == logging.WARNING

    monkeypatch.setenv("LOGJSON_LOG_LEVEL", "15")
    assert ResolvedConfig().get().log_level == 15


def test_unknown_log_level_in_yaml_is_a_validation_error(tmp_path: Path) -> None:
    write_config(tmp_path, "log:\n  level: chatty")
    with pytest.raises(ValidationError):
        ResolvedConfig(tmp_path).get()
