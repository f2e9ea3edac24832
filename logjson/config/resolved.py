from pathlib import Path

from logjson.config.builder import ConfigBuilder
from logjson.config.data_model import FormatterSettings
from logjson.utils.files import read_from_json


class ResolvedConfig:
    allowed_overrides = {
        "array_merge",
        "ignore_null_on_merge",
        "inner_exception_depth",
        "utc_timestamps",
        "hostname",
        "process_name",
        "composite_message_types",
        "log_level",
    }

    def __init__(self, config_dir: Path | str | None = None, **overrides):
        self.config_dir = Path(config_dir) if config_dir is not None else None
        self.overrides = overrides
        self.path = (
            self.config_dir / ".config.resolved.json"
            if self.config_dir is not None
            else None
        )

    def _load_or_build(self):
        if self.path is not None and self.path.exists():
            return read_from_json(self.path)

        builder = ConfigBuilder(self.config_dir)
        return builder.build()

    def _apply_overrides(self, cfg: dict):
        for k, v in self.overrides.items():
            if k in self.allowed_overrides and v is not None:
                cfg[k] = v
        return cfg

    def get(self) -> FormatterSettings:
        cfg = self._load_or_build()
        return FormatterSettings(**self._apply_overrides(cfg))
