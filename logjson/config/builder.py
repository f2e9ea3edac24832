import os
from pathlib import Path

from dotenv import load_dotenv

from logjson.utils.files import load_from_yaml, write_to_json

load_dotenv()


class ConfigBuilder:
    def __init__(self, config_dir: Path | None):
        self.config_dir = config_dir
        self.config_yaml = {}

        self.mapping = {
            "array_merge": {
                "config": "merge.array_handling",
                "env": "LOGJSON_ARRAY_MERGE",
                "default": "concat",
            },
            "ignore_null_on_merge": {
                "config": "merge.ignore_null",
                "env": "LOGJSON_IGNORE_NULL",
                "default": True,
            },
            "inner_exception_depth": {
                "config": "exception.inner_depth",
                "env": "LOGJSON_INNER_DEPTH",
                "default": 1,
            },
            "utc_timestamps": {
                "config": "timestamp.utc",
                "env": "LOGJSON_UTC",
                "default": False,
            },
            "hostname": {
                "config": "host.name",
                "env": "LOGJSON_HOSTNAME",
                "default": None,
            },
            "process_name": {
                "config": "host.process",
                "env": "LOGJSON_PROCESS_NAME",
                "default": None,
            },
            "composite_message_types": {
                "config": "message.composite_types",
                "env": "LOGJSON_COMPOSITE_TYPES",
                "default": ["BraceMessage", "DollarMessage"],
            },
            "log_level": {
                "config": "log.level",
                "env": "LOGJSON_LOG_LEVEL",
                "default": "INFO",
            },
        }

        self._load_yaml()

    def _load_yaml(self):
        if self.config_dir is None:
            return
        for name in ("config.yml", "config.yaml"):
            p = Path(self.config_dir) / name
            if p.exists():
                self.config_yaml = load_from_yaml(p) or {}
                return
        self.config_yaml = {}

    def _from_yaml(self, path: str):
        cur = self.config_yaml
        for part in path.split("."):
            if not isinstance(cur, dict) or part not in cur:
                return None
            cur = cur[part]
        return cur

    def _resolve(self, entry: dict):
        if entry.get("config"):
            val = self._from_yaml(entry["config"])
            if val is not None:
                return val

        if entry.get("env"):
            val = os.getenv(entry["env"])
            if val is not None:
                return val

        return entry.get("default")

    def build(self):
        resolved = {k: self._resolve(entry) for k, entry in self.mapping.items()}
        if self.config_dir is not None and Path(self.config_dir).is_dir():
            out_path = Path(self.config_dir) / ".config.resolved.json"
            write_to_json(out_path, resolved)

        return resolved
