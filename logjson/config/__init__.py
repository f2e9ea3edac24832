from logjson.config.data_model import ArrayMergeHandling, FormatterSettings
from logjson.config.resolved import ResolvedConfig

__all__ = ["ArrayMergeHandling", "FormatterSettings", "ResolvedConfig"]
