"""
Debug setting resolution.

The debug option comes in three shapes (absent, bare flag, integer). It is
resolved once at startup into a DebugSetting so nothing downstream has to
inspect the raw value again.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from core.constants import VOSK_LOG_LEVEL_SILENT
from core.errors import StartupConfigError
from core.messages import ErrorMessages


class DebugMode(str, Enum):
    DISABLED = "Disabled"
    ENABLED_DEFAULT_VERBOSITY = "EnabledDefaultVerbosity"
    ENABLED_AT_LEVEL = "EnabledAtLevel"


@dataclass(frozen=True)
class DebugSetting:
    mode: DebugMode
    level: Optional[int] = None

    @property
    def enabled(self) -> bool:
        """True when internal debug logs are on."""
        return self.mode is not DebugMode.DISABLED

    @property
    def engine_log_level(self) -> int:
        """Vosk log level to apply at startup."""
        if self.mode is DebugMode.ENABLED_AT_LEVEL:
            return self.level
        return VOSK_LOG_LEVEL_SILENT

    @property
    def logger_level(self) -> str:
        return "DEBUG" if self.enabled else "INFO"

    @classmethod
    def disabled(cls) -> "DebugSetting":
        return cls(DebugMode.DISABLED)

    @classmethod
    def default_verbosity(cls) -> "DebugSetting":
        return cls(DebugMode.ENABLED_DEFAULT_VERBOSITY)

    @classmethod
    def at_level(cls, level: int) -> "DebugSetting":
        return cls(DebugMode.ENABLED_AT_LEVEL, level)


def resolve_debug_setting(raw: Union[None, bool, str]) -> DebugSetting:
    """
    Resolve the raw debug option into a DebugSetting.

    Args:
        raw: None or "" (unset), True or "true" (flag without value),
            or an integer string such as "2" or "-1"

    Returns:
        DebugSetting

    Raises:
        StartupConfigError: If the value is neither a flag nor an integer
    """
    if raw is None or raw is False:
        return DebugSetting.disabled()
    if raw is True:
        return DebugSetting.default_verbosity()

    value = raw.strip()
    if value == "" or value.lower() in ("false", "no", "off"):
        return DebugSetting.disabled()
    if value.lower() in ("true", "yes", "on"):
        return DebugSetting.default_verbosity()

    try:
        return DebugSetting.at_level(int(value))
    except ValueError:
        raise StartupConfigError(ErrorMessages.DEBUG_INVALID.format(value=raw))
