"""
Configuration values for SpaceForge.

A CleanConfig is built once per invocation and handed to every stage of the
stream cleaner; nothing in here is mutated after construction.
"""

import enum
import os
from dataclasses import dataclass

# DOS end-of-file marker (ctrl-Z)
TERMINATOR: int = 0x1A

DEFAULT_TAB_SIZE: int = 8
DEFAULT_TAB_MIN: int = 2


class WhitespaceMode(enum.Enum):
    """How whitespace gaps are filled in the output."""

    SPACES = "spaces"
    # Tabs wherever a tab stop can be reached, spaces for the remainder
    TABS = "tabs"


class EolMode(enum.Enum):
    """End-of-line sequence written to the output."""

    LF = b"\n"
    CR = b"\r"
    CRLF = b"\r\n"

    @property
    def sequence(self) -> bytes:
        return self.value

    @property
    def label(self) -> str:
        return {"LF": "LF", "CR": "CR", "CRLF": "CR+LF"}[self.name]


DEFAULT_WHITESPACE_MODE: WhitespaceMode = WhitespaceMode.SPACES
DEFAULT_EOL_MODE: EolMode = EolMode.CRLF if os.name == "nt" else EolMode.LF


class ConfigError(ValueError):
    """Raised when a configuration value is out of range."""


@dataclass(frozen=True)
class CleanConfig:
    tab_size: int = DEFAULT_TAB_SIZE
    # Minimum whitespace gap that may be filled with tabs
    tab_min: int = DEFAULT_TAB_MIN
    whitespace_mode: WhitespaceMode = DEFAULT_WHITESPACE_MODE
    eol_mode: EolMode = DEFAULT_EOL_MODE

    # Terminator-marker policies; independent of each other
    remove_terminator: bool = False
    stop_at_terminator: bool = False
    append_terminator: bool = False


def validate_config(config: CleanConfig) -> CleanConfig:
    """
    Check the numeric fields of a configuration.
    The stream cleaner assumes a validated configuration and never checks again.
    """
    if config.tab_size < 1:
        raise ConfigError(f"Tab size must be a positive integer: {config.tab_size}")
    if config.tab_min < 1:
        raise ConfigError(
            f"Minimum whitespace gap must be a positive integer: {config.tab_min}"
        )
    return config
