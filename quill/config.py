"""
Configuration for the Quill front end.
"""

from dataclasses import dataclass
from enum import Enum


class ScopeMode(Enum):
    """How declared names are scoped while parsing"""
    FLAT = "flat"           # One program-wide namespace, no shadowing
    LEXICAL = "lexical"     # Nested frames for bodies, loops and comprehensions


@dataclass
class ParserConfiguration:
    """Configuration parameters for a parse"""

    scope_mode: ScopeMode = ScopeMode.FLAT
    filename: str = "<string>"

    def __post_init__(self):
        if isinstance(self.scope_mode, str):
            self.scope_mode = ScopeMode(self.scope_mode)
