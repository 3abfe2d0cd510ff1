from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from app.core.errors import UnsupportedLanguageError


class TargetLanguage(str, Enum):
    """Languages the extracted Hindi text can be translated into"""
    ENGLISH = "en"
    BENGALI = "bn"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_code(cls, code) -> "TargetLanguage":
        """Resolve a language code, raising UnsupportedLanguageError for unknown ones"""
        if isinstance(code, cls):
            return code
        try:
            return cls(str(code).strip().lower())
        except ValueError:
            raise UnsupportedLanguageError(str(code)) from None


_DISPLAY_NAMES = {
    TargetLanguage.ENGLISH: "English",
    TargetLanguage.BENGALI: "Bengali",
}


class PipelineStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SourceImage:
    """Raw image bytes with the MIME type declared by whoever supplied them"""
    data: bytes = field(repr=False)
    mime_type: str
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)
