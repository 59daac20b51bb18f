"""Per-document error types raised by the parse, validate and assemble steps"""

from pathlib import Path
from typing import Optional, Union


class MdsiteError(ValueError):
    """Base error for a single document; carries the source path when known."""

    def __init__(self, message: str, source: Optional[Union[str, Path]] = None):
        self.message = message
        self.source = str(source) if source is not None else None
        super().__init__(f"{self.source}: {message}" if self.source else message)

    def with_source(self, source: Union[str, Path]) -> "MdsiteError":
        """Return a copy of this error tagged with a source path."""
        return type(self)(self.message, source)


class MalformedFrontMatter(MdsiteError):
    """Front-matter block is unterminated, not valid YAML, or not a key/value mapping."""


class TemplateError(MdsiteError):
    """Required metadata is missing or the template failed to render."""
