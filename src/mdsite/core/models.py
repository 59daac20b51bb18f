"""Data models for parsed documents, rendered blocks and assembled pages"""

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BlockKind(str, Enum):
    heading = "heading"
    paragraph = "paragraph"
    list = "list"
    code = "code"
    quote = "quote"
    table = "table"
    html = "html"
    rule = "rule"
    figure = "figure"
    other = "other"


class Cover(BaseModel):
    """Nested cover image settings."""
    model_config = ConfigDict(extra="allow")

    image:    Optional[str] = None
    alt:      Optional[str] = None
    caption:  Optional[str] = None
    relative: bool = False
    hidden:   bool = False


class PostMeta(BaseModel):
    """Typed view over the recognized front-matter keys; unknown keys are kept as extras."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title:       Optional[str] = None
    date:        Optional[Union[dt.datetime, dt.date]] = None
    tags:        list[str] = Field(default_factory=list)
    author:      Optional[Union[str, list[str]]] = None
    draft:       bool = False
    slug:        Optional[str] = None
    summary:     Optional[str] = None
    description: Optional[str] = None
    cover:       Optional[Cover] = None

    # display toggles
    show_toc:          bool = Field(default=False, alias="ShowToc")
    toc_open:          bool = Field(default=False, alias="TocOpen")
    show_reading_time: bool = Field(default=False, alias="ShowReadingTime")
    show_word_count:   bool = Field(default=False, alias="ShowWordCount")
    show_breadcrumbs:  bool = Field(default=False, alias="ShowBreadCrumbs")
    hide_meta:         bool = Field(default=False, alias="hidemeta")

    @field_validator("title", "slug", "summary", "description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        """Accept ISO-8601 strings; a bare YYYY-MM-DD stays a date."""
        if not isinstance(v, str):
            return v
        v = v.strip()
        if len(v) == 10:
            return dt.date.fromisoformat(v)
        return dt.datetime.fromisoformat(v.replace("Z", "+00:00"))

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if isinstance(v, (list, tuple)):
            return [str(t) for t in v if t is not None]
        return v

    @property
    def authors(self) -> list[str]:
        if self.author is None:
            return []
        return [self.author] if isinstance(self.author, str) else list(self.author)


@dataclass(frozen=True)
class Document:
    """One content file after front-matter parsing; metadata is a read-only view."""
    path:     Path
    slug:     str
    body:     str                  # markdown without front-matter
    metadata: Mapping[str, Any]    # raw front-matter, insertion order preserved
    meta:     PostMeta

    def __post_init__(self):
        if not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def draft(self) -> bool:
        return self.meta.draft

    @property
    def title(self) -> Optional[str]:
        return self.meta.title


class RenderedBlock(BaseModel):
    """A single top-level block of rendered HTML."""
    model_config = ConfigDict(frozen=True)

    kind:   BlockKind
    html:   str
    text:   str = ""                # plain text for headings and paragraphs
    level:  Optional[int] = None    # heading level (1-6); None for non-headings
    anchor: Optional[str] = None    # heading id attribute


class TocEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    level:  int
    anchor: str
    text:   str


class RenderedPage(BaseModel):
    """Rendered body plus resolved metadata, ready for the assembler."""
    model_config = ConfigDict(frozen=True)

    slug:         str
    html:         str
    metadata:     dict[str, Any] = Field(default_factory=dict)
    meta:         PostMeta = Field(default_factory=PostMeta)
    toc:          list[TocEntry] = Field(default_factory=list)
    word_count:   int = 0
    reading_time: int = 0
    summary:      str = ""

    def context(self) -> dict[str, Any]:
        """Template context: raw metadata overlaid with derived page values."""
        return {
            **self.metadata,
            "slug": self.slug,
            "meta": self.meta,
            "toc": self.toc,
            "word_count": self.word_count,
            "reading_time": self.reading_time,
            "summary": self.summary,
        }
