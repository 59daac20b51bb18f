"""Pipeline step functions: load, filter, render, assemble, and site build orchestration"""

import datetime as dt
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from mdsite.config import Settings
from mdsite.core.assemble import LIST_TEMPLATE, JinjaTemplate, Template, assemble_page
from mdsite.core.frontmatter import parse_frontmatter
from mdsite.core.models import Document, PostMeta, RenderedPage
from mdsite.core.render import (
    DEFAULT_PRESET,
    reading_time,
    render_blocks,
    summarize,
    table_of_contents,
    word_count,
)
from mdsite.core.utils.slug import slugify
from mdsite.errors import MalformedFrontMatter, MdsiteError


logger = logging.getLogger(__name__)

MD_EXTENSIONS = {'.md', '.markdown'}
BUNDLE_INDEX = 'index'


@dataclass
class BuildReport:
    built:    list[tuple[Path, Path]] = field(default_factory=list)   # (source, page)
    drafts:   list[Path] = field(default_factory=list)
    failures: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def discover_files(path: Path) -> list[Path]:
    """Return sorted markdown files under path, or [path] if a single file.

    Files whose name starts with an underscore (section _index.md pages) are skipped.
    """
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(
        p for p in path.rglob('*')
        if p.is_file() and p.suffix in MD_EXTENSIONS and not p.name.startswith('_')
    )


def document_slug(path: Path, metadata: dict[str, Any]) -> str:
    """Slug from front-matter, else file stem; page bundles (dir/index.md) use the directory name."""
    if metadata.get('slug'):
        return slugify(str(metadata['slug'])) or 'page'
    stem = path.parent.name if path.stem == BUNDLE_INDEX and path.parent.name else path.stem
    return slugify(stem) or 'page'


def parse_document(text: str, path: Path) -> Document:
    """Parse raw file text into a Document; errors are tagged with the source path."""
    try:
        metadata, body = parse_frontmatter(text)
    except MalformedFrontMatter as e:
        raise e.with_source(path) from e
    try:
        meta = PostMeta.model_validate(metadata)
    except ValidationError as e:
        first = e.errors()[0]
        loc = '.'.join(str(p) for p in first['loc'])
        raise MalformedFrontMatter(f"Invalid front-matter value for '{loc}': {first['msg']}", path) from e
    return Document(path=path, slug=document_slug(path, metadata), body=body, metadata=metadata, meta=meta)


def load_document(path: Path) -> Document:
    """Read a single content file and parse it; unreadable files raise MdsiteError."""
    try:
        text = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise MdsiteError(f"Not valid UTF-8: {e.reason} at byte {e.start}", path) from e
    except OSError as e:
        raise MdsiteError(f"Cannot read file: {e.strerror or e}", path) from e
    return parse_document(text, path)


def is_published(doc: Document, include_drafts: bool = False) -> bool:
    return include_drafts or not doc.draft


def render_document(doc: Document, preset: str = DEFAULT_PRESET) -> RenderedPage:
    """Render a document body and attach derived page data."""
    blocks = list(render_blocks(doc.body, preset))
    words = word_count(doc.body, preset)
    return RenderedPage(
        slug=doc.slug,
        html=''.join(b.html for b in blocks),
        metadata=dict(doc.metadata),
        meta=doc.meta,
        toc=table_of_contents(blocks),
        word_count=words,
        reading_time=reading_time(words),
        summary=summarize(doc.meta, blocks),
    )


def _sort_instant(value: Any) -> dt.datetime:
    """Comparable aware datetime for a date or datetime; naive values are taken as UTC, missing sorts last."""
    if value is None:
        return dt.datetime.min.replace(tzinfo=dt.timezone.utc)
    if not isinstance(value, dt.datetime):
        value = dt.datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value


def _listing_entry(page: RenderedPage, base_url: str) -> dict[str, Any]:
    date = page.meta.date
    return {
        "title": page.meta.title,
        "date": date.isoformat() if date is not None else None,
        "tags": page.meta.tags,
        "slug": page.slug,
        "url": f"{base_url.rstrip('/')}/{page.slug}/",
        "summary": page.summary,
        "reading_time": page.reading_time,
    }


def write_listing(
    pages: list[RenderedPage],
    output_dir: Path,
    template: JinjaTemplate,
    base_url: str = "/",
    ) -> tuple[Path, Path]:
    """Write index.json and index.html for published pages, newest first.

    Returns (html_path, json_path).
    """
    ordered = sorted(pages, key=lambda p: _sort_instant(p.meta.date), reverse=True)
    entries = [_listing_entry(p, base_url) for p in ordered]

    tags: dict[str, list[str]] = {}
    for e in entries:
        for t in e["tags"]:
            tags.setdefault(t, []).append(e["slug"])

    json_path = output_dir / "index.json"
    html_path = output_dir / "index.html"
    json_path.write_text(
        json.dumps({"pages": entries, "tags": tags}, indent=2, ensure_ascii=False),
        encoding='utf-8',
    )
    html_path.write_text(template.with_name(LIST_TEMPLATE).render("", {"entries": entries}), encoding='utf-8')
    return html_path, json_path


def build_site(
    source: Path,
    output_dir: Path,
    settings: Settings,
    template: Optional[Template] = None,
    ) -> BuildReport:
    """Build every publishable document under source into output_dir.

    Each document is independent: a MalformedFrontMatter or TemplateError is
    logged and recorded in the report, and the remaining documents still build.
    """
    site = {"title": settings.site_title, "base_url": settings.base_url}
    default_template = JinjaTemplate(
        Path(settings.template_dir) if settings.template_dir else None, site=site,
    )
    template = template or default_template
    output_dir.mkdir(parents=True, exist_ok=True)

    report = BuildReport()
    pages: list[RenderedPage] = []
    seen: dict[str, Path] = {}

    for path in discover_files(source):
        try:
            doc = load_document(path)
            if not is_published(doc, settings.include_drafts):
                logger.info("Skipping draft %s", path)
                report.drafts.append(path)
                continue
            if doc.slug in seen:
                raise MdsiteError(f"Duplicate slug '{doc.slug}' (already used by {seen[doc.slug]})", path)

            page = render_document(doc, settings.parser_config)
            try:
                html = assemble_page(page, template, settings.required_keys)
            except MdsiteError as e:
                raise e.with_source(path) from e
        except MdsiteError as e:
            logger.error("%s", e)
            report.failures.append((path, str(e)))
            continue

        dest = output_dir / doc.slug / "index.html"
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(html, encoding='utf-8')
        seen[doc.slug] = path
        pages.append(page)
        report.built.append((path, dest))
        logger.debug("Built %s -> %s", path, dest)

    write_listing(pages, output_dir, default_template, settings.base_url)
    return report
