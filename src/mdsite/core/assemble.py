"""Page assembly: merge rendered HTML with metadata through a template"""

import copy
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Protocol

import jinja2
from markupsafe import Markup

from mdsite.core.models import RenderedPage
from mdsite.errors import TemplateError


BUILTIN_TEMPLATES = Path(__file__).resolve().parent.parent / "templates"
PAGE_TEMPLATE = "page.html.jinja2"
LIST_TEMPLATE = "list.html.jinja2"
SITE_DEFAULTS = {"title": "", "base_url": "/"}


class Template(Protocol):
    """Anything that turns a rendered body plus metadata into final output."""

    def render(self, body: str, metadata: Mapping[str, Any]) -> str:
        ...


def _format_date(value: Any, fmt: str = "%Y-%m-%d") -> str:
    """Jinja filter: format date/datetime values, pass anything else through as text."""
    if value is None:
        return ""
    if hasattr(value, "strftime"):
        return value.strftime(fmt)
    return str(value)


def _isoformat(value: Any) -> str:
    return value.isoformat() if hasattr(value, "isoformat") else str(value or "")


class JinjaTemplate:
    """Jinja2-backed page template.

    Looks up templates in template_dir first and falls back to the built-in
    templates, so a site can override only the page or only the listing.
    The body is passed as ``content`` (already HTML, not escaped again) and
    the metadata as ``page``.
    """

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        name: str = PAGE_TEMPLATE,
        site: Optional[Mapping[str, Any]] = None,
        ) -> None:
        search = [str(template_dir)] if template_dir else []
        search.append(str(BUILTIN_TEMPLATES))
        self.name = name
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(search),
            autoescape=True,
            undefined=jinja2.StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["format_date"] = _format_date
        self.env.filters["isoformat"] = _isoformat
        self.env.globals["site"] = {**SITE_DEFAULTS, **(site or {})}

    def with_name(self, name: str) -> "JinjaTemplate":
        """Same environment, different template file (e.g. the listing page)."""
        other = copy.copy(self)
        other.name = name
        return other

    def render(self, body: str, metadata: Mapping[str, Any]) -> str:
        try:
            template = self.env.get_template(self.name)
            return template.render(content=Markup(body), page=dict(metadata))
        except jinja2.TemplateNotFound as e:
            raise TemplateError(f"Template not found: {e.name}") from e
        except jinja2.TemplateError as e:
            raise TemplateError(f"Template {self.name!r} failed: {e}") from e


def missing_keys(metadata: Mapping[str, Any], required: Iterable[str]) -> list[str]:
    """Return required keys that are absent, None, or blank strings."""
    missing = []
    for key in required:
        value = metadata.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(key)
    return missing


def assemble_page(page: RenderedPage, template: Template, required: Iterable[str] = ("title",)) -> str:
    """Render the final page; raises TemplateError when required metadata is missing."""
    missing = missing_keys(page.metadata, required)
    if missing:
        raise TemplateError(f"Missing required metadata: {', '.join(missing)}")
    return template.render(page.html, page.context())
