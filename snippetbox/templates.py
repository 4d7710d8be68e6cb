"""
Snippetbox - Template Cache
===========================

What:  Compiles every page template once at startup and renders them by name.
How:   Jinja2 (through FastAPI's Jinja2Templates) with autoescaping. Every file
       in ui/html/pages extends ui/html/base.html, which includes the shared
       fragments in ui/html/components. `new_template_cache()` compiles each
       page up front, so a template syntax error stops the process at boot
       instead of failing a request later.
Who:   Built by `create_app()`; used by `render()` in routes/helpers.py.

The cache is read-only once built and needs no locking.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi.templating import Jinja2Templates
from jinja2 import Template

from snippetbox.exceptions import TemplateNotFoundError
from snippetbox.timeutil import as_utc

UI_DIR = Path(__file__).parent / "ui"
HTML_DIR = UI_DIR / "html"
STATIC_DIR = UI_DIR / "static"


def human_date(value: Optional[datetime]) -> str:
    """Format a timestamp as e.g. '17 Mar 2022 at 10:15' (UTC)."""
    if value is None:
        return ""
    return as_utc(value).strftime("%d %b %Y at %H:%M")


@dataclass
class TemplateData:
    """Everything a page template may read."""

    current_year: int
    flash: str = ""
    is_authenticated: bool = False
    csrf_token: str = ""
    form: Any = None
    snippet: Any = None
    snippets: List[Any] = field(default_factory=list)
    user: Any = None

    def as_context(self) -> Dict[str, Any]:
        return {
            "current_year": self.current_year,
            "flash": self.flash,
            "is_authenticated": self.is_authenticated,
            "csrf_token": self.csrf_token,
            "form": self.form,
            "snippet": self.snippet,
            "snippets": self.snippets,
            "user": self.user,
        }


class TemplateCache:
    """Page name (e.g. 'home.html') → compiled template."""

    def __init__(self, pages: Dict[str, Template]):
        self._pages = dict(pages)

    def __contains__(self, page: str) -> bool:
        return page in self._pages

    def pages(self) -> List[str]:
        return sorted(self._pages)

    def render(self, page: str, data: TemplateData) -> str:
        """
        Render a page to a string.

        Rendering completes before any response is started, so a failing
        template never produces a half-written page.

        Raises:
            TemplateNotFoundError: `page` is not in the cache.
        """
        template = self._pages.get(page)
        if template is None:
            raise TemplateNotFoundError(page)
        return template.render(data.as_context())


def new_template_cache(directory: Path = HTML_DIR) -> TemplateCache:
    """Compile every page under `directory`/pages into a TemplateCache."""
    templates = Jinja2Templates(directory=str(directory))
    templates.env.filters["human_date"] = human_date

    pages: Dict[str, Template] = {}
    for path in sorted((directory / "pages").glob("*.html")):
        pages[path.name] = templates.get_template(f"pages/{path.name}")
    return TemplateCache(pages)
