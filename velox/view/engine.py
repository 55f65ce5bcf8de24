"""
Template Engine - Jinja2 environment for views and layouts.

Templates are looked up in this order:

1. in-memory templates passed as a dict (tests, embedded apps)
2. the configured template directories
3. the templates shipped in the ``velox`` package (default layout and
   error pages)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    TemplateNotFound,
    select_autoescape,
)

from velox.faults import MissingTemplateError

logger = logging.getLogger("velox.view.engine")


class TemplateEngine:
    """
    Thin wrapper over a Jinja2 ``Environment`` used by views and layouts.

    ``templates`` maps names to sources and shadows files of the same
    name found in ``template_dirs``. Autoescaping applies to .html, .htm
    and .xml files and to string templates; ``globals`` and ``filters``
    are installed on the environment as given.

    Example:
        engine = TemplateEngine(["app/templates"])
        html = engine.render("index/index.html", {"title": "Home"})
    """

    def __init__(
        self,
        template_dirs: Optional[List[str]] = None,
        templates: Optional[Mapping[str, str]] = None,
        *,
        autoescape: bool = True,
        globals: Optional[Dict[str, Any]] = None,
        filters: Optional[Dict[str, Callable]] = None,
    ):
        loaders = []
        if templates:
            loaders.append(DictLoader(dict(templates)))
        for path in template_dirs or []:
            loaders.append(FileSystemLoader(str(path)))
        loaders.append(PackageLoader("velox", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(
                enabled_extensions=["html", "htm", "xml"],
                default_for_string=True,
            ) if autoescape else False,
        )

        if filters:
            self.env.filters.update(filters)
        if globals:
            self.env.globals.update(globals)

    def exists(self, name: str) -> bool:
        try:
            self.env.get_template(name)
        except TemplateNotFound:
            return False
        return True

    def render(self, name: str, context: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render a template by name.

        Raises:
            MissingTemplateError: the template cannot be found
        """
        try:
            template = self.env.get_template(name)
        except TemplateNotFound as exc:
            raise MissingTemplateError(name) from exc

        return template.render(dict(context or {}))

    def render_string(self, source: str, context: Optional[Mapping[str, Any]] = None) -> str:
        return self.env.from_string(source).render(dict(context or {}))
