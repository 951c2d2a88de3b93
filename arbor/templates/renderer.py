"""
Renderer - Jinja2 binding for ``Response.render``.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..faults import ConfigFault

logger = logging.getLogger("arbor.templates")


class Renderer:
    """
    Renders page templates from a views directory.

    Template names without an extension resolve to ``<name>.html``, so the
    page decorator's ``"base"`` becomes ``base.html``.

    Args:
        views_dir: Directory containing the templates
        extension: Extension appended to bare template names
        globals: Values available to every template

    Example:
        Renderer("pages").setup(transport)
    """

    def __init__(
        self,
        views_dir: Union[str, Path] = "pages",
        *,
        extension: str = ".html",
        globals: Optional[Mapping[str, Any]] = None,
    ):
        views_dir = Path(views_dir)
        if not views_dir.is_dir():
            raise ConfigFault("views_path", f"'{views_dir}' is not a directory")

        self.views_dir = views_dir.resolve()
        self.extension = extension
        self.env = Environment(
            loader=FileSystemLoader(str(self.views_dir)),
            autoescape=select_autoescape(
                enabled_extensions=["html", "htm", "xml"],
                default_for_string=True,
            ),
        )
        if globals:
            self.env.globals.update(globals)

    def resolve(self, template_name: str) -> str:
        if Path(template_name).suffix:
            return template_name
        return f"{template_name}{self.extension}"

    def render(self, template_name: str, params: Mapping[str, Any]) -> str:
        template = self.env.get_template(self.resolve(template_name))
        return template.render(**params)

    def setup(self, transport: Any) -> None:
        """Bind this renderer to a transport's responses."""
        transport.set_renderer(self)
        logger.debug("Rendering templates from %s", self.views_dir)
