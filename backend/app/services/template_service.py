# backend/app/services/template_service.py
"""
Template rendering service for the HubContent platform.

Provides centralized template rendering using Jinja2. Notification bodies
are plain text (posted into chat and used as the email body), so ``.txt``
templates are rendered without HTML autoescaping.
"""

from datetime import date, datetime, time
from decimal import Decimal
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from ..core.constants import BRAND_NAME

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class TemplateService:
    """Centralized template rendering service using Jinja2."""

    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = template_dir or TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )
        self._register_custom_filters()
        self.logger = logging.getLogger(self.__class__.__name__)

    def _register_custom_filters(self) -> None:
        """Register any custom Jinja2 filters."""

        def currency(value: Union[Decimal, float, int]) -> str:
            """Format a number as currency."""
            return f"${Decimal(str(value)):,.2f}"

        def format_date(value: Union[date, str], format_str: str = "%B %d, %Y") -> str:
            if isinstance(value, str):
                return value  # Already formatted
            return value.strftime(format_str)

        def format_time(value: Union[time, datetime, str], format_str: str = "%H:%M") -> str:
            if isinstance(value, str):
                return value
            return value.strftime(format_str)

        self.env.filters["currency"] = currency
        self.env.filters["format_date"] = format_date
        self.env.filters["format_time"] = format_time

    def get_common_context(self) -> Dict[str, Any]:
        """
        Get common context variables used across all templates.

        Returns:
            Dictionary of common template variables
        """
        return {"brand_name": BRAND_NAME}

    def render_template(
        self, template_name: str, context: Optional[Dict[str, Any]] = None, **kwargs: Any
    ) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Path relative to the templates directory
            context: Template variables
            **kwargs: Extra template variables (override ``context``)

        Returns:
            Rendered text, stripped of surrounding whitespace

        Raises:
            jinja2.TemplateNotFound: If the template does not exist
        """
        full_context = self.get_common_context()
        full_context.update(context or {})
        full_context.update(kwargs)
        template = self.env.get_template(template_name)
        return template.render(**full_context).strip()
