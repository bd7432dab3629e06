# backend/roombook/services/template_service.py
"""
Template rendering service for the Roombook platform.

Renders the Jinja2 email templates under roombook/templates with a shared
set of context variables and date/time filters.
"""

from datetime import datetime, tzinfo
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import BRAND_NAME
from .base import BaseService

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class TemplateService(BaseService):
    """Centralized template rendering service using Jinja2."""

    def __init__(self, db: Session, tz: Optional[tzinfo] = None):
        super().__init__(db)
        self.tz = tz or settings.booking_tz
        self.env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self._register_custom_filters()

    def _register_custom_filters(self) -> None:
        def format_date(value: datetime, format_str: str = "%A %d %B %Y") -> str:
            if isinstance(value, str):
                return value  # Already formatted
            return value.astimezone(self.tz).strftime(format_str)

        def format_time(value: datetime, format_str: str = "%H:%M") -> str:
            if isinstance(value, str):
                return value
            return value.astimezone(self.tz).strftime(format_str)

        self.env.filters["format_date"] = format_date
        self.env.filters["format_time"] = format_time

    def get_common_context(self) -> Dict[str, Any]:
        return {
            "brand_name": BRAND_NAME,
            "current_year": datetime.now().year,
            "frontend_url": settings.frontend_url,
            "support_email": settings.admin_email,
        }

    @BaseService.measure_operation("render_template")
    def render_template(self, template_name: str, context: Optional[Dict[str, Any]] = None, **kwargs: Any) -> str:
        """
        Render a template with the given context.

        Raises:
            TemplateNotFound: If template doesn't exist
        """
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            self.logger.error(f"Template not found: {template_name}")
            raise

        full_context = self.get_common_context()
        if context:
            full_context.update(context)
        full_context.update(kwargs)
        return template.render(full_context)
