"""Template rendering for alert notifications using Jinja2.

Titles and messages are plain text rendered from templates shipped in the
``talentmatch.notifications`` package, with strict undefined checking so a
missing variable fails loudly instead of producing a blank message.
"""

import logging
from typing import Dict, Tuple

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Renders notification titles and messages.

    Templates are cached by the Jinja2 environment for reuse across
    dispatcher runs.
    """

    def __init__(
        self,
        template_dir: str = "templates",
        instant_title_template: str = "instant_title.j2",
        instant_message_template: str = "instant_message.j2",
        digest_title_template: str = "digest_title.j2",
        digest_message_template: str = "digest_message.j2",
    ):
        self.instant_title_template = instant_title_template
        self.instant_message_template = instant_message_template
        self.digest_title_template = digest_title_template
        self.digest_message_template = digest_message_template

        self.env = Environment(
            loader=PackageLoader("talentmatch.notifications", template_dir),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )

        logger.debug(f"Initialized TemplateRenderer with templates from {template_dir}")

    def render_instant(self, context: Dict) -> Tuple[str, str]:
        """Render the title and message of an instant offer notification.

        Args:
            context: Must provide ``offer_title``, ``company_name`` and ``alert_name``

        Returns:
            (title, message)

        Raises:
            NotificationTemplateError: If template rendering fails
        """
        return self._render(self.instant_title_template, self.instant_message_template, context)

    def render_digest(self, context: Dict) -> Tuple[str, str]:
        """Render the title and message of a periodic summary.

        Args:
            context: Must provide ``frequency``, ``offer_count`` and ``alert_name``

        Raises:
            NotificationTemplateError: If template rendering fails
        """
        return self._render(self.digest_title_template, self.digest_message_template, context)

    def _render(self, title_name: str, message_name: str, context: Dict) -> Tuple[str, str]:
        try:
            title = self.env.get_template(title_name).render(context)
            message = self.env.get_template(message_name).render(context)
        except TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e

        # Single line each
        return " ".join(title.split()), " ".join(message.split())
