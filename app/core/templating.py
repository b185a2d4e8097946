"""
HTML rendering for the inline "signed in" page.

Used by the OAuth callback when no callback URL was stored: the token is
shown in the browser instead of being handed to a frontend.
"""

import logging
from pathlib import Path

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)


logger = logging.getLogger("family_calendar.core.templating")

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
AUTH_SUCCESS_TEMPLATE = "auth_success.html"


class TemplateRenderError(Exception):
    """The page could not be produced; the message is safe to show."""
    pass


def build_environment(templates_dir: Path = TEMPLATES_DIR) -> Environment:
    """Jinja2 environment with HTML autoescaping and strict variables."""
    return Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
    )


_environment = build_environment()


def render_auth_success(
    token: str,
    given_name: str,
    family_name: str,
    email: str,
    environment: Environment | None = None,
) -> str:
    """
    Render the inline success page.

    Raises:
        TemplateRenderError: "Failed to load template" when the file is missing
            or does not parse, "Failed to render template" when substitution fails
    """
    env = environment or _environment

    try:
        template = env.get_template(AUTH_SUCCESS_TEMPLATE)
    except TemplateNotFound as e:
        logger.error(f"Template not found: {e}")
        raise TemplateRenderError("Failed to load template") from e
    except TemplateError as e:
        logger.error(f"Failed to load template {AUTH_SUCCESS_TEMPLATE}: {e}")
        raise TemplateRenderError("Failed to load template") from e

    try:
        return template.render(
            token=token,
            given_name=given_name,
            family_name=family_name,
            email=email,
        )
    except TemplateError as e:
        logger.error(f"Failed to render template {AUTH_SUCCESS_TEMPLATE}: {e}")
        raise TemplateRenderError("Failed to render template") from e
