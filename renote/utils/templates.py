"""Contains utilities for rendering Jinja2 templates."""

import jinja2
import structlog

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def mention(handle: str) -> str:
    """Render a GitHub handle as an @-mention."""
    return f"@{handle}"


def construct_jinja2_environment() -> jinja2.Environment:
    """Construct a Jinja2 environment for rendering markdown documents."""
    jinja_env = jinja2.Environment(undefined=jinja2.StrictUndefined, keep_trailing_newline=True, autoescape=False)
    jinja_env.filters["mention"] = mention
    return jinja_env


_environment = construct_jinja2_environment()


def construct_jinja2_template_from_string(template_string: str, environment: jinja2.Environment | None = None) -> jinja2.Template:
    """Construct a Jinja2 template from a string."""
    if environment is None:
        environment = _environment
    return environment.from_string(template_string)


def render_template(template: jinja2.Template, **context: object) -> str:
    """Render a Jinja2 template with the given context."""
    try:
        return template.render(**context)
    except jinja2.UndefinedError as exc:
        logger.error("Failed to render template", context_keys=sorted(context), error=str(exc))
        raise
