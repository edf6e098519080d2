import logging
import os

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when the process environment cannot run the app."""


def missing_env(rules: Rules) -> list[str]:
    return [name for name in rules.ops.required_env if not os.environ.get(name)]


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.

    Raises ConfigurationError when a required environment variable is unset.
    """
    missing = missing_env(rules)
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    for name in ("ADMIN_AUTH_TOKEN", "FOLIO_SECRET_KEY"):
        if not os.environ.get(name):
            logger.warning("%s is not set; related logins will be refused or insecure", name)

    logger.info("Configuration validated (rules %s)", rules.project.rules_version)
