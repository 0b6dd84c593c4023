import os

from django.conf import settings
from django.core.checks import Error, register, Tags


@register(Tags.security, deploy=True)
def check_required_env(app_configs, **kwargs):
    """Every variable in REQUIRED_ENV_VARS must be set before deploying."""
    errors = []
    for key in getattr(settings, "REQUIRED_ENV_VARS", []):
        if not os.environ.get(key):
            errors.append(
                Error(
                    f"Missing environment variable: {key}",
                    hint="Set it in your .env file or in the hosting dashboard.",
                    id="api.E001",
                )
            )
    return errors
