"""
Configuration loading for semantic_commit_helper.

Provides the model profiles, the user configuration file and the
credential lookup. See :mod:`semantic_commit_helper.config.loader` for
implementation details.
"""

from .loader import (  # noqa: F401
    AIConfig,
    ConfigurationError,
    ModelProfile,
    get_api_key,
    get_available_models,
    get_model_profile,
    load_config,
    save_config,
    set_default_model,
)
