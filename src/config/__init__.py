"""Configuration loading for the pipeline composer.

Configuration is loaded from src/config/config.yaml (or an explicit path)
and turned into a PipelineComposer with one provider configurator per
configured section.

Usage:
    >>> from config import compose_from_config, load_config
    >>>
    >>> config = load_config()
    >>> registration = compose_from_config(config).build()

Validate from the command line:
    python -m config.config --validate --compose
"""

from config.config import (
    DEFAULT_CONFIG_FILE,
    PipelineConfig,
    apply_settings,
    compose_from_config,
    get_config,
    load_config,
    load_yaml,
    reset_config,
    set_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "PipelineConfig",
    "apply_settings",
    "compose_from_config",
    "get_config",
    "load_config",
    "load_yaml",
    "reset_config",
    "set_config",
]
