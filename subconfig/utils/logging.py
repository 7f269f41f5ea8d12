"""Logging configuration utilities."""

import logging
import logging.config
import os
from pathlib import Path
from typing import Optional, Union

import yaml

from ..models.schemas import SubconfigLogging


def setup_logging(
    config_path: Optional[Union[str, Path]] = None,
    level: Optional[Union[int, str]] = None,
    environment: Optional[str] = None,
    settings: Optional[SubconfigLogging] = None,
) -> None:
    """Setup logging configuration.

    A YAML ``dictConfig`` file is used when one is given or named by the
    settings' environment variable; otherwise a console handler is installed.

    Args:
        config_path: Path to the logging configuration file
        level: Console logging level (overrides the settings)
        environment: Environment name selecting override sections of the file
        settings: Logging settings (defaults if None)
    """
    settings = settings or SubconfigLogging()

    if config_path is None:
        config_path = os.getenv(settings.env_key) or settings.default_config_path

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            try:
                with open(config_path, encoding="utf-8") as config_file:
                    config = yaml.safe_load(config_file)

                # Apply environment-specific overrides
                if environment and environment in config:
                    env_config = config.pop(environment)
                    for section in ("formatters", "handlers", "loggers"):
                        if section in env_config:
                            config.setdefault(section, {}).update(env_config[section])

                logging.config.dictConfig(config)
                return

            except Exception as e:
                print(f"Error loading logging configuration from {config_path}: {e}")
                print("Using default logging configuration")
        else:
            print(
                f"Logging config file {config_path} not found. Using default configuration."
            )

    _setup_default_logging(level or settings.level, settings)


def _setup_default_logging(
    level: Union[int, str], settings: SubconfigLogging
) -> None:
    """Setup console logging for the ``subconfig`` logger hierarchy.

    Args:
        level: Logging level
        settings: Logging settings providing the format
    """
    if isinstance(level, str):
        level = level.upper()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter(settings.format, datefmt=settings.datefmt)
    )

    package_logger = logging.getLogger("subconfig")
    package_logger.setLevel(level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.addHandler(console_handler)
