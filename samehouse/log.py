# (c) Copyright Datacraft, 2026
"""Logging setup from a YAML dictConfig file."""
import logging
from logging.config import dictConfig
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


def setup_logging(path: Path | str | None) -> bool:
	"""
	Apply the logging configuration stored at `path`.

	Returns False, leaving logging untouched, when there is no such file.
	"""
	if path is None:
		return False

	logging_config_path = Path(path)
	if not (logging_config_path.exists() and logging_config_path.is_file()):
		logger.debug("No logging config at %s", logging_config_path)
		return False

	with open(logging_config_path, "r") as stream:
		config = yaml.safe_load(stream)

	dictConfig(config)
	return True
