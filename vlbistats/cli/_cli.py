import argparse
import logging
import logging.handlers
import os
from typing import Any, Dict, List, Optional

from vlbistats.utils.config import load_config
from vlbistats.version import version


def setup_logging(log_level: str = "info", log_file: Optional[str] = None) -> None:
    """Configures the root logger.

    Args:
        log_level: Name of log level.
        log_file: If given, also log into this file.
    """

    # formatter for logging, and list of logging handlers
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(filename)s:%(lineno)d %(message)s")
    handlers: List[logging.Handler] = []

    # create stdout logging handler
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    # create file logging handler, if log file is given
    if log_file is not None:
        file_handler = logging.handlers.WatchedFileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # basic setup
    logging.basicConfig(handlers=handlers, level=logging.getLevelName(log_level.upper()), force=True)
    logging.captureWarnings(True)


class CLI:
    """Base class for command line tools.

    Options are collected from (in increasing priority) the defaults of the argument parser, the section
    CONFIG_SECTION of an optional YAML file given via --config, environment variables VLBISTATS_<KEY> for all
    keys in GLOBAL_CONFIG_KEYS, and the command line itself.
    """

    # name of section in configuration file
    CONFIG_SECTION = ""

    # list of parameters that can also be given as environment variables
    GLOBAL_CONFIG_KEYS: List[str] = []

    def __init__(self, description: Optional[str] = None) -> None:
        """Initializes a new instance of the CLI class."""
        self._config: Dict[str, Any] = {}
        self._parser = argparse.ArgumentParser(description=description)

        # config
        self._parser.add_argument("--config", type=str, help="YAML file with default options")

        # logging
        self._parser.add_argument(
            "--log-level", type=str, choices=["critical", "error", "warning", "info", "debug"], default="info"
        )
        self._parser.add_argument("-l", "--log-file", type=str, help="file to write log into")

        # version
        self._parser.add_argument("-v", "--version", action="version", version=version())

    def __call__(self, argv: Optional[List[str]] = None) -> None:
        # CLI
        self.init_cli(self._parser)

        # configuration file and environment variables act as defaults
        known, _ = self._parser.parse_known_args(argv)
        self._load_config(known.config)
        self._load_env()
        self._parser.set_defaults(**self._config)

        # parse again
        args = self._parser.parse_args(argv)
        options = vars(args)

        # logging
        setup_logging(options.pop("log_level"), options.pop("log_file"))
        options.pop("config")

        # run it
        self.run(**options)

    def init_cli(self, parser: argparse.ArgumentParser) -> None:
        """Overwrite this to set CLI parameters with argparse."""
        ...

    def run(self, **options: Any) -> None:
        """Overwrite this to actually run the CLI."""
        ...

    def _load_config(self, config_file: Optional[str]) -> None:
        """Load config from config file"""
        if config_file is None:
            return
        cfg = load_config(os.path.abspath(config_file), section=self.CONFIG_SECTION or None)
        self._config.update(**{k.replace("-", "_"): v for k, v in cfg.items()})

    def _load_env(self) -> None:
        """Load config from environment variables."""
        for key in self.GLOBAL_CONFIG_KEYS:
            env_key = "VLBISTATS_" + key.upper()
            if env_key in os.environ:
                self._config[key] = os.environ[env_key]


__all__ = ["CLI", "setup_logging"]
