"""Utilities related to logging."""

import io
import logging
import logging.config
from importlib import resources
from typing import Sequence

import yaml

from ..version import __version__
from .banner import Banner

DEFAULT_LOGGING_CONFIG_PATH_INI = "multiwallet.config:default_logging_config.ini"


def load_resource(path: str, encoding: str = None):
    """Open a resource file located in a python package or the local filesystem.

    Args:
        path: The resource path in the form of `dir/file` or `package:dir/file`
    Returns:
        A file-like object representing the resource
    """
    components = path.rsplit(":", 1)
    try:
        if len(components) == 1:
            # Local filesystem resource
            return open(components[0], encoding=encoding)
        else:
            # Package resource
            package, resource = components
            bstream = resources.files(package).joinpath(resource).open("rb")
            if encoding:
                return io.TextIOWrapper(bstream, encoding=encoding)
            return bstream
    except IOError:
        pass


class LoggingConfigurator:
    """Utility class used to configure logging and print an informative start banner."""

    default_config_path_ini = DEFAULT_LOGGING_CONFIG_PATH_INI

    @classmethod
    def configure(
        cls,
        log_config_path: str = None,
        log_level: str = None,
        log_file: str = None,
    ):
        """Configure logger.

        :param log_config_path: str: (Default value = None) Optional path to
            custom logging config, either an ini file or a yaml dictConfig

        :param log_level: str: (Default value = None)

        :param log_file: str: (Default value = None) Optional file name to write logs to
        """
        log_config_path = log_config_path or cls.default_config_path_ini
        log_config, is_dict_config = cls._load_log_config(log_config_path)

        if not log_config:
            logging.basicConfig(level=logging.WARNING)
            logging.root.warning(f"Logging config file not found: {log_config_path}")
        elif is_dict_config:
            logging.config.dictConfig(log_config)
        else:
            with log_config:
                logging.config.fileConfig(log_config, disable_existing_loggers=False)

        # Set custom file handler
        if log_file:
            logging.root.handlers.append(
                logging.FileHandler(log_file, encoding="utf-8")
            )

        # Set custom log level
        if log_level:
            logging.root.setLevel(log_level.upper())

    @classmethod
    def _load_log_config(cls, log_config_path):
        if ".yml" in log_config_path or ".yaml" in log_config_path:
            with open(log_config_path, "r") as stream:
                return yaml.safe_load(stream), True
        return load_resource(log_config_path, "utf-8"), False

    @classmethod
    def print_banner(
        cls,
        backends: Sequence[str],
        admin_server=None,
        banner_length=40,
        border_character=":",
    ):
        """Print a startup banner describing the configuration.

        Args:
            backends: Descriptions of the configured wallet backends
            admin_server: Admin server info
            banner_length: (Default value = 40) Length of the banner
            border_character: (Default value = ":") Character to use in banner
            border
        """
        banner = Banner(border=border_character, length=banner_length)
        banner.add_title("multiwallet")
        banner.add_section("Wallet Backends", backends or ["none configured"])
        banner.add_section(
            "Administration API",
            [f"http://{admin_server.host}:{admin_server.port}"]
            if admin_server
            else ["not enabled"],
        )
        banner.add_version(__version__)

        print(banner.render())
        print()
        print("Listening...")
        print()
