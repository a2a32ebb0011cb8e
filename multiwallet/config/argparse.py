"""Command line option parsing."""

import abc

from typing import Type

from configargparse import ArgumentParser, Namespace, YAMLConfigFileParser

from .error import ArgsParseError
from .util import BoundedInt

CAT_START = "start"


class ArgumentGroup(abc.ABC):
    """A class representing a group of related command line arguments."""

    GROUP_NAME = None

    @abc.abstractmethod
    def add_arguments(self, parser: ArgumentParser):
        """Add arguments to the provided argument parser."""

    @abc.abstractmethod
    def get_settings(self, args: Namespace) -> dict:
        """Extract settings from the parsed arguments."""


class group:
    """Decorator for registering argument groups."""

    _registered = []

    def __init__(self, *categories):
        """Initialize the decorator."""
        self.categories = tuple(categories)

    def __call__(self, group_cls: ArgumentGroup):
        """Register a class in the given categories."""
        setattr(group_cls, "CATEGORIES", self.categories)
        self._registered.append((self.categories, group_cls))
        return group_cls

    @classmethod
    def get_registered(cls, category: str = None):
        """Fetch the set of registered classes in a category."""
        return (
            grp
            for (cats, grp) in cls._registered
            if category is None or category in cats
        )


def create_argument_parser(*, prog: str = None):
    """Create am instance of an arg parser, force yaml format for external config."""
    return ArgumentParser(config_file_parser_class=YAMLConfigFileParser, prog=prog)


def load_argument_groups(parser: ArgumentParser, *groups: Type[ArgumentGroup]):
    """
    Log a set of argument groups into a parser.

    Returns:
        A callable to convert loaded arguments into a settings dictionary

    """
    group_inst = []
    for group in groups:
        g_parser = parser.add_argument_group(group.GROUP_NAME)
        inst = group()
        inst.add_arguments(g_parser)
        group_inst.append(inst)

    def get_settings(args: Namespace):
        settings = {}
        try:
            for group in group_inst:
                settings.update(group.get_settings(args))
        except ArgsParseError as e:
            parser.print_help()
            raise e
        return settings

    return get_settings


@group(CAT_START)
class AdminGroup(ArgumentGroup):
    """Admin server settings."""

    GROUP_NAME = "Admin"

    def add_arguments(self, parser: ArgumentParser):
        """Add admin-specific command line arguments to the parser."""
        parser.add_argument(
            "--admin",
            type=str,
            nargs=2,
            metavar=("<host>", "<port>"),
            env_var="MULTIWALLET_ADMIN",
            help=(
                "Specify the host and port on which to serve the wallet API. "
                "If not provided, no admin server is made available."
            ),
        )
        parser.add_argument(
            "--admin-api-key",
            type=str,
            metavar="<api-key>",
            env_var="MULTIWALLET_ADMIN_API_KEY",
            help=(
                "Protect all admin endpoints with the provided API key. "
                "API clients (including remote multiwallet instances) must pass "
                "the key in the HTTP header using 'X-API-Key: <api key>'. Either "
                "this parameter or the '--admin-insecure-mode' parameter MUST be "
                "specified."
            ),
        )
        parser.add_argument(
            "--admin-insecure-mode",
            action="store_true",
            env_var="MULTIWALLET_ADMIN_INSECURE_MODE",
            help=(
                "Run the admin web server in insecure mode. DO NOT USE FOR "
                "PRODUCTION DEPLOYMENTS. The admin server will be publicly available "
                "to anyone who has access to the interface. Either this parameter or "
                "the '--api-key' parameter MUST be specified."
            ),
        )
        parser.add_argument(
            "--admin-client-max-request-size",
            default=1,
            type=BoundedInt(min=1, max=16),
            env_var="MULTIWALLET_ADMIN_CLIENT_MAX_REQUEST_SIZE",
            help="Maximum client request size to admin server, in megabytes: default 1",
        )

    def get_settings(self, args: Namespace):
        """Extract admin settings."""
        settings = {}
        if args.admin:
            admin_api_key = args.admin_api_key
            admin_insecure_mode = args.admin_insecure_mode

            if (admin_api_key and admin_insecure_mode) or not (
                admin_api_key or admin_insecure_mode
            ):
                raise ArgsParseError(
                    "Either --admin-api-key or --admin-insecure-mode "
                    "must be set but not both."
                )

            settings["admin.enabled"] = True
            settings["admin.host"] = args.admin[0]
            settings["admin.port"] = args.admin[1]
            settings["admin.admin_insecure_mode"] = admin_insecure_mode
            if admin_api_key:
                settings["admin.admin_api_key"] = admin_api_key
        if args.admin_client_max_request_size:
            settings["admin.admin_client_max_request_size"] = (
                args.admin_client_max_request_size
            )
        return settings


@group(CAT_START)
class GeneralGroup(ArgumentGroup):
    """General settings."""

    GROUP_NAME = "General"

    def add_arguments(self, parser: ArgumentParser):
        """Add general command line arguments to the parser."""
        parser.add_argument(
            "--arg-file",
            is_config_file=True,
            help=(
                "Load multiwallet arguments from the specified file.  Note that "
                "this file *must* be in YAML format."
            ),
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract general settings."""
        return {}


@group(CAT_START)
class LoggingGroup(ArgumentGroup):
    """Logging settings."""

    GROUP_NAME = "Logging"

    def add_arguments(self, parser: ArgumentParser):
        """Add logging-specific command line arguments to the parser."""
        parser.add_argument(
            "--log-config",
            dest="log_config",
            type=str,
            metavar="<path-to-config>",
            default=None,
            env_var="MULTIWALLET_LOG_CONFIG",
            help="Specifies a custom logging configuration file",
        )
        parser.add_argument(
            "--log-file",
            dest="log_file",
            type=str,
            metavar="<log-file>",
            default=None,
            env_var="MULTIWALLET_LOG_FILE",
            help=(
                "Overrides the output destination for the root logger (as defined "
                "by the log config file) to the named <log-file>."
            ),
        )
        parser.add_argument(
            "--log-level",
            dest="log_level",
            type=str,
            metavar="<log-level>",
            default=None,
            env_var="MULTIWALLET_LOG_LEVEL",
            help=(
                "Specifies a custom logging level as one of: "
                "('debug', 'info', 'warning', 'error', 'critical')"
            ),
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract logging settings."""
        settings = {}
        if args.log_config:
            settings["log.config"] = args.log_config
        if args.log_file:
            settings["log.file"] = args.log_file
        if args.log_level:
            settings["log.level"] = args.log_level
        return settings


@group(CAT_START)
class WalletGroup(ArgumentGroup):
    """Wallet backend settings."""

    GROUP_NAME = "Wallet"

    def add_arguments(self, parser: ArgumentParser):
        """Add wallet-specific command line arguments to the parser."""
        parser.add_argument(
            "--local-keystore",
            type=str,
            metavar="<path>",
            env_var="MULTIWALLET_LOCAL_KEYSTORE",
            help=(
                "Directory of the encrypted on-disk keystore. If neither this nor "
                "'--local-in-memory' is given, no local wallet is configured."
            ),
        )
        parser.add_argument(
            "--local-in-memory",
            action="store_true",
            env_var="MULTIWALLET_LOCAL_IN_MEMORY",
            help="Keep local keys in process memory only. Intended for testing.",
        )
        parser.add_argument(
            "--local-passphrase",
            type=str,
            metavar="<passphrase>",
            env_var="MULTIWALLET_LOCAL_PASSPHRASE",
            help=(
                "Passphrase unlocking the local keystore. An unencrypted keystore "
                "is encrypted under this passphrase on startup."
            ),
        )
        parser.add_argument(
            "--remote-wallet",
            type=str,
            metavar="<url>",
            env_var="MULTIWALLET_REMOTE_WALLET",
            help="Base URL of a remote wallet service exposing the wallet API.",
        )
        parser.add_argument(
            "--remote-wallet-api-key",
            type=str,
            metavar="<api-key>",
            env_var="MULTIWALLET_REMOTE_WALLET_API_KEY",
            help="API key sent to the remote wallet service.",
        )
        parser.add_argument(
            "--remote-wallet-timeout",
            type=float,
            metavar="<seconds>",
            env_var="MULTIWALLET_REMOTE_WALLET_TIMEOUT",
            help="Timeout of remote wallet requests, in seconds: default 10",
        )
        parser.add_argument(
            "--ledger-device",
            type=str,
            metavar="<device-class>",
            env_var="MULTIWALLET_LEDGER_DEVICE",
            help=(
                "Class path of the hardware device transport implementing "
                "BaseLedgerDevice. If not provided, no ledger wallet is configured."
            ),
        )
        parser.add_argument(
            "--ledger-keystore",
            type=str,
            metavar="<path>",
            env_var="MULTIWALLET_LEDGER_KEYSTORE",
            help=(
                "Directory holding ledger derivation records. Records are kept "
                "in memory if not provided."
            ),
        )
        parser.add_argument(
            "--max-delete-rounds",
            type=BoundedInt(min=1),
            metavar="<rounds>",
            env_var="MULTIWALLET_MAX_DELETE_ROUNDS",
            help=(
                "Maximum number of resolve-then-delete rounds when deleting a key "
                "claimed by several backends: default 16"
            ),
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract wallet settings."""
        settings = {}
        if args.local_keystore and args.local_in_memory:
            raise ArgsParseError(
                "Parameters --local-keystore and --local-in-memory "
                "are mutually exclusive."
            )
        if args.local_passphrase and not (
            args.local_keystore or args.local_in_memory
        ):
            raise ArgsParseError(
                "Parameter --local-passphrase requires a local keystore."
            )
        if args.local_keystore:
            settings["wallet.local.path"] = args.local_keystore
        if args.local_in_memory:
            settings["wallet.local.in_memory"] = True
        if args.local_passphrase:
            settings["wallet.local.passphrase"] = args.local_passphrase
        if args.remote_wallet_api_key and not args.remote_wallet:
            raise ArgsParseError(
                "Parameter --remote-wallet-api-key requires --remote-wallet."
            )
        if args.remote_wallet:
            settings["wallet.remote.endpoint"] = args.remote_wallet
        if args.remote_wallet_api_key:
            settings["wallet.remote.api_key"] = args.remote_wallet_api_key
        if args.remote_wallet_timeout:
            settings["wallet.remote.timeout"] = args.remote_wallet_timeout
        if args.ledger_keystore and not args.ledger_device:
            raise ArgsParseError("Parameter --ledger-keystore requires --ledger-device.")
        if args.ledger_device:
            settings["wallet.ledger.device"] = args.ledger_device
        if args.ledger_keystore:
            settings["wallet.ledger.path"] = args.ledger_keystore
        if args.max_delete_rounds:
            settings["wallet.max_delete_rounds"] = args.max_delete_rounds
        return settings
