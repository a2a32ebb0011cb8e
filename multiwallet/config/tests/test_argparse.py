from unittest import TestCase

from configargparse import ArgumentTypeError

from ...tests import mock
from .. import argparse
from ..error import ArgsParseError
from ..util import BoundedInt


class TestArgParse(TestCase):
    def test_groups(self):
        """Test optional argument parsing."""
        parser = argparse.create_argument_parser()
        get_settings = argparse.load_argument_groups(
            parser, *argparse.group.get_registered(argparse.CAT_START)
        )
        assert get_settings(parser.parse_args([])) == {
            "admin.admin_client_max_request_size": 1
        }

    def test_admin_settings(self):
        parser = argparse.create_argument_parser()
        group = argparse.AdminGroup()
        group.add_arguments(parser)

        with mock.patch.object(parser, "exit") as exit_parser:
            parser.parse_args(["-h"])
            exit_parser.assert_called_once()

        result = parser.parse_args(
            ["--admin", "0.0.0.0", "8031", "--admin-api-key", "secret"]
        )
        settings = group.get_settings(result)
        assert settings["admin.enabled"] is True
        assert settings["admin.host"] == "0.0.0.0"
        assert settings["admin.port"] == "8031"
        assert settings["admin.admin_api_key"] == "secret"
        assert settings["admin.admin_insecure_mode"] is False

        result = parser.parse_args(
            [
                "--admin",
                "0.0.0.0",
                "8031",
                "--admin-insecure-mode",
                "--admin-client-max-request-size",
                "4",
            ]
        )
        settings = group.get_settings(result)
        assert settings["admin.admin_insecure_mode"] is True
        assert "admin.admin_api_key" not in settings
        assert settings["admin.admin_client_max_request_size"] == 4

    def test_admin_security_required(self):
        parser = argparse.create_argument_parser()
        group = argparse.AdminGroup()
        group.add_arguments(parser)

        for argv in (
            ["--admin", "0.0.0.0", "8031"],
            [
                "--admin",
                "0.0.0.0",
                "8031",
                "--admin-api-key",
                "secret",
                "--admin-insecure-mode",
            ],
        ):
            with self.assertRaises(ArgsParseError):
                group.get_settings(parser.parse_args(argv))

    def test_admin_max_request_size_bounds(self):
        parser = argparse.create_argument_parser()
        group = argparse.AdminGroup()
        group.add_arguments(parser)

        with self.assertRaises(SystemExit):
            parser.parse_args(["--admin-client-max-request-size", "17"])

    def test_logging_settings(self):
        parser = argparse.create_argument_parser()
        group = argparse.LoggingGroup()
        group.add_arguments(parser)

        result = parser.parse_args(
            [
                "--log-config",
                "logging.yml",
                "--log-file",
                "multiwallet.log",
                "--log-level",
                "debug",
            ]
        )
        assert group.get_settings(result) == {
            "log.config": "logging.yml",
            "log.file": "multiwallet.log",
            "log.level": "debug",
        }

    def test_wallet_settings(self):
        parser = argparse.create_argument_parser()
        group = argparse.WalletGroup()
        group.add_arguments(parser)

        result = parser.parse_args(
            [
                "--local-keystore",
                "/var/lib/multiwallet",
                "--local-passphrase",
                "secret",
                "--remote-wallet",
                "https://wallet.example",
                "--remote-wallet-api-key",
                "remote-key",
                "--remote-wallet-timeout",
                "2.5",
                "--ledger-device",
                "package.module.Device",
                "--ledger-keystore",
                "/var/lib/ledger",
                "--max-delete-rounds",
                "3",
            ]
        )
        assert group.get_settings(result) == {
            "wallet.local.path": "/var/lib/multiwallet",
            "wallet.local.passphrase": "secret",
            "wallet.remote.endpoint": "https://wallet.example",
            "wallet.remote.api_key": "remote-key",
            "wallet.remote.timeout": 2.5,
            "wallet.ledger.device": "package.module.Device",
            "wallet.ledger.path": "/var/lib/ledger",
            "wallet.max_delete_rounds": 3,
        }

        result = parser.parse_args(["--local-in-memory"])
        assert group.get_settings(result) == {"wallet.local.in_memory": True}

    def test_wallet_settings_invalid(self):
        parser = argparse.create_argument_parser()
        group = argparse.WalletGroup()
        group.add_arguments(parser)

        for argv in (
            ["--local-keystore", "/tmp/keys", "--local-in-memory"],
            ["--local-passphrase", "secret"],
            ["--remote-wallet-api-key", "key"],
            ["--ledger-keystore", "/tmp/ledger"],
        ):
            with self.assertRaises(ArgsParseError):
                group.get_settings(parser.parse_args(argv))

    def test_wallet_settings_env(self):
        parser = argparse.create_argument_parser()
        group = argparse.WalletGroup()
        group.add_arguments(parser)

        with mock.patch.dict(
            "os.environ",
            {
                "MULTIWALLET_LOCAL_IN_MEMORY": "true",
                "MULTIWALLET_REMOTE_WALLET": "http://localhost:8031",
            },
        ):
            result = parser.parse_args([])
        settings = group.get_settings(result)
        assert settings["wallet.local.in_memory"] is True
        assert settings["wallet.remote.endpoint"] == "http://localhost:8031"

    def test_get_settings_prints_help(self):
        parser = argparse.create_argument_parser()
        get_settings = argparse.load_argument_groups(parser, argparse.WalletGroup)
        with mock.patch.object(parser, "print_help") as print_help:
            with self.assertRaises(ArgsParseError):
                get_settings(parser.parse_args(["--local-passphrase", "secret"]))
            print_help.assert_called_once_with()

    def test_bounded_int(self):
        bounded = BoundedInt(min=1, max=16)
        assert bounded("5") == 5
        assert repr(bounded) == "integer"
        for value in ("", "five", "0", "17"):
            with self.assertRaises(ArgumentTypeError):
                bounded(value)
        assert BoundedInt()("-3") == -3
