from unittest import TestCase

from ...tests import mock
from .. import help as command


class TestHelp(TestCase):
    def test_exec_help(self):
        with mock.patch.object(
            command.ArgumentParser, "print_help"
        ) as mock_print_help, mock.patch(
            "builtins.print", mock.MagicMock()
        ) as mock_print:
            command.execute([])
            mock_print_help.assert_called_once()

            command.execute(["-v"])
            mock_print.assert_called_once_with(command.__version__)

    def test_exec_start_help(self):
        with self.assertRaises(SystemExit), mock.patch(
            "sys.stdout", mock.MagicMock()
        ):
            command.execute(["start", "--help"])
