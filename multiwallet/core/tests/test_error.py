from unittest import TestCase

from ..error import BaseError, StartupError


class TestBaseError(TestCase):
    def test_base_error(self):
        err = BaseError()
        assert err.error_code is None
        assert not err.message
        assert err.roll_up == f"{err.__class__.__name__}."

        MESSAGE = "Not enough space\nClear 10MB\n\n"
        CODE = "-1"
        err = BaseError(MESSAGE, error_code=CODE)
        assert err.error_code == CODE
        assert err.message == MESSAGE.strip()
        assert err.roll_up == "Not enough space. Clear 10MB."

        zdx = ZeroDivisionError()
        keyx = KeyError("world")
        osx = OSError("oh\nno")
        iox = IOError("hello")
        keyx.__cause__ = zdx
        osx.__cause__ = keyx
        iox.__cause__ = osx
        err.__cause__ = iox

        assert err.roll_up == (
            "Not enough space. Clear 10MB. hello. oh. no. world. ZeroDivisionError."
        )

    def test_startup_error(self):
        err = StartupError("Unable to bind")
        assert isinstance(err, BaseError)
        assert err.roll_up == "Unable to bind."

    def test_causes(self):
        cause = OSError("disk full.")
        err = BaseError("Cannot persist key")
        err.__cause__ = cause
        assert list(err.causes()) == [err, cause]
        assert err.roll_up == "Cannot persist key. disk full."
