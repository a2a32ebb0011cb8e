from unittest import TestCase

from ..banner import Banner


class TestBanner(TestCase):
    def test_render(self):
        banner = Banner(border=":", length=20)
        banner.add_title("multiwallet")
        banner.add_section("Wallet Backends", ["local", "ledger"])
        banner.add_version("1.2.3")

        lines = banner.render().split("\n")
        assert lines[0] == ":" * 26
        assert lines[-1] == ":" * 26
        assert all(len(line) == 26 for line in lines)
        assert lines[1] == ":: multiwallet          ::"
        assert ":: Wallet Backends:     ::" in lines
        assert "::   - ledger           ::" in lines
        assert lines[-2] == "::           ver: 1.2.3 ::"
