"""Startup banner output."""

from typing import Iterable, List


class Banner:
    """Collects the lines of the startup banner and renders them in a frame."""

    def __init__(self, border: str, length: int):
        """Initialize the banner object.

        Args:
            border: Single character drawing the frame
            length: Width of the content area, in characters
        """
        self.border = border
        self.length = length
        self.lines: List[str] = []

    def add_title(self, title: str):
        """Add the main title followed by an empty line."""
        self.lines.extend((title, ""))

    def add_section(self, title: str, items: Iterable[str]):
        """Add a titled list of items followed by an empty line."""
        self.lines.append(f"{title}:")
        self.lines.extend(f"  - {item}" for item in items)
        self.lines.append("")

    def add_version(self, version: str):
        """Add the right-aligned version line."""
        self.lines.append(f"ver: {version}".rjust(self.length))

    def render(self) -> str:
        """Render the framed banner."""
        edge = self.border * 2
        rule = self.border * (self.length + 6)
        body = [f"{edge} {line.ljust(self.length)} {edge}" for line in self.lines]
        return "\n".join([rule, *body, rule])
