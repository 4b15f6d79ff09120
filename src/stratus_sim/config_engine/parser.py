"""Parser for configuration blocks.

Turns free-form configuration text into a list of typed directives. The
parser never fails: anything it does not recognise becomes an IGNORED
directive.
"""
from .schema import (
    DEFAULT_ACCESS_VLAN,
    Directive,
    DirectiveKind,
)

ACCESS_VLAN_PREFIX = "switchport access vlan"


class ConfigParser:
    """Classify configuration lines into directives."""

    def parse(self, block: str) -> list[Directive]:
        """
        Parse a configuration block into directives, one per non-empty line.

        Args:
            block: Multi-line configuration text, possibly empty

        Returns:
            List of Directive objects in line order
        """
        directives = []
        for line_no, raw in enumerate((block or "").split("\n"), start=1):
            line = raw.strip()
            if not line:
                continue
            directives.append(self.parse_line(line, line_no))
        return directives

    def parse_line(self, line: str, line_no: int = 0) -> Directive:
        """Classify a single trimmed line."""
        if line.startswith("!"):
            return Directive(DirectiveKind.COMMENT, line, line_no)

        tokens = line.split()
        if tokens[0] == "interface":
            # A bare "interface" names nothing and is dropped
            if len(tokens) < 2:
                return Directive(DirectiveKind.IGNORED, line, line_no)
            return Directive(DirectiveKind.INTERFACE, line, line_no, argument=tokens[1])

        if line == "shutdown":
            return Directive(DirectiveKind.SHUTDOWN, line, line_no)

        if line == "no shutdown":
            return Directive(DirectiveKind.NO_SHUTDOWN, line, line_no)

        if line.startswith("description"):
            _, sep, text = line.partition(" ")
            return Directive(
                DirectiveKind.DESCRIPTION, line, line_no, argument=text if sep else ""
            )

        if line.startswith(ACCESS_VLAN_PREFIX):
            return Directive(
                DirectiveKind.ACCESS_VLAN, line, line_no,
                vlan_id=parse_vlan_id(tokens[-1]),
            )

        if line == "exit":
            return Directive(DirectiveKind.EXIT, line, line_no)

        return Directive(DirectiveKind.IGNORED, line, line_no)


def parse_vlan_id(token: str) -> int:
    """
    Parse a VLAN id token, falling back to VLAN 1.

    VLAN 0 (untagged) is kept as given.

    Examples:
        "30" -> 30
        "0" -> 0
        "vlan" -> 1
        "-5" -> 1
    """
    try:
        vlan_id = int(token)
    except (TypeError, ValueError):
        return DEFAULT_ACCESS_VLAN
    if vlan_id < 0:
        return DEFAULT_ACCESS_VLAN
    return vlan_id
