"""
core/port_parser.py
Port specification parser.

Accepts:
  "80"                 → [80]
  "80,443"             → [80, 443]
  "1-1000"             → [1..1000]
  "22,80-100,443"      → merged & sorted, deduped
  "top100"             → the 100 most common TCP ports
  "-"                  → all ports (1-65535)

Rejects:
  "abc", "99999", "-5", "100-50", "", None
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Set, Tuple

from utils.constants import PORT_MIN, PORT_MAX, TOP_PORTS
from utils.validators import validate_port


# ─── Custom Exceptions ────────────────────────────────────────────────────────

class PortParseError(ValueError):
    """Raised when port specification is invalid."""


# ─── Parser ───────────────────────────────────────────────────────────────────

class PortParser:
    """
    Parse a port specification string.

    All errors raise PortParseError with a human-readable message.
    """

    _SINGLE_RE = re.compile(r"^\d+$")
    _RANGE_RE  = re.compile(r"^(\d+)-(\d+)$")
    _TOP_RE    = re.compile(r"^top(\d+)$", re.IGNORECASE)

    def __init__(self, top_ports: Iterable[int] = TOP_PORTS):
        self._top_ports: Tuple[int, ...] = tuple(top_ports)

    # ── Public API ────────────────────────────────────────────────────────────

    def parse(self, spec: str) -> List[int]:
        """
        Parse port spec → sorted deduplicated list.

        Raises PortParseError on any invalid input.
        """
        if not isinstance(spec, str):
            raise PortParseError(f"Expected string, got {type(spec).__name__}")

        spec = spec.strip()
        if not spec:
            raise PortParseError("Port specification is empty")

        if spec == "-":
            return list(range(PORT_MIN, PORT_MAX + 1))

        ports: Set[int] = set()
        for part in spec.split(","):
            part = part.strip()
            if not part:
                continue
            ports.update(self._parse_token(part))

        if not ports:
            raise PortParseError(f"No valid ports parsed from: {spec!r}")

        return sorted(ports)

    def top(self, n: int) -> List[int]:
        """The ``n`` most common TCP ports, sorted ascending."""
        if isinstance(n, bool) or not isinstance(n, int):
            raise PortParseError(f"top-ports count must be an integer, got {n!r}")
        if n < 1:
            raise PortParseError(f"top-ports count must be >= 1, got {n}")
        return sorted(self._top_ports[:n])

    def combine(self, spec: Optional[str], top_n: Optional[int]) -> List[int]:
        """Union of ``--ports`` and ``--top-ports``; at least one is required."""
        if spec is None and top_n is None:
            raise PortParseError("No ports requested")
        ports: Set[int] = set()
        if spec is not None:
            ports.update(self.parse(spec))
        if top_n is not None:
            ports.update(self.top(top_n))
        return sorted(ports)

    def validate(self, spec: str) -> Tuple[bool, str]:
        """Return (ok, error_message). Never raises."""
        try:
            self.parse(spec)
            return True, ""
        except PortParseError as exc:
            return False, str(exc)

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _parse_token(self, token: str) -> List[int]:
        if self._SINGLE_RE.match(token):
            return [self._validated(int(token))]

        m = self._RANGE_RE.match(token)
        if m:
            start, end = self._validated(int(m.group(1))), self._validated(int(m.group(2)))
            if start > end:
                raise PortParseError(f"Invalid range {start}-{end}: start > end")
            return list(range(start, end + 1))

        m = self._TOP_RE.match(token)
        if m:
            return self.top(int(m.group(1)))

        raise PortParseError(
            f"Invalid port token: {token!r}  "
            f"(expected integer, start-end range or topN)"
        )

    @staticmethod
    def _validated(port: int) -> int:
        ok, msg = validate_port(port)
        if not ok:
            raise PortParseError(msg)
        return port


# ── Module-level convenience ──────────────────────────────────────────────────

_default_parser = PortParser()


def parse_ports(spec: str) -> List[int]:
    return _default_parser.parse(spec)


def top_ports(n: int) -> List[int]:
    return _default_parser.top(n)
