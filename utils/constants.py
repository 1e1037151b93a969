"""
PortProbe Constants & Enums
Port states, engine defaults, and the well-known TCP port tables.
"""

import errno
from enum import Enum


# ─── Port States ──────────────────────────────────────────────────────────────
class PortState(str, Enum):
    OPEN     = "open"       # handshake completed before the deadline
    CLOSED   = "closed"     # remote answered with RST
    FILTERED = "filtered"   # deadline elapsed with no answer
    ERROR    = "error"      # local failure (resolution, fd limits, routing)


# Most informative first; used to pick a winner among duplicate (host, port)
STATE_RANK = {
    PortState.OPEN:     0,
    PortState.CLOSED:   1,
    PortState.FILTERED: 2,
    PortState.ERROR:    3,
}


# ─── Engine Defaults ──────────────────────────────────────────────────────────
DEFAULT_PORTS             = "1-1024"
DEFAULT_CONCURRENCY       = 512
DEFAULT_CONNECT_TIMEOUT_S = 0.8
DEFAULT_BANNER_TIMEOUT_S  = 1.2

PROGRESS_INTERVAL_S  = 0.5     # min seconds between progress pushes
CANCEL_GRACE_S       = 1.0     # in-flight grace after cancel()
EXHAUSTION_BACKOFF_S = 0.25    # admission pause after EMFILE & co.
CLOSE_TIMEOUT_S      = 1.0     # bound on writer.wait_closed()

# ─── Banner Reader ────────────────────────────────────────────────────────────
BANNER_MAX_BYTES  = 4096
BANNER_CHUNK      = 1024
BANNER_GRACE_S    = 0.3        # wait this long for a passive banner
BANNER_IDLE_GAP_S = 0.25       # stop once the service goes quiet
BANNER_NUDGE      = b"\r\n"

# ─── Outcome Reasons ──────────────────────────────────────────────────────────
REASON_TIMEOUT   = "timeout"
REASON_CANCELLED = "cancelled"

RESOURCE_ERRNOS = frozenset({errno.EMFILE, errno.ENFILE, errno.ENOBUFS, errno.ENOMEM})

# ─── Target / Port Limits ─────────────────────────────────────────────────────
PORT_MIN       = 1
PORT_MAX       = 65535
MAX_HOSTS      = 65536     # largest expanded host set accepted (a /16)
MAX_SAFE_ITEMS = 1_000_000 # warn if above this

# ─── Top TCP ports, most frequently open first (nmap-services ordering) ──────
TOP_PORTS = (
    80, 23, 443, 21, 22, 25, 3389, 110, 445, 139,
    143, 53, 135, 3306, 8080, 1723, 111, 995, 993, 5900,
    1025, 587, 8888, 199, 1720, 465, 548, 113, 81, 6001,
    10000, 514, 5060, 179, 1026, 2000, 8443, 8000, 32768, 554,
    26, 1433, 49152, 2001, 515, 8008, 49154, 1027, 5666, 646,
    5000, 5631, 631, 49153, 8081, 2049, 88, 79, 5800, 106,
    2121, 1110, 49155, 6000, 513, 990, 5357, 427, 49156, 543,
    544, 5101, 144, 7, 389, 8009, 3128, 444, 9999, 5009,
    7070, 5190, 3000, 5432, 1900, 3986, 13, 1029, 9, 5051,
    6646, 49157, 1028, 873, 1755, 2717, 4899, 9100, 119, 37,
)

# Labels only; nothing is inferred from banners
WELL_KNOWN_SERVICES = {
    21: "ftp", 22: "ssh", 23: "telnet", 25: "smtp", 53: "domain",
    80: "http", 110: "pop3", 111: "rpcbind", 135: "msrpc", 139: "netbios-ssn",
    143: "imap", 443: "https", 445: "microsoft-ds", 993: "imaps", 995: "pop3s",
    1433: "ms-sql-s", 3306: "mysql", 3389: "ms-wbt-server", 5432: "postgresql",
    5900: "vnc", 6379: "redis", 8080: "http-proxy", 8443: "https-alt",
}
