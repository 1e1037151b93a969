"""
core/prober.py
Single TCP-connect probe.

One ``asyncio.open_connection`` raced against the connect timeout with
``asyncio.wait_for``. On timeout the connect task is cancelled, and asyncio
closes the half-open socket as part of that cancellation.

Outcome mapping:
  connected                 → OPEN   (Connection handed to the caller)
  ConnectionRefusedError    → CLOSED
  timeout                   → FILTERED("timeout")
  other OSError / gaierror  → ERROR(reason)
"""

from __future__ import annotations

import asyncio
import socket
import time
from dataclasses import dataclass
from typing import Optional

from core.models import ProbeOutcome, WorkItem
from utils.constants import CLOSE_TIMEOUT_S, REASON_TIMEOUT, RESOURCE_ERRNOS
from utils.logger import get_logger

log = get_logger("portprobe.prober")


class Connection:
    """
    An established stream owned by exactly one task.
    ``close()`` is idempotent and never raises OSError.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.reader = reader
        self.writer = writer
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.writer.close()
        try:
            await asyncio.wait_for(self.writer.wait_closed(), timeout=CLOSE_TIMEOUT_S)
        except (OSError, asyncio.TimeoutError):
            pass


@dataclass
class ProbeAttempt:
    outcome:    ProbeOutcome
    elapsed:    float
    connection: Optional[Connection] = None


def _describe(exc: OSError) -> str:
    text = exc.strerror or str(exc) or type(exc).__name__
    if isinstance(exc, socket.gaierror):
        return f"resolve failed: {text}"
    return text


async def probe(item: WorkItem, connect_timeout: float) -> ProbeAttempt:
    """Attempt one TCP connect to ``item``. Never retries, never raises OSError."""
    t0 = time.monotonic()
    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(item.host, item.port),
            timeout=connect_timeout,
        )
    except asyncio.TimeoutError:
        return ProbeAttempt(ProbeOutcome.filtered(REASON_TIMEOUT), time.monotonic() - t0)
    except ConnectionRefusedError:
        return ProbeAttempt(ProbeOutcome.closed(), time.monotonic() - t0)
    except OSError as exc:
        exhausted = exc.errno in RESOURCE_ERRNOS
        if exhausted:
            log.warning(f"Local resource exhaustion probing {item}: {exc}")
        else:
            log.debug(f"{item}: {exc!r}")
        return ProbeAttempt(
            ProbeOutcome.error(_describe(exc), resource_exhausted=exhausted),
            time.monotonic() - t0,
        )
    except (ValueError, UnicodeError) as exc:
        # malformed host strings surface here rather than as OSError
        return ProbeAttempt(ProbeOutcome.error(str(exc)), time.monotonic() - t0)

    return ProbeAttempt(
        ProbeOutcome.open(), time.monotonic() - t0, Connection(reader, writer),
    )
