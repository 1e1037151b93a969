"""
core/banner.py
Best-effort banner capture on an already-open connection.

  1. wait up to BANNER_GRACE_S for a passive banner (SSH, FTP, SMTP ...)
  2. nothing yet → send one BANNER_NUDGE and keep waiting
  3. once bytes arrive, keep reading until the peer goes quiet for
     BANNER_IDLE_GAP_S, closes, the budget runs out, or BANNER_MAX_BYTES

Not protocol-aware. The connection is closed on every exit path.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from core.models import BannerResult
from core.prober import Connection
from core.timing import Deadline
from utils.constants import (
    BANNER_CHUNK, BANNER_GRACE_S, BANNER_IDLE_GAP_S, BANNER_MAX_BYTES, BANNER_NUDGE,
)
from utils.logger import get_logger

log = get_logger("portprobe.banner")


async def _read_chunk(reader: asyncio.StreamReader, n: int, timeout: float) -> Optional[bytes]:
    """One read; ``None`` on timeout, ``b""`` on EOF."""
    if timeout <= 0:
        return None
    try:
        return await asyncio.wait_for(reader.read(n), timeout=timeout)
    except asyncio.TimeoutError:
        return None


async def read_banner(
    conn: Connection,
    banner_timeout: float,
    *,
    grace: float = BANNER_GRACE_S,
    idle_gap: float = BANNER_IDLE_GAP_S,
    max_bytes: int = BANNER_MAX_BYTES,
    nudge: bytes = BANNER_NUDGE,
) -> BannerResult:
    """Read whatever the service volunteers. Never raises (cancellation aside)."""
    deadline = Deadline(banner_timeout)
    buf = bytearray()
    try:
        first = await _read_chunk(conn.reader, min(BANNER_CHUNK, max_bytes),
                                  deadline.remaining(cap=grace))
        if first is None and nudge and not deadline.expired:
            conn.writer.write(nudge)
            await asyncio.wait_for(conn.writer.drain(), timeout=deadline.remaining())
            first = await _read_chunk(conn.reader, min(BANNER_CHUNK, max_bytes),
                                      deadline.remaining())
        if not first:
            return BannerResult.EMPTY

        buf += first
        while len(buf) < max_bytes:
            chunk = await _read_chunk(
                conn.reader,
                min(BANNER_CHUNK, max_bytes - len(buf)),
                deadline.remaining(cap=idle_gap),
            )
            if not chunk:
                break
            buf += chunk
        return BannerResult(attempted=True, data=bytes(buf[:max_bytes]))
    except Exception as exc:
        log.debug(f"Banner read failed: {exc!r}")
        return BannerResult.EMPTY
    finally:
        await conn.close()
