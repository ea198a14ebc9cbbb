"""Dashboard event log: capped ring buffer of tagged messages, persisted as JSON.

Newest entry first. Every append rewrites the file so a restart resumes
with the same feed. Messages matching known-noisy substrings never reach
the buffer (they are still visible in the loguru output of the caller).
"""

import json
import re
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from loguru import logger

WORKER_PREFIX = "[WORKER] "

# Expected transient failures reported by the airdrop worker
IGNORED_SUBSTRINGS = (
    "[AIRDROP] batch failed",
    "Transaction was not confirmed",
    "unknown if it succeeded",
)

# Only these worker lines are accepted through the ingest endpoint
INGEST_TAGS = ("[CLAIM]", "[SWAP]", "[AIRDROP]")

_TX_MARKER_RE = re.compile(r"T[Xx]:\s*([A-Za-z0-9]{15,})")
_BARE_SIGNATURE_RE = re.compile(r"(?:[|]\s*|^)([1-9A-HJ-NP-Za-km-z]{32,100})")
_WORKER_PREFIX_RE = re.compile(r"^\[WORKER\]\s*", re.IGNORECASE)

SOLSCAN_TX_URL = "https://solscan.io/tx/{signature}"


@dataclass
class LogEntry:
    msg: str
    time: int  # unix ms


def now_ms() -> int:
    return int(time.time() * 1000)


def extract_signature(message: str) -> str | None:
    """Find a transaction signature in a log line (``TX: <sig>`` or a bare base58 id)."""
    match = _TX_MARKER_RE.search(message) or _BARE_SIGNATURE_RE.search(message)
    return match.group(1) if match else None


class EventLog:
    """Capped, persisted feed shown on the dashboard."""

    def __init__(self, path: str | Path | None = None, *, max_entries: int = 400) -> None:
        self._path = Path(path) if path else None
        self._max_entries = max_entries
        self._entries: list[LogEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> int:
        """Load previously persisted entries. Returns how many were restored."""
        if self._path is None or not self._path.exists():
            return 0
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8")) or []
        except (OSError, ValueError) as e:
            logger.warning(f"[LOG] Could not read {self._path}: {e}")
            return 0

        entries = [
            LogEntry(msg=item["msg"], time=int(item["time"]))
            for item in raw
            if isinstance(item, dict)
            and isinstance(item.get("msg"), str)
            and isinstance(item.get("time"), (int, float))
        ]
        self._entries = entries[: self._max_entries]
        logger.info(f"[LOG] Loaded {len(self._entries)} previous log entries")
        return len(self._entries)

    def append(self, message: str, tag: str = "server") -> bool:
        """Add a message at the front of the feed. False when it was dropped."""
        if not message or not message.strip():
            return False
        if any(s in message for s in IGNORED_SUBSTRINGS):
            return False

        tagged = f"{WORKER_PREFIX}{message}" if tag == "worker" else message
        logger.info(tagged)
        self._entries.insert(0, LogEntry(msg=tagged, time=now_ms()))
        del self._entries[self._max_entries :]
        self._save()
        return True

    def ingest(self, message: str) -> bool:
        """Accept a pre-classified line from the external airdrop worker."""
        message = (message or "").strip()
        if not message:
            return False
        if not any(tag in message for tag in INGEST_TAGS):
            return False
        return self.append(message, tag="worker")

    def entries(
        self,
        *,
        max_age_sec: float | None = None,
        limit: int | None = None,
        now: int | None = None,
    ) -> list[dict[str, Any]]:
        """Presentation view: worker prefix stripped, transaction link attached."""
        cutoff = None
        if max_age_sec is not None:
            cutoff = (now if now is not None else now_ms()) - int(max_age_sec * 1000)

        out: list[dict[str, Any]] = []
        for entry in self._entries:
            if cutoff is not None and entry.time < cutoff:
                continue
            msg = _WORKER_PREFIX_RE.sub("", entry.msg)
            signature = extract_signature(msg)
            out.append({
                "msg": msg,
                "time": entry.time,
                "signature": signature,
                "link": SOLSCAN_TX_URL.format(signature=signature) if signature else None,
            })
            if limit is not None and len(out) >= limit:
                break
        return out

    def raw_entries(self) -> list[LogEntry]:
        return list(self._entries)

    def _save(self) -> None:
        if self._path is None:
            return
        try:
            self._path.write_text(
                json.dumps([asdict(e) for e in self._entries], indent=2),
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning(f"[LOG] Could not persist {self._path}: {e}")
