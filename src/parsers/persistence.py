"""Snapshot persistence: RunningTotals + seen signatures as a small JSON file."""

import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from src.parsers.ledger import Ledger, RunningTotals, SeenSignatures


def load_ledger(
    path: str | Path,
    *,
    initial_airdrop: float,
    value_multiplier: float,
    seen_max: int = 1000,
) -> Ledger:
    """Restore the ledger from ``path`` or start from the airdrop baseline.

    A persisted total below the baseline predates baseline tracking, so the
    baseline is added to it once. The startup baseline used for
    "distributed since start" is the total after this correction.
    """
    path = Path(path)
    totals = RunningTotals(total_tokens_credited=initial_airdrop)
    seen: list[str] = []

    previous = _read_json(path)
    if previous is None:
        logger.info(f"[CACHE] Starting fresh with baseline {initial_airdrop:,.0f} $PUMP")
    else:
        merged = totals.model_dump(by_alias=True)
        merged.update({k: v for k, v in previous.items() if v is not None})
        try:
            totals = RunningTotals.model_validate(merged)
        except ValidationError as e:
            logger.warning(f"[CACHE] Ignoring malformed snapshot {path}: {e}")
            totals = RunningTotals(total_tokens_credited=initial_airdrop)
        else:
            raw_seen = previous.get("seenSignatures") or []
            seen = [s for s in raw_seen if isinstance(s, str) and s]

        if totals.total_tokens_credited < initial_airdrop:
            totals.total_tokens_credited += initial_airdrop
            logger.info(f"[CACHE] Added baseline {initial_airdrop:,.0f} $PUMP")
        logger.info(
            f"[CACHE] Loaded previous snapshot: total={totals.total_tokens_credited:.6f}, "
            f"seen={len(seen)}"
        )

    return Ledger(
        totals,
        value_multiplier=value_multiplier,
        seen=SeenSignatures(seen, max_size=seen_max),
    )


def save_ledger(ledger: Ledger, path: str | Path) -> None:
    """Write the snapshot. Raises OSError when the file can't be written."""
    data = ledger.snapshot().model_dump(by_alias=True)
    data["seenSignatures"] = ledger.seen.to_list()
    Path(path).write_text(json.dumps(data, indent=2), encoding="utf-8")


def _read_json(path: Path) -> dict | None:
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"[CACHE] Could not read {path}: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"[CACHE] Unexpected snapshot format in {path}")
        return None
    return data
