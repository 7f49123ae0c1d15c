"""
Persistent high score and top-N records.

Two independent JSON documents live under stable keys in a directory:

    <root>/snek.highscore.json   -> 150
    <root>/snek.records.v1.json  -> [{"score": 150, "time": 1760659200.0}, ...]

Missing or malformed documents read as 0 / [] and never raise; failed writes
are logged and dropped so a broken disk never stops a game.
"""

import json
import logging
import math
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, List, Union

logger = logging.getLogger(__name__)

HIGH_SCORE_KEY = "snek.highscore"
RECORDS_KEY = "snek.records.v1"
RECORDS_LIMIT = 10
# 3000-01-01T00:00:00Z; time.localtime rejects later stamps on some platforms.
MAX_TIMESTAMP = 32503680000.0


@dataclass(frozen=True)
class Record:
    score: int
    time: float


class JsonStore:
    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("could not read %s, using default: %s", path, exc)
            return default

    def set(self, key: str, value: Any) -> bool:
        path = self.path_for(key)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(value, f)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("could not write %s: %s", path, exc)
            return False
        return True


def _parse_record(raw: Any) -> Record:
    if not isinstance(raw, dict):
        raise TypeError(f"record must be an object, got {type(raw).__name__}")
    score, stamp = raw["score"], raw["time"]
    if isinstance(score, bool) or not isinstance(score, int):
        raise TypeError(f"score must be an integer, got {score!r}")
    if isinstance(stamp, bool) or not isinstance(stamp, (int, float)):
        raise TypeError(f"time must be a number, got {stamp!r}")
    # NaN fails every comparison, so this also rejects non-finite values.
    if not 0 <= stamp <= MAX_TIMESTAMP:
        raise ValueError(f"time out of range: {stamp!r}")
    return Record(score=score, time=float(stamp))


def rank(records: List[Record], limit: int = RECORDS_LIMIT) -> List[Record]:
    # Highest score first; equal scores keep the earlier game first.
    return sorted(records, key=lambda r: (-r.score, r.time))[:limit]


class Records:
    def __init__(self, store: JsonStore, limit: int = RECORDS_LIMIT):
        self.store = store
        self.limit = limit

    @classmethod
    def at(cls, root: Union[str, Path], limit: int = RECORDS_LIMIT) -> "Records":
        return cls(JsonStore(root), limit=limit)

    def load_high_score(self) -> int:
        value = self.store.get(HIGH_SCORE_KEY, 0)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning("ignoring malformed high score %r", value)
            return 0
        if (isinstance(value, float) and not math.isfinite(value)) or value < 0:
            logger.warning("ignoring malformed high score %r", value)
            return 0
        return int(value)

    def save_high_score(self, value: int) -> bool:
        return self.store.set(HIGH_SCORE_KEY, int(value))

    def load(self) -> List[Record]:
        raw = self.store.get(RECORDS_KEY, [])
        if not isinstance(raw, list):
            logger.warning("ignoring malformed records document")
            return []
        records = []
        for item in raw:
            try:
                records.append(_parse_record(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("dropping malformed record %r: %s", item, exc)
        return records

    def submit(self, score: int, time: float) -> List[Record]:
        records = self.load()
        records.append(Record(score=int(score), time=float(time)))
        records = rank(records, self.limit)
        self.store.set(RECORDS_KEY, [asdict(r) for r in records])
        return records
