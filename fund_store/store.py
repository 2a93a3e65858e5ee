"""Local JSON persistence for fund records."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from fund_core.ledger import check_share_invariant

from .models import FundRecord

logger = logging.getLogger(__name__)


class FundNotFoundError(KeyError):
    """Raised when no record exists at the store location."""


class FundStore(Protocol):
    def load(self) -> FundRecord:
        ...

    def save(self, record: FundRecord) -> None:
        ...

    def exists(self) -> bool:
        ...


class FileFundStore:
    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def modified_ns(self) -> Optional[int]:
        try:
            return self._path.stat().st_mtime_ns
        except FileNotFoundError:
            return None

    def load(self) -> FundRecord:
        if not self._path.exists():
            raise FundNotFoundError(f"No fund record at {self._path}")
        record = FundRecord.from_dict(json.loads(self._path.read_text()))
        check_share_invariant(record.state)
        return record

    def save(self, record: FundRecord) -> None:
        check_share_invariant(record.state)
        payload = json.dumps(record.to_dict(), indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self._path.parent), prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved fund %s to %s", record.state.fund_id, self._path)
