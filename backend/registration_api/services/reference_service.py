"""Sequential reference number allocation backed by a JSON file.

The counter file holds a single record, {"lastReferenceNumber": <int>}, and
is overwritten on every allocation before the new number is handed out.
Allocation is serialised within the process by an asyncio.Lock; sharing the
file between processes requires external coordination.
"""

import asyncio
import json
import os
from pathlib import Path

from registration_api.config import Settings
from registration_api.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SEED = 10000
DEFAULT_PREFIX = "NHBRC"
COUNTER_FIELD = "lastReferenceNumber"


class ReferenceNumberAllocator:
    """Process-wide, monotonically increasing reference counter."""

    def __init__(
        self,
        store_path: str | Path,
        seed: int = DEFAULT_SEED,
        prefix: str = DEFAULT_PREFIX,
    ) -> None:
        """Initialize the allocator.

        The stored value is read lazily on the first allocation.

        Args:
            store_path: Location of the counter file
            seed: Value assumed when no readable counter exists; the first
                number handed out is then seed + 1
            prefix: Literal prepended to form the external reference string
        """
        self._path = Path(store_path)
        self._seed = seed
        self._prefix = prefix
        self._value: int | None = None
        self._lock = asyncio.Lock()

    @property
    def store_path(self) -> Path:
        return self._path

    def _load(self) -> int:
        """Read the last persisted value, falling back to the seed."""
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info(
                "reference_store_missing",
                path=str(self._path),
                seed=self._seed,
            )
            return self._seed
        except (OSError, ValueError) as e:
            logger.warning(
                "reference_store_unreadable",
                path=str(self._path),
                seed=self._seed,
                error=str(e),
            )
            return self._seed

        value = data.get(COUNTER_FIELD) if isinstance(data, dict) else None
        if not isinstance(value, int) or isinstance(value, bool):
            logger.warning(
                "reference_store_corrupt",
                path=str(self._path),
                seed=self._seed,
            )
            return self._seed

        logger.info("reference_store_loaded", path=str(self._path), value=value)
        return value

    def _persist(self, value: int) -> None:
        """Overwrite the counter file atomically."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({COUNTER_FIELD: value}, f)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self._path)

    async def next(self) -> int:
        """Allocate the next reference number.

        The new value is persisted before it is returned. If persisting
        fails, the in-memory counter does not advance.

        Returns:
            The allocated integer

        Raises:
            OSError: If the counter file cannot be written
        """
        async with self._lock:
            if self._value is None:
                self._value = self._load()
            candidate = self._value + 1
            self._persist(candidate)
            self._value = candidate

        logger.info("reference_number_allocated", value=candidate)
        return candidate

    def format(self, value: int) -> str:
        """Render an allocated number as an external reference, e.g. NHBRC10001."""
        return f"{self._prefix}{value}"

    async def next_reference(self) -> str:
        """Allocate the next number and return it as a reference string."""
        return self.format(await self.next())


def reference_allocator_from_settings(settings: Settings) -> ReferenceNumberAllocator:
    """Construct a ReferenceNumberAllocator from application settings."""
    return ReferenceNumberAllocator(
        store_path=settings.reference_store_path,
        seed=settings.reference_seed,
        prefix=settings.reference_prefix,
    )
