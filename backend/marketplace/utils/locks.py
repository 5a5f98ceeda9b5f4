import os
import tempfile
from contextlib import ExitStack, contextmanager
from typing import Iterable, Iterator, Optional

from filelock import FileLock, Timeout

from marketplace.config import settings
from marketplace.services.exceptions import StorageError


def _locks_dir() -> str:
    locks_dir = settings.LOCK_DIR or os.path.join(
        tempfile.gettempdir(), "marketplace_locks"
    )
    os.makedirs(locks_dir, exist_ok=True)
    return locks_dir


@contextmanager
def product_locks(
    product_ids: Iterable[int], timeout: Optional[float] = None
) -> Iterator[None]:
    """
    Hold one file lock per product for the duration of the block.
    Locks are taken in ascending id order so two checkouts sharing products
    cannot deadlock.
    """
    timeout = settings.LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    locks_dir = _locks_dir()
    with ExitStack() as stack:
        for pid in sorted(set(product_ids)):
            lock = FileLock(os.path.join(locks_dir, f"product_{pid}.lock"))
            try:
                stack.enter_context(lock.acquire(timeout=timeout))
            except Timeout:
                raise StorageError(
                    "Could not acquire reservation lock; try again"
                ) from None
        yield
