"""
Advisory locks serializing identifier allocation in the registry.

Allocation is read-max-then-increment (see allocator.py). Holding the lock for
a scope from the read until the insert commits means at most one allocation
runs per registration date, across every web and Celery process.

Backends (settings.REGISTRY_LOCK_BACKEND):
  redis  Redis.lock on REDIS_URL. The lock expires after REGISTRY_LOCK_TTL
         seconds so a crashed holder cannot block a day forever.
  local  one threading.Lock per key, dropped once nobody holds or waits
         for it; only valid for a single process.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import date

import redis
from django.conf import settings

from ..exceptions import RegistryUnavailable

logger = logging.getLogger(__name__)

LOCK_PREFIX = 'simrs'

# name -> [lock, holders + waiters]; an entry is dropped when its count hits 0
_local_locks: dict[str, list] = {}
_local_locks_guard = threading.Lock()


def _busy(name, timeout):
    return RegistryUnavailable(
        message='SIMRS sedang memproses pendaftaran lain, silakan coba lagi.',
        code='REGISTRY_BUSY',
        detail={'lock': name, 'timeout': timeout},
    )


@contextmanager
def _local_lock(name, timeout):
    with _local_locks_guard:
        entry = _local_locks.setdefault(name, [threading.Lock(), 0])
        entry[1] += 1

    lock = entry[0]
    try:
        if not lock.acquire(timeout=timeout):
            raise _busy(name, timeout)
        try:
            yield
        finally:
            lock.release()
    finally:
        with _local_locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _local_locks[name]


@contextmanager
def _redis_lock(name, timeout):
    client = redis.from_url(settings.REDIS_URL)
    lock = client.lock(name, timeout=settings.REGISTRY_LOCK_TTL, blocking_timeout=timeout)
    try:
        acquired = lock.acquire()
    except redis.exceptions.ConnectionError as exc:
        raise RegistryUnavailable(
            message='Server lock tidak dapat dihubungi.',
            code='LOCK_UNAVAILABLE',
            detail={'lock': name},
        ) from exc

    if not acquired:
        raise _busy(name, timeout)
    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # TTL elapsed while we held it; another holder may now own the key
            logger.warning("[Lock] %s expired before release (ttl=%ss)", name, settings.REGISTRY_LOCK_TTL)


_BACKENDS = {
    'local': _local_lock,
    'redis': _redis_lock,
}


@contextmanager
def advisory_lock(name: str, timeout: float | None = None):
    """
    Hold the named lock for the duration of the block.

    Raises:
        RegistryUnavailable: REGISTRY_BUSY if not acquired within `timeout`,
                             LOCK_UNAVAILABLE if the lock server is down
    """
    backend = settings.REGISTRY_LOCK_BACKEND
    acquire = _BACKENDS.get(backend)
    if acquire is None:
        raise ValueError(
            f"Unknown REGISTRY_LOCK_BACKEND: {backend!r}. "
            f"Known backends: {list(_BACKENDS.keys())}"
        )

    if timeout is None:
        timeout = settings.REGISTRY_LOCK_TIMEOUT

    logger.debug("[Lock] acquiring %s (%s)", name, backend)
    with acquire(name, timeout):
        yield


def registration_lock(reg_date: date, timeout: float | None = None):
    """Lock for the no_rawat / no_reg scope of one registration date."""
    return advisory_lock(f"{LOCK_PREFIX}:reg_periksa:{reg_date.isoformat()}", timeout)


def patient_number_lock(timeout: float | None = None):
    """Lock for no_rkm_medis allocation."""
    return advisory_lock(f"{LOCK_PREFIX}:pasien", timeout)
