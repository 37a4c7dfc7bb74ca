"""
Unit tests for the advisory locks, local backend (settings_test).

No database: the locks only guard registry access, they do not touch it.
"""
import threading
import time
import pytest
from datetime import date
from unittest.mock import MagicMock, patch

import redis

from booking.exceptions import RegistryUnavailable
from booking.simrs import locks


class TestLocalBackend:

    def test_serializes_same_day(self):
        day = date(2025, 6, 1)
        active = []
        overlaps = []

        def worker():
            with locks.registration_lock(day):
                active.append(1)
                if len(active) > 1:
                    overlaps.append(len(active))
                time.sleep(0.02)
                active.pop()

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert overlaps == []

    def test_busy_lock_times_out(self):
        day = date(2025, 6, 2)
        entered = threading.Event()
        release = threading.Event()

        def holder():
            with locks.registration_lock(day):
                entered.set()
                release.wait(5)

        t = threading.Thread(target=holder)
        t.start()
        entered.wait(5)
        try:
            with pytest.raises(RegistryUnavailable) as exc_info:
                with locks.registration_lock(day, timeout=0.05):
                    pass
            assert exc_info.value.code == 'REGISTRY_BUSY'
            assert exc_info.value.detail['lock'] == 'simrs:reg_periksa:2025-06-02'
        finally:
            release.set()
            t.join()

    def test_different_days_do_not_block(self):
        entered = threading.Event()
        release = threading.Event()

        def holder():
            with locks.registration_lock(date(2025, 6, 3)):
                entered.set()
                release.wait(5)

        t = threading.Thread(target=holder)
        t.start()
        entered.wait(5)
        try:
            with locks.registration_lock(date(2025, 6, 4), timeout=0.05):
                pass
        finally:
            release.set()
            t.join()

    def test_released_on_exception(self):
        day = date(2025, 6, 5)
        with pytest.raises(RuntimeError):
            with locks.registration_lock(day):
                raise RuntimeError('boom')

        with locks.registration_lock(day, timeout=0.05):
            pass

    def test_released_key_is_forgotten(self):
        for day in (date(2025, 6, 6), date(2025, 6, 7)):
            with locks.registration_lock(day):
                assert f'simrs:reg_periksa:{day.isoformat()}' in locks._local_locks

        assert 'simrs:reg_periksa:2025-06-06' not in locks._local_locks
        assert 'simrs:reg_periksa:2025-06-07' not in locks._local_locks

    def test_timed_out_waiter_is_forgotten(self):
        day = date(2025, 6, 8)
        name = 'simrs:reg_periksa:2025-06-08'
        with locks.registration_lock(day):
            with pytest.raises(RegistryUnavailable):
                with locks.registration_lock(day, timeout=0.01):
                    pass
            assert locks._local_locks[name][1] == 1

        assert name not in locks._local_locks


class TestBackendSelection:

    def test_unknown_backend(self, settings):
        settings.REGISTRY_LOCK_BACKEND = 'zookeeper'
        with pytest.raises(ValueError, match='zookeeper'):
            with locks.patient_number_lock():
                pass

    @patch('booking.simrs.locks.redis.from_url')
    def test_redis_backend_uses_ttl_and_timeout(self, mock_from_url, settings):
        settings.REGISTRY_LOCK_BACKEND = 'redis'
        settings.REGISTRY_LOCK_TTL = 60
        lock = MagicMock()
        lock.acquire.return_value = True
        mock_from_url.return_value.lock.return_value = lock

        with locks.patient_number_lock(timeout=3):
            pass

        mock_from_url.return_value.lock.assert_called_once_with(
            'simrs:pasien', timeout=60, blocking_timeout=3,
        )
        lock.release.assert_called_once()

    @patch('booking.simrs.locks.redis.from_url')
    def test_redis_not_acquired_is_busy(self, mock_from_url, settings):
        settings.REGISTRY_LOCK_BACKEND = 'redis'
        mock_from_url.return_value.lock.return_value.acquire.return_value = False

        with pytest.raises(RegistryUnavailable) as exc_info:
            with locks.patient_number_lock():
                pass
        assert exc_info.value.code == 'REGISTRY_BUSY'

    @patch('booking.simrs.locks.redis.from_url')
    def test_redis_down_is_unavailable(self, mock_from_url, settings):
        settings.REGISTRY_LOCK_BACKEND = 'redis'
        mock_from_url.return_value.lock.return_value.acquire.side_effect = (
            redis.exceptions.ConnectionError('refused')
        )

        with pytest.raises(RegistryUnavailable) as exc_info:
            with locks.patient_number_lock():
                pass
        assert exc_info.value.code == 'LOCK_UNAVAILABLE'
