from contextlib import contextmanager

from django.db import DatabaseError

from ..exceptions import RegistryUnavailable

REGISTRY_DB = 'registry'


@contextmanager
def registry_errors():
    """Re-raise driver/ORM failures on the registry as RegistryUnavailable."""
    try:
        yield
    except DatabaseError as exc:
        raise RegistryUnavailable(
            message=f'Gagal mengakses database SIMRS: {exc}',
            detail={'error': exc.__class__.__name__},
        ) from exc
