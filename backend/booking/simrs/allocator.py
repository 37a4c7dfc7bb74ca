"""
Sequential identifiers for the registry.

The registry has no sequence we can use, so every identifier is computed as
"greatest existing value + 1". Two allocations for the same scope must never
run at the same time: callers hold the matching lock from locks.py
(registration_lock for no_rawat/no_reg, patient_number_lock for no_rkm_medis)
from the read here until the row is inserted.

  no_rawat      YYYY/MM/DD/NNNNNN   per registration date
  no_reg        NNN                 per registration date
  no_rkm_medis  NNNNNN              global
"""

import logging
from datetime import date

from ..exceptions import AllocationError
from .models import RegistryPatient, RegistryRegistration

logger = logging.getLogger(__name__)

NO_RAWAT_DIGITS = 6
NO_REG_DIGITS = 3
NO_RKM_MEDIS_DIGITS = 6


def _increment(last: str | None, width: int, field: str) -> str:
    """Next zero-padded value after `last`; '1' padded when there is none."""
    if last is None:
        return str(1).zfill(width)

    if not last.isdigit():
        raise AllocationError(
            message=f"Nilai {field} terakhir di SIMRS tidak valid: {last!r}",
            code='MALFORMED_SEQUENCE',
            detail={'field': field, 'value': last},
        )

    nxt = int(last) + 1
    if nxt >= 10 ** width:
        raise AllocationError(
            message=f"Nomor {field} sudah mencapai batas {width} digit",
            code='SEQUENCE_EXHAUSTED',
            detail={'field': field, 'value': last},
        )
    return str(nxt).zfill(width)


def no_rawat_prefix(reg_date: date) -> str:
    return reg_date.strftime('%Y/%m/%d')


def next_no_rawat(reg_date: date) -> str:
    prefix = no_rawat_prefix(reg_date)
    last = (
        RegistryRegistration.objects
        .filter(no_rawat__startswith=f"{prefix}/")
        .order_by('-no_rawat')
        .values_list('no_rawat', flat=True)
        .first()
    )
    counter = last[len(prefix) + 1:] if last is not None else None
    if counter is not None and len(counter) != NO_RAWAT_DIGITS:
        raise AllocationError(
            message=f"Nilai no_rawat terakhir di SIMRS tidak valid: {last!r}",
            code='MALFORMED_SEQUENCE',
            detail={'field': 'no_rawat', 'value': last},
        )

    no_rawat = f"{prefix}/{_increment(counter, NO_RAWAT_DIGITS, 'no_rawat')}"
    logger.debug("[Allocator] no_rawat last=%s next=%s", last, no_rawat)
    return no_rawat


def next_no_reg(reg_date: date) -> str:
    last = (
        RegistryRegistration.objects
        .filter(tgl_registrasi=reg_date)
        .exclude(no_reg='')
        .order_by('-no_reg')
        .values_list('no_reg', flat=True)
        .first()
    )
    no_reg = _increment(last, NO_REG_DIGITS, 'no_reg')
    logger.debug("[Allocator] no_reg date=%s last=%s next=%s", reg_date, last, no_reg)
    return no_reg


def next_no_rkm_medis() -> str:
    last = (
        RegistryPatient.objects
        .order_by('-no_rkm_medis')
        .values_list('no_rkm_medis', flat=True)
        .first()
    )
    return _increment(last, NO_RKM_MEDIS_DIGITS, 'no_rkm_medis')
