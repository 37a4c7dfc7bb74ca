"""
Booking → SIMRS transfer.

Turns a CONFIRMED booking into one reg_periksa row in the registry, then
completes the booking. The two stores share no transaction, so the order of
work is fixed:

  1. preconditions on the booking                      (no I/O on the registry)
  2. patient lookup by NIK                              (registry, read)
  3. under the per-day lock, in one registry transaction:
       duplicate check → allocate no_reg/no_rawat → age & Lama/Baru → INSERT
  4. still under the lock: booking → COMPLETED + no_rawat (primary store)

A failure in 1–3 leaves both stores untouched. A failure in 4 leaves the
registry ahead of the booking: the caller gets ReconciliationRequired, a
reconciliation job is queued, and a retried transfer hits the duplicate check
and reports the existing no_rawat instead of registering twice.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, time, timedelta

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from .exceptions import BlockError, PreconditionError, ReconciliationRequired
from .lifecycle import mark_transferred
from .models import Booking
from .simrs import allocator, resolver
from .simrs.age import derive_age, visit_status
from .simrs.db import REGISTRY_DB, registry_errors
from .simrs.locks import registration_lock
from .simrs.models import RegistryRegistration
from .simrs.nik import decode_nik

logger = logging.getLogger(__name__)

RESPONSIBLE_SELF = 'DIRI SENDIRI'
OUTPATIENT = 'Ralan'

_TIME_SLOT_RE = re.compile(r'^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?')


@dataclass
class TransferResult:
    no_rawat: str
    no_reg: str
    no_rkm_medis: str
    nama_pasien: str


# ── Preconditions ──────────────────────────────────────────────────────────

def load_booking(booking_id):
    try:
        return Booking.objects.select_related('dokter').get(id=booking_id)
    except Booking.DoesNotExist:
        raise PreconditionError(
            message='Booking tidak ditemukan',
            code='BOOKING_NOT_FOUND',
            detail={'booking_id': str(booking_id)},
            http_status=404,
        )


def parse_time_slot(waktu) -> time | None:
    """'08:30', '08:30:00' or '08:30 - 09:00' → time(8, 30). None if unreadable."""
    match = _TIME_SLOT_RE.match(waktu or '')
    if not match:
        return None
    hour, minute, second = (int(g) if g else 0 for g in match.groups())
    try:
        return time(hour, minute, second)
    except ValueError:
        return None


def check_transfer_preconditions(booking):
    """
    Validate the booking itself, in order; the first failure wins.

    Raises:
        PreconditionError: BOOKING_NOT_CONFIRMED / NIK_MISSING /
                           DOCTOR_NOT_MAPPED / DEPARTMENT_NOT_MAPPED /
                           INVALID_TIME_SLOT
    """
    if booking.status != Booking.Status.CONFIRMED:
        raise PreconditionError(
            message='Hanya booking dengan status CONFIRMED yang dapat ditransfer',
            code='BOOKING_NOT_CONFIRMED',
            detail={'current_status': booking.status},
        )

    if not (booking.nik or '').strip():
        raise PreconditionError(
            message='NIK pasien belum diisi, tidak dapat transfer ke SIMRS',
            code='NIK_MISSING',
        )

    doctor = booking.dokter
    if not doctor.kd_dokter_simrs:
        raise PreconditionError(
            message='Dokter belum dimapping ke SIMRS. Mapping dokter terlebih dahulu.',
            code='DOCTOR_NOT_MAPPED',
            detail={'dokter_id': str(doctor.id)},
        )

    if not doctor.kd_poli:
        raise PreconditionError(
            message='Kode poliklinik belum diisi',
            code='DEPARTMENT_NOT_MAPPED',
            detail={'dokter_id': str(doctor.id)},
        )

    if parse_time_slot(booking.waktu) is None:
        raise PreconditionError(
            message=f"Jam booking tidak valid: {booking.waktu!r}",
            code='INVALID_TIME_SLOT',
        )


# ── Registry side ──────────────────────────────────────────────────────────

def resolve_patient(nik):
    """Hard stop when the patient is not in SIMRS; we never create one here."""
    with registry_errors():
        patient = resolver.find_patient_by_nik(nik)

    if patient is None:
        raise BlockError(
            message=(
                f'Pasien dengan NIK {nik} belum terdaftar di SIMRS. Gunakan tombol '
                f'"Daftarkan ke SIMRS" di halaman detail booking untuk mendaftarkan '
                f'pasien terlebih dahulu.'
            ),
            code='PATIENT_NOT_REGISTERED',
            detail={'nik': nik},
        )
    return patient


def resolve_birth_date(patient, nik, today: date) -> date:
    """Registry birth date, or the one encoded in the NIK when SIMRS has none."""
    if patient.tgl_lahir:
        return patient.tgl_lahir

    info = decode_nik(nik, today=today)
    if info is None:
        raise BlockError(
            message=f"Tanggal lahir pasien {patient.no_rkm_medis} tidak diketahui",
            code='BIRTH_DATE_UNKNOWN',
            detail={'no_rkm_medis': patient.no_rkm_medis},
        )
    logger.info("[Transfer] no_rkm_medis=%s has no tgl_lahir, using NIK date %s",
                patient.no_rkm_medis, info.birth_date)
    return info.birth_date


def _raise_duplicate(booking, existing):
    raise BlockError(
        message=f"Pasien sudah terdaftar pada tanggal tersebut dengan no_rawat: {existing.no_rawat}",
        code='DUPLICATE_REGISTRATION',
        detail={
            'no_rawat': existing.no_rawat,
            'no_rkm_medis': existing.no_rkm_medis,
            'booking_status': booking.status,
            # CONFIRMED + existing visit = an earlier transfer lost its booking update
            'reconcilable': booking.status == Booking.Status.CONFIRMED,
        },
    )


def _insert_registration(booking, patient, birth_date) -> RegistryRegistration:
    """Duplicate check, allocation and INSERT. Caller holds registration_lock."""
    doctor = booking.dokter
    reg_date = booking.tanggal

    existing = resolver.find_registration(patient.no_rkm_medis, reg_date, doctor.kd_poli)
    if existing is not None:
        _raise_duplicate(booking, existing)

    no_rawat = allocator.next_no_rawat(reg_date)
    no_reg = allocator.next_no_reg(reg_date)

    try:
        age = derive_age(birth_date, reg_date)
    except ValueError:
        raise BlockError(
            message=f"Tanggal lahir pasien ({birth_date}) setelah tanggal booking ({reg_date})",
            code='INVALID_BIRTH_DATE',
            detail={'tgl_lahir': birth_date.isoformat(), 'tanggal': reg_date.isoformat()},
        )

    stts_daftar = visit_status(resolver.has_prior_registration(patient.no_rkm_medis))
    status_poli = visit_status(
        resolver.has_prior_department_registration(patient.no_rkm_medis, doctor.kd_poli)
    )

    return RegistryRegistration.objects.using(REGISTRY_DB).create(
        no_reg=no_reg,
        no_rawat=no_rawat,
        tgl_registrasi=reg_date,
        jam_reg=parse_time_slot(booking.waktu),
        kd_dokter=doctor.kd_dokter_simrs,
        no_rkm_medis=patient.no_rkm_medis,
        kd_poli=doctor.kd_poli,
        p_jawab=patient.nm_pasien,
        almt_pj=patient.alamat or '',
        hubunganpj=RESPONSIBLE_SELF,
        biaya_reg=0,
        stts='Belum',
        stts_daftar=stts_daftar,
        status_lanjut=OUTPATIENT,
        kd_pj=booking.kd_pj or settings.SIMRS_DEFAULT_KD_PJ,
        umurdaftar=age.value,
        sttsumur=age.unit,
        status_bayar='Belum Bayar',
        status_poli=status_poli,
    )


def _write_registration(booking, patient, birth_date) -> RegistryRegistration:
    with registry_errors():
        try:
            with transaction.atomic(using=REGISTRY_DB):
                return _insert_registration(booking, patient, birth_date)
        except IntegrityError as exc:
            # Only reachable if another writer bypassed the lock (e.g. SIMRS desktop)
            raise BlockError(
                message='No. rawat yang dialokasikan sudah dipakai, silakan ulangi transfer.',
                code='VISIT_ID_CONFLICT',
                detail={'error': str(exc)},
            ) from exc


def _complete_booking(booking, registration):
    from .tasks import reconcile_booking_transfer

    try:
        mark_transferred(booking.id, registration.no_rawat)
    except (DatabaseError, PreconditionError) as exc:
        logger.error(
            "[Transfer] booking=%s registered as %s in SIMRS but booking update failed: %s",
            booking.kode_booking, registration.no_rawat, exc,
        )
        try:
            reconcile_booking_transfer.delay(str(booking.id))
            queued = True
        except Exception:
            # broker down; the beat sweep or POST /reconcile/ still picks it up
            logger.exception("[Transfer] booking=%s reconcile not queued", booking.kode_booking)
            queued = False

        raise ReconciliationRequired(
            message=(
                f"Pasien sudah terdaftar di SIMRS dengan no_rawat {registration.no_rawat}, "
                f"tetapi status booking gagal diperbarui. "
                + ("Rekonsiliasi dijadwalkan." if queued else "Lakukan rekonsiliasi manual.")
            ),
            detail={
                'no_rawat': registration.no_rawat,
                'no_reg': registration.no_reg,
                'booking_id': str(booking.id),
                'reconcile_queued': queued,
            },
        ) from exc


# ── Entry points ───────────────────────────────────────────────────────────

def transfer_booking(booking_id) -> TransferResult:
    """
    Register a CONFIRMED booking as an outpatient visit in SIMRS.

    Raises PreconditionError / BlockError / AllocationError /
    RegistryUnavailable / ReconciliationRequired; the view layer does not
    handle them, exception_handler formats the response.
    """
    today = timezone.localdate()

    booking = load_booking(booking_id)
    logger.info("[Transfer] start booking=%s status=%s tanggal=%s",
                booking.kode_booking, booking.status, booking.tanggal)

    check_transfer_preconditions(booking)

    nik = booking.nik.strip()
    patient = resolve_patient(nik)
    birth_date = resolve_birth_date(patient, nik, today)

    with registration_lock(booking.tanggal):
        registration = _write_registration(booking, patient, birth_date)
        logger.info("[Transfer] booking=%s → no_rawat=%s no_reg=%s no_rkm_medis=%s",
                    booking.kode_booking, registration.no_rawat, registration.no_reg,
                    patient.no_rkm_medis)
        _complete_booking(booking, registration)

    return TransferResult(
        no_rawat=registration.no_rawat,
        no_reg=registration.no_reg,
        no_rkm_medis=patient.no_rkm_medis,
        nama_pasien=patient.nm_pasien,
    )


def reconcile_booking(booking_id):
    """
    Bring a booking in line with a registration that already exists in SIMRS.

    - COMPLETED with no_rawat          → returned unchanged
    - CONFIRMED + visit found in SIMRS → COMPLETED with that no_rawat

    Raises:
        PreconditionError: booking missing / not CONFIRMED / not mapped
        BlockError:        NOTHING_TO_RECONCILE, PATIENT_NOT_REGISTERED
    """
    booking = load_booking(booking_id)
    if booking.status == Booking.Status.COMPLETED and booking.no_rawat:
        return booking

    check_transfer_preconditions(booking)
    patient = resolve_patient(booking.nik.strip())

    with registry_errors():
        existing = resolver.find_registration(patient.no_rkm_medis, booking.tanggal, booking.dokter.kd_poli)

    if existing is None:
        raise BlockError(
            message='Tidak ada pendaftaran SIMRS untuk booking ini, lakukan transfer.',
            code='NOTHING_TO_RECONCILE',
            detail={'booking_id': str(booking.id)},
        )

    logger.info("[Reconcile] booking=%s ← no_rawat=%s", booking.kode_booking, existing.no_rawat)
    return mark_transferred(booking.id, existing.no_rawat)


def find_reconcilable_bookings(today: date | None = None, window_days: int | None = None):
    """
    CONFIRMED bookings within `window_days` of today that could already sit
    in SIMRS, newest first.

    Older CONFIRMED bookings are no-shows that were never transferred; they
    stay CONFIRMED forever and are not swept.
    """
    today = today or timezone.localdate()
    if window_days is None:
        window_days = settings.RECONCILE_WINDOW_DAYS
    window = timedelta(days=window_days)
    return (
        Booking.objects
        .select_related('dokter')
        .filter(
            status=Booking.Status.CONFIRMED,
            tanggal__gte=today - window,
            tanggal__lte=today + window,
            nik__isnull=False,
            dokter__kd_dokter_simrs__isnull=False,
            dokter__kd_poli__isnull=False,
        )
        .exclude(nik='')
        .order_by('-tanggal', '-created_at')
    )
