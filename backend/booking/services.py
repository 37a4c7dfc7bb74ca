import logging
import string

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.crypto import get_random_string

from .exceptions import BlockError, ValidationError
from .lifecycle import change_status, is_terminal
from .models import Booking, Doctor
from .simrs import allocator, resolver
from .simrs.age import derive_age
from .simrs.db import REGISTRY_DB, registry_errors
from .simrs.locks import patient_number_lock
from .simrs.models import RegistryPatient
from .simrs.nik import MALE, decode_nik
from .transfer import load_booking

logger = logging.getLogger(__name__)

BOOKING_CODE_PREFIX = 'MB'
MAX_PER_PAGE = 100


def generate_booking_code(today=None):
    """MB-YYYYMMDD-XXX, XXX random base36."""
    today = today or timezone.localdate()
    suffix = get_random_string(3, allowed_chars=string.ascii_uppercase + string.digits)
    return f"{BOOKING_CODE_PREFIX}-{today.strftime('%Y%m%d')}-{suffix}"


def check_booking_duplicate(telepon, tanggal, dokter):
    """
    Same phone + same date + same doctor with a live booking → block (409).
    Cancelled bookings do not count.
    """
    existing = (
        Booking.objects
        .filter(telepon=telepon, tanggal=tanggal, dokter=dokter)
        .exclude(status=Booking.Status.CANCELLED)
        .first()
    )
    if existing is not None:
        raise BlockError(
            message='Anda sudah memiliki booking pada tanggal dan dokter yang sama',
            code='DUPLICATE_BOOKING',
            detail={'kode_booking': existing.kode_booking},
        )


def _active_doctor(dokter_id):
    try:
        return Doctor.objects.get(id=dokter_id, is_active=True)
    except (Doctor.DoesNotExist, DjangoValidationError):
        raise ValidationError(
            message='Dokter tidak ditemukan atau tidak aktif',
            code='DOCTOR_NOT_AVAILABLE',
            detail={'dokter_id': dokter_id},
        )


def create_booking(data):
    """
    Public booking submission. Takes a BookingData, returns the new Booking.
    Raises ValidationError / BlockError; the view does not handle them.
    """
    dokter = _active_doctor(data.dokter_id)
    check_booking_duplicate(data.telepon, data.tanggal, dokter)

    kode = generate_booking_code()
    while Booking.objects.filter(kode_booking=kode).exists():
        kode = generate_booking_code()

    booking = Booking.objects.create(
        kode_booking=kode,
        nama_pasien=data.nama_pasien,
        nik=data.nik,
        alamat=data.alamat,
        telepon=data.telepon,
        email=data.email,
        dokter=dokter,
        tanggal=data.tanggal,
        waktu=data.waktu,
        keluhan=data.keluhan,
        kd_pj=data.kd_pj or settings.SIMRS_DEFAULT_KD_PJ,
    )
    logger.info("[Booking] created %s dokter=%s tanggal=%s", booking.kode_booking, dokter.nama, booking.tanggal)
    return booking


def get_booking_detail(booking_id):
    """Raises PreconditionError(BOOKING_NOT_FOUND, 404) if missing."""
    return load_booking(booking_id)


def list_bookings(status=None, tanggal=None, dokter_id=None, page=1, per_page=10):
    """Returns (bookings_page, total)."""
    qs = Booking.objects.select_related('dokter')
    if status:
        qs = qs.filter(status=status.upper())
    try:
        if tanggal:
            qs = qs.filter(tanggal=tanggal)
        if dokter_id:
            qs = qs.filter(dokter_id=dokter_id)
    except DjangoValidationError:
        raise ValidationError(
            message='Filter tanggal atau dokter tidak valid',
            code='INVALID_FILTER',
            detail={'tanggal': str(tanggal) if tanggal else None, 'dokter_id': dokter_id},
        )

    page = max(1, page)
    per_page = min(MAX_PER_PAGE, max(1, per_page))
    offset = (page - 1) * per_page

    total = qs.count()
    return qs.order_by('-tanggal', '-waktu')[offset:offset + per_page], total


@transaction.atomic
def update_booking(booking_id, data):
    """
    Admin edit. Status goes through the lifecycle; schedule and identity
    fields are frozen once the booking is COMPLETED or CANCELLED.
    """
    booking = load_booking(booking_id)
    changes = data.changed_fields()
    status = changes.pop('status', None)

    locked = {k: v for k, v in changes.items() if k != 'catatan_admin'}
    if locked and is_terminal(booking.status):
        raise BlockError(
            message=f"Booking dengan status {booking.status} tidak dapat diubah",
            code='BOOKING_LOCKED',
            detail={'fields': sorted(locked)},
        )

    if changes:
        for field, value in changes.items():
            setattr(booking, field, value)
        booking.save(update_fields=[*changes, 'updated_at'])

    if status is not None:
        change_status(booking, status)

    return booking


# ── Registry patient ───────────────────────────────────────────────────────

def check_registry_patient(booking_id):
    """Does the booking's NIK already exist in SIMRS?"""
    booking = load_booking(booking_id)
    if not booking.nik:
        return {'exists': False, 'no_rkm_medis': None, 'nm_pasien': None, 'message': 'NIK belum diisi'}

    with registry_errors():
        patient = resolver.find_patient_by_nik(booking.nik)

    return {
        'exists': patient is not None,
        'no_rkm_medis': patient.no_rkm_medis if patient else None,
        'nm_pasien': patient.nm_pasien if patient else None,
    }


def register_registry_patient(booking_id, data):
    """
    Create the SIMRS `pasien` row for a booking's patient.

    The explicit counterpart of the transfer's PATIENT_NOT_REGISTERED stop.
    Returns (patient, created). An existing NIK is returned, never duplicated.
    """
    booking = load_booking(booking_id)
    nik = data.no_ktp
    today = timezone.localdate()

    with registry_errors():
        existing = resolver.find_patient_by_nik(nik)
    if existing is not None:
        return existing, False

    decoded = decode_nik(nik, today=today)
    tgl_lahir = data.tgl_lahir or (decoded.birth_date if decoded else None)
    if tgl_lahir is None:
        raise ValidationError(
            message='Tanggal lahir tidak dapat ditentukan dari NIK, isi tanggal lahir.',
            code='INVALID_NIK',
            detail={'no_ktp': nik},
        )
    try:
        umur = derive_age(tgl_lahir, today).display
    except ValueError:
        raise ValidationError(
            message='Tanggal lahir tidak boleh setelah hari ini.',
            code='INVALID_BIRTH_DATE',
            detail={'tgl_lahir': tgl_lahir.isoformat()},
        )

    nm_pasien = (data.nm_pasien or booking.nama_pasien).upper()
    alamat = data.alamat or booking.alamat or '-'

    with patient_number_lock(), registry_errors(), transaction.atomic(using=REGISTRY_DB):
        # NIK may have been registered while we waited for the lock
        existing = resolver.find_patient_by_nik(nik)
        if existing is not None:
            return existing, False

        patient = RegistryPatient.objects.using(REGISTRY_DB).create(
            no_rkm_medis=allocator.next_no_rkm_medis(),
            nm_pasien=nm_pasien,
            no_ktp=nik,
            jk=data.jk or (decoded.sex if decoded else MALE),
            tmp_lahir=data.tmp_lahir or '-',
            tgl_lahir=tgl_lahir,
            nm_ibu=data.nm_ibu or '-',
            alamat=alamat,
            gol_darah=data.gol_darah or '-',
            pekerjaan=data.pekerjaan or '-',
            stts_nikah=data.stts_nikah or 'BELUM MENIKAH',
            agama=data.agama or 'ISLAM',
            tgl_daftar=today,
            no_tlp=data.no_tlp or booking.telepon or '-',
            umur=umur,
            pnd=data.pnd or '-',
            keluarga=data.keluarga or 'DIRI SENDIRI',
            namakeluarga=(data.namakeluarga or nm_pasien).upper(),
            kd_pj=data.kd_pj or booking.kd_pj or settings.SIMRS_DEFAULT_KD_PJ,
            alamatpj=alamat,
        )

    logger.info("[Registry] patient registered no_rkm_medis=%s booking=%s",
                patient.no_rkm_medis, booking.kode_booking)
    return patient, True
