"""
Unit tests for the booking service layer.

Covers: create_booking (+ duplicate check), list_bookings, update_booking,
check_registry_patient, register_registry_patient.
"""
import re
import uuid
import pytest
from datetime import date

from booking.exceptions import BlockError, PreconditionError, ValidationError
from booking.intake.types import BookingData, BookingUpdateData, PatientRegistrationData
from booking.models import Booking
from booking.services import (
    check_registry_patient,
    create_booking,
    generate_booking_code,
    get_booking_detail,
    list_bookings,
    register_registry_patient,
    update_booking,
)
from booking.simrs.models import RegistryPatient
from tests.conftest import BookingFactory, DoctorFactory, RegistryPatientFactory

NIK = '3201234501029901'


def booking_data(dokter, **overrides):
    fields = dict(
        nama_pasien='Budi Santoso',
        telepon='081234567890',
        tanggal=date(2025, 6, 1),
        waktu='09:00',
        dokter_id=str(dokter.id),
    )
    fields.update(overrides)
    return BookingData(**fields)


class TestGenerateBookingCode:

    def test_format(self):
        code = generate_booking_code(today=date(2025, 6, 1))
        assert re.fullmatch(r'MB-20250601-[A-Z0-9]{3}', code)


@pytest.mark.django_db
class TestCreateBooking:

    def test_creates_pending_booking(self, settings):
        settings.SIMRS_DEFAULT_KD_PJ = 'UMU'
        dokter = DoctorFactory()
        booking = create_booking(booking_data(dokter))

        assert booking.status == Booking.Status.PENDING
        assert booking.kode_booking.startswith('MB-')
        assert booking.kd_pj == 'UMU'
        assert booking.no_rawat is None

    def test_inactive_doctor(self):
        dokter = DoctorFactory(is_active=False)
        with pytest.raises(ValidationError) as exc_info:
            create_booking(booking_data(dokter))
        assert exc_info.value.code == 'DOCTOR_NOT_AVAILABLE'

    def test_malformed_doctor_id(self):
        dokter = DoctorFactory()
        with pytest.raises(ValidationError) as exc_info:
            create_booking(booking_data(dokter, dokter_id='not-a-uuid'))
        assert exc_info.value.code == 'DOCTOR_NOT_AVAILABLE'

    def test_same_phone_day_doctor_blocked(self):
        dokter = DoctorFactory()
        first = create_booking(booking_data(dokter))

        with pytest.raises(BlockError) as exc_info:
            create_booking(booking_data(dokter))

        assert exc_info.value.code == 'DUPLICATE_BOOKING'
        assert exc_info.value.detail == {'kode_booking': first.kode_booking}

    def test_cancelled_booking_does_not_count(self):
        dokter = DoctorFactory()
        first = create_booking(booking_data(dokter))
        first.status = Booking.Status.CANCELLED
        first.save()

        second = create_booking(booking_data(dokter))
        assert second.id != first.id


@pytest.mark.django_db
class TestGetAndListBookings:

    def test_missing_booking(self):
        with pytest.raises(PreconditionError) as exc_info:
            get_booking_detail(uuid.uuid4())
        assert exc_info.value.http_status == 404

    def test_filters_and_paginates(self):
        dokter = DoctorFactory()
        for _ in range(3):
            BookingFactory(dokter=dokter, status=Booking.Status.PENDING)
        BookingFactory(dokter=dokter, status=Booking.Status.CONFIRMED)
        BookingFactory(status=Booking.Status.PENDING)

        page, total = list_bookings(status='pending', dokter_id=dokter.id, page=1, per_page=2)

        assert total == 3
        assert len(list(page)) == 2

    def test_filter_by_date(self):
        BookingFactory(tanggal=date(2025, 6, 1))
        BookingFactory(tanggal=date(2025, 6, 2))

        _, total = list_bookings(tanggal=date(2025, 6, 2))
        assert total == 1

    def test_bad_filter(self):
        with pytest.raises(ValidationError) as exc_info:
            list_bookings(tanggal='02/06/2025')
        assert exc_info.value.code == 'INVALID_FILTER'


@pytest.mark.django_db
class TestUpdateBooking:

    def test_confirm_and_note(self):
        booking = BookingFactory(status=Booking.Status.PENDING)
        updated = update_booking(booking.id, BookingUpdateData(status='CONFIRMED', catatan_admin='ok'))

        assert updated.status == Booking.Status.CONFIRMED
        booking.refresh_from_db()
        assert booking.catatan_admin == 'ok'

    def test_invalid_transition(self):
        booking = BookingFactory(status=Booking.Status.PENDING)
        with pytest.raises(BlockError) as exc_info:
            update_booking(booking.id, BookingUpdateData(status='COMPLETED'))
        assert exc_info.value.code == 'INVALID_STATUS_TRANSITION'

    def test_terminal_booking_locked(self):
        booking = BookingFactory(status=Booking.Status.CANCELLED)
        with pytest.raises(BlockError) as exc_info:
            update_booking(booking.id, BookingUpdateData(tanggal=date(2025, 7, 1)))
        assert exc_info.value.code == 'BOOKING_LOCKED'

    def test_terminal_booking_note_still_editable(self):
        booking = BookingFactory(status=Booking.Status.COMPLETED)
        update_booking(booking.id, BookingUpdateData(catatan_admin='sudah datang'))
        booking.refresh_from_db()
        assert booking.catatan_admin == 'sudah datang'


@pytest.mark.django_db(databases=['default', 'registry'])
class TestRegistryPatient:

    def test_check_existing(self):
        RegistryPatientFactory(no_rkm_medis='000123', no_ktp=NIK)
        booking = BookingFactory(nik=NIK)

        result = check_registry_patient(booking.id)

        assert result['exists'] is True
        assert result['no_rkm_medis'] == '000123'

    def test_check_missing(self):
        booking = BookingFactory(nik=NIK)
        assert check_registry_patient(booking.id)['exists'] is False

    def test_check_without_nik(self):
        booking = BookingFactory(nik=None)
        assert check_registry_patient(booking.id)['exists'] is False

    def test_register_from_nik(self):
        RegistryPatientFactory(no_rkm_medis='000041', no_ktp='3201230101900001')
        booking = BookingFactory(nik=NIK, nama_pasien='Siti Aminah')

        patient, created = register_registry_patient(booking.id, PatientRegistrationData(no_ktp=NIK))

        assert created is True
        assert patient.no_rkm_medis == '000042'
        stored = RegistryPatient.objects.using('registry').get(no_rkm_medis='000042')
        assert stored.nm_pasien == 'SITI AMINAH'
        assert stored.jk == 'P'
        assert stored.tgl_lahir == date(2002, 1, 5)
        assert stored.umur.endswith('Th')

    def test_register_existing_nik_not_duplicated(self):
        existing = RegistryPatientFactory(no_ktp=NIK)
        booking = BookingFactory(nik=NIK)

        patient, created = register_registry_patient(booking.id, PatientRegistrationData(no_ktp=NIK))

        assert created is False
        assert patient.no_rkm_medis == existing.no_rkm_medis
        assert RegistryPatient.objects.using('registry').count() == 1

    def test_undecodable_nik_needs_birth_date(self):
        booking = BookingFactory()
        with pytest.raises(ValidationError) as exc_info:
            register_registry_patient(booking.id, PatientRegistrationData(no_ktp='3201233202990001'))
        assert exc_info.value.code == 'INVALID_NIK'

    def test_form_values_win_over_nik(self):
        booking = BookingFactory()
        patient, _ = register_registry_patient(booking.id, PatientRegistrationData(
            no_ktp='3201233202990001', jk='L', tgl_lahir=date(1999, 2, 1), nm_pasien='Ani',
        ))
        assert patient.jk == 'L'
        assert patient.tgl_lahir == date(1999, 2, 1)
        assert patient.nm_pasien == 'ANI'
