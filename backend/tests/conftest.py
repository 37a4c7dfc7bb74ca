"""
Shared fixtures for all tests.

factory-boy factories live here so both unit/ and integration/ can import them.
The SIMRS models are unmanaged, so their tables are created on the registry
test database once per session.
"""
import pytest
from datetime import date, time
from django.contrib.auth import get_user_model
from django.db import connections
from django.test import Client

import factory
from booking.models import Booking, Doctor
from booking.simrs.db import REGISTRY_DB
from booking.simrs.models import RegistryPatient, RegistryRegistration


REGISTRY_MODELS = (RegistryPatient, RegistryRegistration)


@pytest.fixture(scope='session')
def django_db_setup(django_db_setup, django_db_blocker):
    with django_db_blocker.unblock():
        connection = connections[REGISTRY_DB]
        existing = connection.introspection.table_names()
        with connection.schema_editor() as editor:
            for model in REGISTRY_MODELS:
                if model._meta.db_table not in existing:
                    editor.create_model(model)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class DoctorFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Doctor

    nama = factory.Sequence(lambda n: f'dr. Dokter {n}')
    spesialis = 'Mata'
    kd_dokter_simrs = factory.Sequence(lambda n: f'D{n:04d}')
    kd_poli = 'MATA'


class BookingFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Booking

    kode_booking = factory.Sequence(lambda n: f'MB-20250601-{n:03d}')
    nama_pasien = 'Siti Aminah'
    nik = '3201234501029901'
    alamat = 'Jl. Merdeka 1'
    telepon = factory.Sequence(lambda n: f'0812{n:08d}')
    dokter = factory.SubFactory(DoctorFactory)
    tanggal = date(2025, 6, 1)
    waktu = '08:30'
    status = Booking.Status.CONFIRMED


class RegistryPatientFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = RegistryPatient
        database = REGISTRY_DB

    no_rkm_medis = factory.Sequence(lambda n: f'{n + 1:06d}')
    nm_pasien = 'SITI AMINAH'
    no_ktp = '3201234501029901'
    jk = 'P'
    tgl_lahir = date(2002, 1, 5)
    alamat = 'JL. MERDEKA 1'


class RegistryRegistrationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = RegistryRegistration
        database = REGISTRY_DB

    no_reg = '001'
    no_rawat = factory.Sequence(lambda n: f'2025/01/01/{n + 1:06d}')
    tgl_registrasi = date(2025, 1, 1)
    jam_reg = time(8, 0)
    kd_dokter = 'D0001'
    no_rkm_medis = '000001'
    kd_poli = 'MATA'
    p_jawab = 'SITI AMINAH'
    almt_pj = '-'
    hubunganpj = 'DIRI SENDIRI'
    stts_daftar = 'Baru'
    kd_pj = 'UMU'
    umurdaftar = 23
    sttsumur = 'Th'
    status_poli = 'Baru'


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def api_client():
    """Django test client for integration tests."""
    return Client()


@pytest.fixture
def admin_client(db):
    """Test client logged in as a staff user."""
    user = get_user_model().objects.create_user(
        username='admin', password='admin', is_staff=True,
    )
    client = Client()
    client.force_login(user)
    return client


@pytest.fixture
def sample_booking_payload():
    """Minimal valid payload for POST /api/bookings/ (dokter_id filled by the test)."""
    return {
        'nama_pasien': 'Budi Santoso',
        'telepon': '0812-3456-7890',
        'tanggal': '2025-06-01',
        'waktu': '09:00',
        'nik': '3201230101900001',
        'keluhan': 'Mata merah',
    }
