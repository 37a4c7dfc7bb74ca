"""
Standard input structures. The service layer only consumes these, never the
raw request body.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass
class BookingData:
    """Public booking form submission."""

    nama_pasien: str
    telepon: str
    tanggal: date
    waktu: str
    dokter_id: str
    email: str | None = None
    keluhan: str | None = None
    nik: str | None = None
    alamat: str | None = None
    kd_pj: str | None = None
    raw_payload: Any = field(default=None, repr=False)


@dataclass
class BookingUpdateData:
    """Admin edit. Only the fields present in the request are set (not None)."""

    status: str | None = None
    catatan_admin: str | None = None
    tanggal: date | None = None
    waktu: str | None = None
    nik: str | None = None
    alamat: str | None = None

    def changed_fields(self) -> dict[str, Any]:
        return {name: value for name, value in self.__dict__.items() if value is not None}


@dataclass
class PatientRegistrationData:
    """'Daftarkan ke SIMRS' form. Empty fields fall back to booking/NIK/defaults."""

    no_ktp: str
    nm_pasien: str = ''
    jk: str = ''
    tmp_lahir: str = ''
    tgl_lahir: date | None = None
    nm_ibu: str = ''
    alamat: str = ''
    gol_darah: str = ''
    pekerjaan: str = ''
    stts_nikah: str = ''
    agama: str = ''
    no_tlp: str = ''
    pnd: str = ''
    keluarga: str = ''
    namakeluarga: str = ''
    kd_pj: str = ''
