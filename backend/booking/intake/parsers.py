"""
Request payload parsers: parse → transform → validate.

Each parser turns request.data (already JSON-decoded by DRF) into one of the
dataclasses in types.py, or raises ValidationError listing every bad field.
"""

import re
from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from ..exceptions import ValidationError
from .types import BookingData, BookingUpdateData, PatientRegistrationData

NIK_RE = re.compile(r"^\d{16}$")
PHONE_RE = re.compile(r"^\+?\d{8,15}$")
TIME_RE = re.compile(r"^\d{1,2}:\d{2}")
SEX_VALUES = {'L', 'P'}


def _text(raw: dict, key: str) -> str:
    value = raw.get(key)
    return str(value).strip() if value is not None else ''


def _optional(raw: dict, key: str) -> str | None:
    return _text(raw, key) or None


def _parse_date(value, field_name: str, errors: list) -> date | None:
    if value in (None, ''):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        errors.append({"field": field_name, "message": "Tanggal harus berformat YYYY-MM-DD."})
        return None


class BasePayloadParser(ABC):

    def __init__(self, raw: Any):
        self._raw = raw
        self._errors: list[dict] = []

    def parse(self) -> dict:
        if not isinstance(self._raw, dict):
            raise ValidationError(
                message="Request body must be a JSON object.",
                code="VALIDATION_ERROR",
            )
        self._parsed = self._raw
        return self._parsed

    @abstractmethod
    def transform(self):
        """self._parsed → dataclass. Field-level problems go to self._errors."""

    def validate(self, data) -> None:
        """Subclasses append to self._errors, then call super()."""
        if self._errors:
            raise ValidationError(
                message="Request validation failed.",
                code="VALIDATION_ERROR",
                detail={"errors": self._errors},
            )

    def process(self):
        self.parse()
        data = self.transform()
        self.validate(data)
        return data


class BookingPayloadParser(BasePayloadParser):
    REQUIRED = ('nama_pasien', 'telepon', 'tanggal', 'waktu', 'dokter_id')

    def transform(self) -> BookingData:
        raw = self._parsed
        for key in self.REQUIRED:
            if not _text(raw, key):
                self._errors.append({"field": key, "message": "Wajib diisi."})

        return BookingData(
            nama_pasien=_text(raw, 'nama_pasien'),
            telepon=re.sub(r"[\s\-]", "", _text(raw, 'telepon')),
            tanggal=_parse_date(raw.get('tanggal'), 'tanggal', self._errors),
            waktu=_text(raw, 'waktu'),
            dokter_id=_text(raw, 'dokter_id'),
            email=_optional(raw, 'email'),
            keluhan=_optional(raw, 'keluhan'),
            nik=_optional(raw, 'nik'),
            alamat=_optional(raw, 'alamat'),
            kd_pj=_optional(raw, 'kd_pj'),
            raw_payload=raw,
        )

    def validate(self, data: BookingData) -> None:
        if data.telepon and not PHONE_RE.match(data.telepon):
            self._errors.append({"field": "telepon", "message": "Nomor telepon tidak valid."})
        if data.waktu and not TIME_RE.match(data.waktu):
            self._errors.append({"field": "waktu", "message": "Jam harus berformat HH:MM."})
        if data.nik and not NIK_RE.match(data.nik):
            self._errors.append({"field": "nik", "message": "NIK harus 16 digit angka."})
        super().validate(data)


class BookingUpdateParser(BasePayloadParser):

    def transform(self) -> BookingUpdateData:
        raw = self._parsed
        return BookingUpdateData(
            status=_text(raw, 'status').upper() or None,
            catatan_admin=_text(raw, 'catatan_admin') if 'catatan_admin' in raw else None,
            tanggal=_parse_date(raw.get('tanggal'), 'tanggal', self._errors),
            waktu=_optional(raw, 'waktu'),
            nik=_optional(raw, 'nik'),
            alamat=_text(raw, 'alamat') if 'alamat' in raw else None,
        )

    def validate(self, data: BookingUpdateData) -> None:
        if not data.changed_fields() and not self._errors:
            self._errors.append({"field": None, "message": "Tidak ada data yang diupdate."})
        if data.waktu and not TIME_RE.match(data.waktu):
            self._errors.append({"field": "waktu", "message": "Jam harus berformat HH:MM."})
        if data.nik and not NIK_RE.match(data.nik):
            self._errors.append({"field": "nik", "message": "NIK harus 16 digit angka."})
        super().validate(data)


class PatientRegistrationParser(BasePayloadParser):

    def transform(self) -> PatientRegistrationData:
        raw = self._parsed
        if not _text(raw, 'no_ktp'):
            self._errors.append({"field": "no_ktp", "message": "NIK pasien belum diisi."})

        return PatientRegistrationData(
            no_ktp=_text(raw, 'no_ktp'),
            nm_pasien=_text(raw, 'nm_pasien'),
            jk=_text(raw, 'jk').upper(),
            tmp_lahir=_text(raw, 'tmp_lahir'),
            tgl_lahir=_parse_date(raw.get('tgl_lahir'), 'tgl_lahir', self._errors),
            nm_ibu=_text(raw, 'nm_ibu'),
            alamat=_text(raw, 'alamat'),
            gol_darah=_text(raw, 'gol_darah'),
            pekerjaan=_text(raw, 'pekerjaan'),
            stts_nikah=_text(raw, 'stts_nikah'),
            agama=_text(raw, 'agama'),
            no_tlp=_text(raw, 'no_tlp'),
            pnd=_text(raw, 'pnd'),
            keluarga=_text(raw, 'keluarga'),
            namakeluarga=_text(raw, 'namakeluarga'),
            kd_pj=_text(raw, 'kd_pj'),
        )

    def validate(self, data: PatientRegistrationData) -> None:
        if data.no_ktp and not NIK_RE.match(data.no_ktp):
            self._errors.append({"field": "no_ktp", "message": "NIK harus 16 digit angka."})
        if data.jk and data.jk not in SEX_VALUES:
            self._errors.append({"field": "jk", "message": "Jenis kelamin harus L atau P."})
        super().validate(data)
