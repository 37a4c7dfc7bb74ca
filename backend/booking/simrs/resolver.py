"""
Patient and registration lookups against the registry.

All functions are read-only. Callers wrap them in registry_errors() to turn
connection failures into RegistryUnavailable.
"""

from datetime import date

from .models import RegistryPatient, RegistryRegistration


def find_patient_by_nik(nik: str) -> RegistryPatient | None:
    return RegistryPatient.objects.filter(no_ktp=nik).order_by('no_rkm_medis').first()


def find_registration(no_rkm_medis: str, reg_date: date, kd_poli: str) -> RegistryRegistration | None:
    """Existing visit for the same patient, day and department, if any."""
    return (
        RegistryRegistration.objects
        .filter(no_rkm_medis=no_rkm_medis, tgl_registrasi=reg_date, kd_poli=kd_poli)
        .order_by('no_rawat')
        .first()
    )


def has_prior_registration(no_rkm_medis: str) -> bool:
    """Any visit at all, any date, any department."""
    return RegistryRegistration.objects.filter(no_rkm_medis=no_rkm_medis).exists()


def has_prior_department_registration(no_rkm_medis: str, kd_poli: str) -> bool:
    return RegistryRegistration.objects.filter(no_rkm_medis=no_rkm_medis, kd_poli=kd_poli).exists()
