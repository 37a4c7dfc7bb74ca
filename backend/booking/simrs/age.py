"""
Age and visit-status derivation for reg_periksa.

SIMRS shows age with a unit that depends on how old the patient is:
  Th  completed years, once the patient is at least one year old
  Bl  months (elapsed days // 30), under one year
  Hr  days, under one 30-day month

Years count only birthdays that have passed on the registration date. The
old dashboard subtracted calendar years instead, so a patient registered
before their birthday (early January especially) shows one year less here
than on records it wrote. Both end up in reg_periksa; the difference is
expected.
"""

from dataclasses import dataclass
from datetime import date

YEARS = 'Th'
MONTHS = 'Bl'
DAYS = 'Hr'

RETURNING = 'Lama'
NEW = 'Baru'

_DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class Age:
    value: int
    unit: str

    @property
    def display(self) -> str:
        return f"{self.value} {self.unit}"


def _completed_years(birth_date: date, reference_date: date) -> int:
    years = reference_date.year - birth_date.year
    if (reference_date.month, reference_date.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def derive_age(birth_date: date, reference_date: date) -> Age:
    """Raises ValueError if the patient is born after reference_date."""
    if birth_date > reference_date:
        raise ValueError(f"birth date {birth_date} is after {reference_date}")

    years = _completed_years(birth_date, reference_date)
    if years >= 1:
        return Age(years, YEARS)

    elapsed_days = (reference_date - birth_date).days
    months = elapsed_days // _DAYS_PER_MONTH
    if months >= 1:
        return Age(months, MONTHS)

    return Age(elapsed_days, DAYS)


def visit_status(has_prior: bool) -> str:
    """'Lama' for a returning patient (or patient/department pair), else 'Baru'."""
    return RETURNING if has_prior else NEW
