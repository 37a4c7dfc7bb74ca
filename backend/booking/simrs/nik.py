"""
NIK (Nomor Induk Kependudukan) decoder.

Layout of the 16-digit NIK:  PPKKCC DDMMYY XXXX
  PP KK CC  province / regency / district
  DD        day of birth, +40 for women
  MM        month of birth
  YY        two-digit year of birth
  XXXX      serial

The century is not encoded. A year greater than the current two-digit year is
read as 19YY, anything else as 20YY, so someone born exactly 100 years before
the reference year decodes as a newborn. This is a known limitation of the
format; the heuristic is kept as-is because changing it changes the decoded
birth year for real patients.
"""

from dataclasses import dataclass
from datetime import date

MALE = 'L'
FEMALE = 'P'

_FEMALE_DAY_OFFSET = 40
_MIN_LENGTH = 12


@dataclass(frozen=True)
class NikInfo:
    birth_date: date
    sex: str  # 'L' / 'P', as stored in pasien.jk


def decode_nik(nik: str | None, today: date | None = None) -> NikInfo | None:
    """
    Decode birth date and sex from a NIK.

    Returns None when the NIK is shorter than 12 characters, when the date
    part is not numeric, or when it does not form a real calendar date.
    `today` fixes the reference year for century resolution.
    """
    if not nik:
        return None
    nik = nik.strip()
    if len(nik) < _MIN_LENGTH or not nik[:_MIN_LENGTH].isdigit():
        return None

    day = int(nik[6:8])
    month = int(nik[8:10])
    year = int(nik[10:12])

    current_yy = (today or date.today()).year % 100
    year = 1900 + year if year > current_yy else 2000 + year

    if day > _FEMALE_DAY_OFFSET:
        sex = FEMALE
        day -= _FEMALE_DAY_OFFSET
    else:
        sex = MALE

    try:
        birth_date = date(year, month, day)
    except ValueError:
        return None

    return NikInfo(birth_date=birth_date, sex=sex)
