"""
Unit tests for the NIK decoder. Pure functions, no database.
"""
import pytest
from datetime import date

from booking.simrs.nik import FEMALE, MALE, NikInfo, decode_nik

TODAY = date(2025, 6, 1)


class TestDecodeNik:

    def test_male_day_used_as_is(self):
        info = decode_nik('3201231503850001', today=TODAY)
        assert info == NikInfo(birth_date=date(1985, 3, 15), sex=MALE)

    def test_female_day_minus_40(self):
        # day-field 45, month 03, year 99
        info = decode_nik('3201234503990001', today=TODAY)
        assert info.sex == FEMALE
        assert info.birth_date == date(1999, 3, 5)

    def test_booking_example_nik(self):
        info = decode_nik('3201234501029901', today=TODAY)
        assert info.sex == FEMALE
        assert info.birth_date == date(2002, 1, 5)

    def test_day_40_is_male(self):
        # 40 is not > 40, and day 40 does not exist
        assert decode_nik('3201234001990001', today=TODAY) is None

    def test_day_41_is_female_first_of_month(self):
        info = decode_nik('3201234101990001', today=TODAY)
        assert info == NikInfo(birth_date=date(1999, 1, 1), sex=FEMALE)

    def test_surrounding_whitespace_ignored(self):
        assert decode_nik('  3201231503850001 ', today=TODAY).birth_date == date(1985, 3, 15)


class TestCenturyRule:

    def test_year_above_current_yy_is_1900s(self):
        assert decode_nik('3201230101260001', today=TODAY).birth_date == date(1926, 1, 1)

    def test_year_equal_to_current_yy_is_2000s(self):
        assert decode_nik('3201230101250001', today=TODAY).birth_date == date(2025, 1, 1)

    def test_year_below_current_yy_is_2000s(self):
        assert decode_nik('3201230101000001', today=TODAY).birth_date == date(2000, 1, 1)

    def test_hundred_year_old_reads_as_newborn(self):
        # known limitation: 1925 and 2025 share the same NIK digits
        assert decode_nik('3201230101250001', today=date(2025, 1, 2)).birth_date.year == 2025

    def test_reference_year_changes_century(self):
        nik = '3201230101200001'
        assert decode_nik(nik, today=date(2025, 1, 1)).birth_date == date(2020, 1, 1)
        assert decode_nik(nik, today=date(2019, 1, 1)).birth_date == date(1920, 1, 1)


class TestInvalidNik:

    @pytest.mark.parametrize('nik', [None, '', '32012345010', '   '])
    def test_too_short(self, nik):
        assert decode_nik(nik, today=TODAY) is None

    def test_twelve_characters_is_enough(self):
        assert decode_nik('320123150385', today=TODAY) == NikInfo(date(1985, 3, 15), MALE)

    def test_non_numeric_date_part(self):
        assert decode_nik('320123AB0385XXXX', today=TODAY) is None

    @pytest.mark.parametrize('nik', [
        '3201233202990001',  # 32 Feb
        '3201231513990001',  # month 13
        '3201237102990001',  # female day 31 Feb
        '3201230000990001',  # day 0
    ])
    def test_impossible_date(self, nik):
        assert decode_nik(nik, today=TODAY) is None
