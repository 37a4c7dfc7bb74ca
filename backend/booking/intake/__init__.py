from .parsers import BookingPayloadParser, BookingUpdateParser, PatientRegistrationParser

__all__ = ['BookingPayloadParser', 'BookingUpdateParser', 'PatientRegistrationParser']
