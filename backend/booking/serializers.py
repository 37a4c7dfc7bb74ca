"""
Response serializers: ORM objects / results → JSON-able dict.

Output formatting only; input parsing lives in booking/intake/.
"""
import math


def serialize_doctor(doctor):
    return {
        'id': str(doctor.id),
        'nama': doctor.nama,
        'kd_dokter_simrs': doctor.kd_dokter_simrs,
        'kd_poli': doctor.kd_poli,
    }


def serialize_booking_created(booking):
    """201 body for the public booking form."""
    return {
        'id': str(booking.id),
        'kode_booking': booking.kode_booking,
        'status': booking.status,
        'message': 'Booking berhasil dibuat',
    }


def serialize_booking(booking):
    response = {
        'id': str(booking.id),
        'kode_booking': booking.kode_booking,
        'nama_pasien': booking.nama_pasien,
        'nik': booking.nik,
        'alamat': booking.alamat,
        'telepon': booking.telepon,
        'email': booking.email,
        'dokter': serialize_doctor(booking.dokter),
        'tanggal': booking.tanggal.isoformat(),
        'waktu': booking.waktu,
        'keluhan': booking.keluhan,
        'kd_pj': booking.kd_pj,
        'status': booking.status,
        'catatan_admin': booking.catatan_admin,
        'no_rawat': booking.no_rawat,
        'created_at': booking.created_at.isoformat(),
        'updated_at': booking.updated_at.isoformat(),
    }

    # only a CONFIRMED booking can be sent to SIMRS
    response['can_transfer'] = booking.status == 'CONFIRMED'
    return response


def serialize_booking_page(bookings, total, page, per_page):
    items = [serialize_booking(b) for b in bookings]
    return {
        'items': items,
        'total': total,
        'page': page,
        'per_page': per_page,
        'total_pages': math.ceil(total / per_page) if per_page else 0,
    }


def serialize_transfer_result(result):
    return {
        'no_rawat': result.no_rawat,
        'no_reg': result.no_reg,
        'no_rkm_medis': result.no_rkm_medis,
        'nama_pasien': result.nama_pasien,
        'message': 'Booking berhasil ditransfer ke SIMRS',
    }


def serialize_registry_patient(patient, created):
    return {
        'no_rkm_medis': patient.no_rkm_medis,
        'nm_pasien': patient.nm_pasien,
        'created': created,
        'message': 'Pasien berhasil didaftarkan ke SIMRS' if created else 'Pasien sudah terdaftar di SIMRS',
    }
