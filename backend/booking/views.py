from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .intake import BookingPayloadParser, BookingUpdateParser, PatientRegistrationParser
from .serializers import (
    serialize_booking,
    serialize_booking_created,
    serialize_booking_page,
    serialize_registry_patient,
    serialize_transfer_result,
)
from .transfer import reconcile_booking, transfer_booking


def _int_param(request, name, default):
    try:
        return int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        return default


class BookingListCreateView(APIView):
    """
    POST /api/bookings/ - public booking form
    GET  /api/bookings/ - admin list (?status=&tanggal=&dokter_id=&page=&per_page=)
    """

    def get_permissions(self):
        if self.request.method == 'POST':
            return [AllowAny()]
        return super().get_permissions()

    def get_authenticators(self):
        # the public form carries no session, so no CSRF check either
        if self.request is not None and self.request.method == 'POST':
            return []
        return super().get_authenticators()

    def get(self, request):
        page = _int_param(request, 'page', 1)
        per_page = min(services.MAX_PER_PAGE, max(1, _int_param(request, 'per_page', 10)))
        bookings, total = services.list_bookings(
            status=request.query_params.get('status'),
            tanggal=request.query_params.get('tanggal'),
            dokter_id=request.query_params.get('dokter_id'),
            page=page,
            per_page=per_page,
        )
        return Response(serialize_booking_page(bookings, total, max(1, page), per_page))

    def post(self, request):
        data = BookingPayloadParser(request.data).process()
        booking = services.create_booking(data)
        return Response(serialize_booking_created(booking), status=status.HTTP_201_CREATED)


class BookingDetailView(APIView):
    """GET / PATCH /api/bookings/<id>/ - admin"""

    def get(self, request, booking_id):
        return Response(serialize_booking(services.get_booking_detail(booking_id)))

    def patch(self, request, booking_id):
        data = BookingUpdateParser(request.data).process()
        booking = services.update_booking(booking_id, data)
        return Response(serialize_booking(booking))


class BookingTransferView(APIView):
    """POST /api/bookings/<id>/transfer/ - register the visit in SIMRS"""

    def post(self, request, booking_id):
        result = transfer_booking(booking_id)
        return Response(serialize_transfer_result(result))


class BookingReconcileView(APIView):
    """POST /api/bookings/<id>/reconcile/ - adopt an existing SIMRS visit"""

    def post(self, request, booking_id):
        booking = reconcile_booking(booking_id)
        return Response(serialize_booking(booking))


class BookingPatientView(APIView):
    """
    GET  /api/bookings/<id>/patient/ - is the patient already in SIMRS?
    POST /api/bookings/<id>/patient/ - register the patient in SIMRS
    """

    def get(self, request, booking_id):
        return Response(services.check_registry_patient(booking_id))

    def post(self, request, booking_id):
        data = PatientRegistrationParser(request.data).process()
        patient, created = services.register_registry_patient(booking_id, data)
        return Response(
            serialize_registry_patient(patient, created),
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )
