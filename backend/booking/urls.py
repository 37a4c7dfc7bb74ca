from django.urls import path
from .views import (
    BookingDetailView,
    BookingListCreateView,
    BookingPatientView,
    BookingReconcileView,
    BookingTransferView,
)

urlpatterns = [
    path('bookings/', BookingListCreateView.as_view(), name='booking-list'),
    path('bookings/<uuid:booking_id>/', BookingDetailView.as_view(), name='booking-detail'),
    path('bookings/<uuid:booking_id>/transfer/', BookingTransferView.as_view(), name='booking-transfer'),
    path('bookings/<uuid:booking_id>/reconcile/', BookingReconcileView.as_view(), name='booking-reconcile'),
    path('bookings/<uuid:booking_id>/patient/', BookingPatientView.as_view(), name='booking-patient'),
]
