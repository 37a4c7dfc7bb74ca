import uuid
from django.db import models
from django.db.models import Q


class Doctor(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    nama = models.CharField(max_length=200)
    spesialis = models.CharField(max_length=200, blank=True, default='')
    is_active = models.BooleanField(default=True)
    # Mapping to SIMRS; both are required before a booking can be transferred
    kd_dokter_simrs = models.CharField(max_length=20, blank=True, null=True)
    kd_poli = models.CharField(max_length=5, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'dokter'

    def __str__(self):
        return self.nama


class Booking(models.Model):

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        CONFIRMED = 'CONFIRMED', 'Confirmed'
        COMPLETED = 'COMPLETED', 'Completed'
        CANCELLED = 'CANCELLED', 'Cancelled'
        CHECKIN = 'CHECKIN', 'Check-in'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kode_booking = models.CharField(max_length=20, unique=True)
    nama_pasien = models.CharField(max_length=200)
    nik = models.CharField(max_length=16, blank=True, null=True)
    alamat = models.TextField(blank=True, null=True)
    telepon = models.CharField(max_length=20)
    email = models.EmailField(blank=True, null=True)
    dokter = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='bookings')
    tanggal = models.DateField()
    waktu = models.CharField(max_length=20)
    keluhan = models.TextField(blank=True, null=True)
    # SIMRS payment class (penjab); falls back to settings.SIMRS_DEFAULT_KD_PJ
    kd_pj = models.CharField(max_length=3, blank=True, null=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    catatan_admin = models.TextField(blank=True, null=True)
    no_rawat = models.CharField(max_length=17, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'booking'
        constraints = [
            # no_rawat only exists on bookings completed through a transfer
            models.CheckConstraint(
                condition=Q(no_rawat__isnull=True) | Q(status='COMPLETED'),
                name='booking_no_rawat_requires_completed',
            ),
        ]
        indexes = [
            models.Index(fields=['tanggal', 'status'], name='booking_tanggal_status_idx'),
        ]

    def __str__(self):
        return self.kode_booking
