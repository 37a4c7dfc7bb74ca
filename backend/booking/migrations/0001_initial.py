import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Doctor',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('nama', models.CharField(max_length=200)),
                ('spesialis', models.CharField(blank=True, default='', max_length=200)),
                ('is_active', models.BooleanField(default=True)),
                ('kd_dokter_simrs', models.CharField(blank=True, max_length=20, null=True)),
                ('kd_poli', models.CharField(blank=True, max_length=5, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'dokter',
            },
        ),
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('kode_booking', models.CharField(max_length=20, unique=True)),
                ('nama_pasien', models.CharField(max_length=200)),
                ('nik', models.CharField(blank=True, max_length=16, null=True)),
                ('alamat', models.TextField(blank=True, null=True)),
                ('telepon', models.CharField(max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('tanggal', models.DateField()),
                ('waktu', models.CharField(max_length=20)),
                ('keluhan', models.TextField(blank=True, null=True)),
                ('kd_pj', models.CharField(blank=True, max_length=3, null=True)),
                ('status', models.CharField(
                    choices=[
                        ('PENDING', 'Pending'),
                        ('CONFIRMED', 'Confirmed'),
                        ('COMPLETED', 'Completed'),
                        ('CANCELLED', 'Cancelled'),
                        ('CHECKIN', 'Check-in'),
                    ],
                    default='PENDING',
                    max_length=10,
                )),
                ('catatan_admin', models.TextField(blank=True, null=True)),
                ('no_rawat', models.CharField(blank=True, max_length=17, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('dokter', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='bookings',
                    to='booking.doctor',
                )),
            ],
            options={
                'db_table': 'booking',
                'indexes': [models.Index(fields=['tanggal', 'status'], name='booking_tanggal_status_idx')],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('no_rawat__isnull', True), ('status', 'COMPLETED'), _connector='OR'),
                        name='booking_no_rawat_requires_completed',
                    ),
                ],
            },
        ),
    ]
