"""
SIMRS registry tables (read/write, not owned by this project).

All models are unmanaged (``managed = False``) and mirror the Khanza schema:
only the columns this project reads or must fill on insert are declared.
Routing to the ``registry`` alias is done by booking.simrs.router.
"""

from django.db import models


class RegistryPatient(models.Model):
    """Row of `pasien`. Keyed by the medical-record number (no_rkm_medis)."""

    no_rkm_medis = models.CharField(max_length=15, primary_key=True)
    nm_pasien = models.CharField(max_length=40)
    no_ktp = models.CharField(max_length=20, blank=True, default='')
    jk = models.CharField(max_length=1, default='L')
    tmp_lahir = models.CharField(max_length=15, default='-')
    tgl_lahir = models.DateField(blank=True, null=True)
    nm_ibu = models.CharField(max_length=40, default='-')
    alamat = models.CharField(max_length=200, blank=True, default='')
    gol_darah = models.CharField(max_length=2, default='-')
    pekerjaan = models.CharField(max_length=60, default='-')
    stts_nikah = models.CharField(max_length=15, default='BELUM MENIKAH')
    agama = models.CharField(max_length=12, default='ISLAM')
    tgl_daftar = models.DateField(blank=True, null=True)
    no_tlp = models.CharField(max_length=40, default='-')
    umur = models.CharField(max_length=30, default='')
    pnd = models.CharField(max_length=20, default='-')
    keluarga = models.CharField(max_length=20, default='DIRI SENDIRI')
    namakeluarga = models.CharField(max_length=50, default='')
    kd_pj = models.CharField(max_length=3, default='UMU')
    no_peserta = models.CharField(max_length=25, blank=True, default='')
    kd_kel = models.IntegerField(default=1)
    kd_kec = models.IntegerField(default=1)
    kd_kab = models.IntegerField(default=1)
    pekerjaanpj = models.CharField(max_length=35, default='-')
    alamatpj = models.CharField(max_length=100, default='-')
    kelurahanpj = models.CharField(max_length=60, default='-')
    kecamatanpj = models.CharField(max_length=60, default='-')
    kabupatenpj = models.CharField(max_length=60, default='-')
    perusahaan_pasien = models.CharField(max_length=8, default='-')
    suku_bangsa = models.IntegerField(default=1)
    bahasa_pasien = models.IntegerField(default=1)
    cacat_fisik = models.IntegerField(default=1)
    email = models.CharField(max_length=50, blank=True, default='')
    nip = models.CharField(max_length=30, blank=True, default='')
    kd_prop = models.IntegerField(default=1)
    propinsipj = models.CharField(max_length=30, default='-')

    class Meta:
        managed = False
        db_table = 'pasien'

    def __str__(self):
        return f"{self.no_rkm_medis} {self.nm_pasien}"


class RegistryRegistration(models.Model):
    """
    Row of `reg_periksa`: one outpatient visit.

    Written once per transferred booking, never updated or deleted from here.
    Uniqueness of (no_rkm_medis, tgl_registrasi, kd_poli) is checked by the
    transfer before insert; the registry has no such constraint.
    """

    no_reg = models.CharField(max_length=8, blank=True, default='')
    no_rawat = models.CharField(max_length=17, primary_key=True)
    tgl_registrasi = models.DateField()
    jam_reg = models.TimeField()
    kd_dokter = models.CharField(max_length=20)
    no_rkm_medis = models.CharField(max_length=15)
    kd_poli = models.CharField(max_length=5)
    p_jawab = models.CharField(max_length=100)
    almt_pj = models.CharField(max_length=200)
    hubunganpj = models.CharField(max_length=20)
    biaya_reg = models.FloatField(default=0)
    stts = models.CharField(max_length=20, default='Belum')
    stts_daftar = models.CharField(max_length=7)
    status_lanjut = models.CharField(max_length=5, default='Ralan')
    kd_pj = models.CharField(max_length=3)
    umurdaftar = models.IntegerField()
    sttsumur = models.CharField(max_length=2)
    status_bayar = models.CharField(max_length=11, default='Belum Bayar')
    status_poli = models.CharField(max_length=4)

    class Meta:
        managed = False
        db_table = 'reg_periksa'

    def __str__(self):
        return self.no_rawat
