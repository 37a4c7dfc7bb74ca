"""
SIMRS (Khanza) registry integration.

The registry database is owned by the hospital. This package only reads
pasien/reg_periksa and inserts reg_periksa (plus pasien on explicit request);
its tables are never migrated from here.
"""
