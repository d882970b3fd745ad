"""foods/ -- Food-record persistence. Only ownership checks are used by the rest of Simpan."""
