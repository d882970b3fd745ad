"""core/ -- Process-wide configuration for Simpan.

Layer rule: core/ is the kernel. It does NOT import from api/, auth/, foods/, or mail/.
"""
