"""auth/ -- Authentication and session-lifecycle package for Simpan.

Password hashing, the signed token codec, login/refresh/logout, account
creation and password recovery.

Layer rule: auth/ imports only stdlib + third-party libraries (and reads
Settings handed in by the caller). It does NOT import from api/ or foods/.
api/ imports from auth/, not the other way around.
"""
