"""auth/ -- Token issuance and revocation package for TokenAuth.

Layer rule: auth/ imports only stdlib + third-party libraries (plus
auth/dependencies.py, which imports fastapi to take part in request handling).
It does NOT import from api/ or core/. api/ and main.py import from auth/,
not the other way around.
"""
