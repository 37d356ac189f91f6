"""auth/ -- Credentials, bearer tokens and user records for SessionVault.

Layer rule: auth/ imports from core/ and kvstore/ plus third-party libraries.
It does NOT import from api/ or sessions/. api/ imports from auth/, not the
other way around. auth/dependencies.py is the one module that touches FastAPI.
"""
