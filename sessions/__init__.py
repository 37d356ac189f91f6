"""sessions/ -- Owner-scoped session records for SessionVault.

Layer rule: sessions/ imports from core/ and kvstore/ only. Ownership comes
in as a plain email string; resolving a bearer token to that email is the
caller's job (auth/ via api/).
"""
