"""kvstore/ -- Narrow key-value persistence contract for SessionVault.

Layer rule: kvstore/ imports only core/ (for the error taxonomy).
auth/ and sessions/ consume it; it knows nothing about users or sessions.
"""
