"""Gatehouse - multi-tenant identity service.

Registration, login, refresh token rotation, logout and self lookup over
HTTP, plus an operator CLI.
"""

__version__ = "1.0.0"
