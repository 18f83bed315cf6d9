"""Persistence implementations for gatehouse_auth, grouped by technology."""
