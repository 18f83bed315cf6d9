"""Application layer: use cases over the auth and identity packages."""
