"""Servicios del Core (casos de uso sin I/O)."""
