"""Core del helper: dominio, configuración y servicios (sin CLI ni plantillas)."""
