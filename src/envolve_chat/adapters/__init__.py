"""Adaptadores de presentación (plantillas Jinja2 del snippet del widget)."""
