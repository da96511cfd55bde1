"""CLI (Typer + Rich) para generar y revisar snippets de Envolve."""
