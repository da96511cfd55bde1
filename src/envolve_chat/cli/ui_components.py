"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- `inspect` y `setup` comparten el mismo estilo de tablas/paneles.
"""

from __future__ import annotations

from datetime import datetime, timezone

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from envolve_chat.core.domain.models import SignedPayload
from envolve_chat.core.services.command_renderer import decode_field

# Campos cuyo valor viaja codificado en base64 (variante Envolve).
_ENCODED_FIELDS = {"fn", "ln", "pic", "prof"}


def build_payload_table(payload: SignedPayload) -> Table:
    """Tabla con las partes del comando firmado y los campos decodificados."""

    signed_at = datetime.fromtimestamp(payload.timestamp_millis / 1000, tz=timezone.utc)

    table = Table(title="Envolve command")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Raw", style="white")
    table.add_column("Decoded", style="magenta")

    table.add_row("digest", payload.hex_digest, "")
    table.add_row("timestamp", str(payload.timestamp_millis), signed_at.isoformat(timespec="seconds"))

    for part in payload.command.split(","):
        key, _, value = part.partition("=")
        decoded = ""
        if key in _ENCODED_FIELDS:
            try:
                decoded = decode_field(value)
            except ValueError:
                decoded = "[red]<invalid>[/red]"
        table.add_row(key, value, decoded)
    return table


def build_verification_panel(valid: bool) -> Panel:
    if valid:
        return Panel(Text("Signature OK", style="bold green"), border_style="green")
    return Panel(Text("Signature does NOT match this API key", style="bold red"), border_style="red")
