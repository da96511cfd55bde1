"""Render del snippet HTML/JS del widget.

Por qué está en adapters:
- El formato exacto del snippet es un detalle de presentación (Jinja2).
- El Core solo entrega el site id y el comando ya firmado.

Notas:
- `autoescape=False`: el snippet es JavaScript literal; escapar `'` o `"`
  rompería el contrato línea a línea que espera el script de Envolve.
- `trim_blocks`/`lstrip_blocks` hacen que el bloque condicional no deje líneas
  vacías cuando no hay comando.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
_WIDGET_TEMPLATE = "widget.html"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
        undefined=StrictUndefined,
    )


def render_widget_snippet(
    *,
    site_id: str,
    command_string: str | None,
    script_root: str,
) -> str:
    """Renderiza el snippet; omite `env_commandString` si no hay comando."""

    template = _get_env().get_template(_WIDGET_TEMPLATE)
    return template.render(
        site_id=site_id,
        command_string=command_string,
        script_root=script_root,
    )
