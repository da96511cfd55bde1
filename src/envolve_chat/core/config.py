"""Configuración del Core.

Por qué aquí:
- Centraliza los valores que dependen del servicio Envolve (versión del
  protocolo, host del script loader) en un único contrato tipado.
- La credencial por defecto solo la usa la CLI; el renderer siempre recibe la
  credencial de forma explícita.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENVOLVE_API_VERSION = "0.3"
ENVOLVE_JS_ROOT = "d.envolve.com/env.nocache.js"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "envolve-chat"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "envolve-chat"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "envolve-chat"
    return Path.home() / ".config" / "envolve-chat"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _unquote(value: str) -> str:
    # Solo un par de comillas envolventes; el resto del valor se respeta.
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _quote(value: str) -> str:
    # Comillas simples si el valor ya trae dobles (dotenv las lee literales).
    if '"' in value:
        return f"'{value}'"
    return f'"{value}"'


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            data[key] = _unquote(value.strip())
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# envolve-chat user config (.env)"]
    for key in sorted(existing):
        lines.append(f"{key}={_quote(existing[key])}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core.
    - Los defaults son las constantes que espera el servicio; solo se
      sobrescriben para pruebas o si Envolve publica otra versión.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENVOLVE_CHAT_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_version: str = Field(
        default=ENVOLVE_API_VERSION,
        min_length=1,
        description="Versión del protocolo (campo `v=` de cada comando).",
    )
    script_root: str = Field(
        default=ENVOLVE_JS_ROOT,
        min_length=1,
        description="Host/ruta del script loader del widget, sin esquema.",
    )
    api_key: str | None = Field(
        default=None,
        repr=False,
        description="Credencial `<site_id>-<secret_key>` por defecto para la CLI.",
    )
