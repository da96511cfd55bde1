"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta en el borde: una credencial mal formada o un campo de
  identidad desconocido fallan antes de firmar nada.
- Los modelos son inmutables (`frozen=True`); se construyen por llamada y se
  descartan, nunca se cachean ni se persisten.
"""

from __future__ import annotations

import hashlib
import hmac
import re

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from envolve_chat.core.domain.errors import InvalidCredentialError, SignedPayloadError


class CredentialKey(BaseModel):
    """Credencial de sitio emitida por Envolve (`<site_id>-<secret_key>`).

    Por qué un value object:
    - Separa la validación del string crudo del resto del flujo.
    - `secret_key` queda fuera del `repr` para no filtrarlo en logs/tracebacks.
    """

    model_config = ConfigDict(frozen=True)

    site_id: str = Field(
        ...,
        min_length=1,
        pattern=r"^[^-]+$",
        description="Identificador del sitio (primer segmento).",
    )
    secret_key: str = Field(
        ...,
        min_length=1,
        pattern=r"^[^-]+$",
        repr=False,
        description="Clave secreta de firma (segundo segmento).",
    )

    @property
    def full_key(self) -> str:
        return f"{self.site_id}-{self.secret_key}"

    @classmethod
    def parse(cls, raw: object) -> CredentialKey:
        """Valida y separa una credencial cruda.

        Reglas:
        - Se ignoran espacios alrededor.
        - Al separar por `-` deben salir exactamente dos segmentos no vacíos;
          una clave secreta con guiones se rechaza.
        """

        if not isinstance(raw, str):
            raise InvalidCredentialError()

        pieces = raw.strip().split("-")
        if len(pieces) != 2 or not pieces[0] or not pieces[1]:
            raise InvalidCredentialError()

        return cls(site_id=pieces[0], secret_key=pieces[1])

    def __str__(self) -> str:
        return f"{self.site_id}-***"


class ChatIdentity(BaseModel):
    """Identity fields for a login command.

    A missing or empty `first_name` means the visitor is anonymous and the
    widget gets a logout command instead.
    Unknown keys are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    first_name: str | None = Field(
        default=None,
        description="Nombre del usuario; requerido para login.",
    )
    last_name: str | None = Field(
        default=None,
        description="Apellido opcional.",
    )
    pic: str | None = Field(
        default=None,
        alias="avatar_url",
        description="URL absoluta del avatar.",
    )
    profile_html: str | None = Field(
        default=None,
        description="HTML para el rollover del perfil.",
    )
    is_admin: bool = Field(
        default=False,
        description="Estado de administrador en el chat.",
    )

    @property
    def wants_login(self) -> bool:
        return bool(self.first_name)


class SignedPayload(BaseModel):
    """Comando firmado: `<hex_digest>;<timestamp_millis>;<command>`."""

    model_config = ConfigDict(frozen=True)

    hex_digest: str = Field(
        ...,
        pattern=r"^[0-9a-f]{40}$",
        description="HMAC-SHA1 en hexadecimal (minúsculas).",
    )
    timestamp_millis: int = Field(
        ...,
        ge=0,
        description="Momento de la firma en milisegundos desde epoch.",
    )
    command: str = Field(
        ...,
        min_length=1,
        description="Comando canónico que se firmó.",
    )

    @staticmethod
    def compute_digest(secret_key: str, timestamp_millis: int, command: str) -> str:
        message = f"{timestamp_millis};{command}".encode("utf-8")
        return hmac.new(secret_key.encode("utf-8"), message, hashlib.sha1).hexdigest()

    @classmethod
    def create(cls, secret_key: str, timestamp_millis: int, command: str) -> SignedPayload:
        digest = cls.compute_digest(secret_key, timestamp_millis, command)
        return cls(hex_digest=digest, timestamp_millis=timestamp_millis, command=command)

    @classmethod
    def parse(cls, text: str) -> SignedPayload:
        """Reconstruye un payload serializado (p.ej. el valor de `env_commandString`)."""

        parts = text.strip().split(";", 2)
        if len(parts) != 3 or not parts[2]:
            raise SignedPayloadError(f"Expected '<digest>;<timestamp>;<command>', got {text!r}.")

        digest, timestamp, command = parts
        if not re.fullmatch(r"[0-9]+", timestamp):
            raise SignedPayloadError(f"Timestamp is not an integer: {timestamp!r}.")
        if not re.fullmatch(r"[0-9a-f]{40}", digest):
            raise SignedPayloadError(f"Digest is not a lowercase SHA-1 hex string: {digest!r}.")

        return cls(hex_digest=digest, timestamp_millis=int(timestamp), command=command)

    def verify(self, secret_key: str) -> bool:
        expected = self.compute_digest(secret_key, self.timestamp_millis, self.command)
        return hmac.compare_digest(expected, self.hex_digest)

    def serialize(self) -> str:
        return f"{self.hex_digest};{self.timestamp_millis};{self.command}"

    def __str__(self) -> str:
        return self.serialize()
