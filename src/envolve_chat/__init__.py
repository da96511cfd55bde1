"""Envolve chat helper: signed commands and widget markup for web pages."""

from envolve_chat.core.domain.errors import (
    EnvolveAPIError,
    InvalidCredentialError,
    MissingFirstNameError,
    SignedPayloadError,
)
from envolve_chat.core.domain.models import ChatIdentity, CredentialKey, SignedPayload
from envolve_chat.core.services.command_renderer import (
    CommandRenderer,
    decode_field,
    encode_field,
    render_widget_markup,
)

__all__ = [
    "ChatIdentity",
    "CommandRenderer",
    "CredentialKey",
    "EnvolveAPIError",
    "InvalidCredentialError",
    "MissingFirstNameError",
    "SignedPayload",
    "SignedPayloadError",
    "decode_field",
    "encode_field",
    "render_widget_markup",
]

__version__ = "0.3.0"
