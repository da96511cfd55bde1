"""Signed Envolve commands and the widget markup that carries them.

The renderer turns a site credential and optional identity fields into a
canonical command (`v=0.3,c=login,fn=...,admin=f`), signs it with
HMAC-SHA1 over `"<timestamp>;<command>"`, and wraps the result in the script
snippet that loads the Envolve client. Everything here has to stay
byte-compatible with what the Envolve service checks on its side.

Usage from a view helper:

    renderer = CommandRenderer()
    html = renderer.render_widget_markup(
        "123-abcdefghijklmnopqrs",
        {"first_name": user.first_name, "pic": user.avatar_url, "is_admin": user.admin},
    )
"""

from __future__ import annotations

import base64
import functools
import logging
import time
from typing import Any, Callable, Mapping, Optional, Union

from envolve_chat.adapters.widget_markup import render_widget_snippet
from envolve_chat.core.config import AppSettings
from envolve_chat.core.domain.errors import MissingFirstNameError
from envolve_chat.core.domain.models import ChatIdentity, CredentialKey, SignedPayload

logger = logging.getLogger(__name__)

IdentityInput = Optional[Union[ChatIdentity, Mapping[str, Any]]]


def encode_field(value: str) -> str:
    """Base64 of the UTF-8 bytes with `+`/`/` swapped for `-`/`_`.

    Padding is kept and the output never contains newlines.
    """

    encoded = base64.b64encode(value.encode("utf-8")).decode("ascii")
    return encoded.replace("+", "-").replace("/", "_")


def decode_field(value: str) -> str:
    try:
        return base64.b64decode(value, altchars=b"-_", validate=True).decode("utf-8")
    except ValueError as exc:
        raise ValueError(f"Not an Envolve-encoded field: {value!r}") from exc


def _as_credential(credential: CredentialKey | str) -> CredentialKey:
    if isinstance(credential, CredentialKey):
        return credential
    return CredentialKey.parse(credential)


def _as_identity(identity: IdentityInput) -> ChatIdentity | None:
    """`None` for anonymous visitors; other fields are only validated for login."""

    if identity is None or isinstance(identity, ChatIdentity):
        return identity
    if not identity.get("first_name"):
        return None
    return ChatIdentity.model_validate(dict(identity))


class CommandRenderer:
    """Builds, signs and renders Envolve commands.

    The only state is read-only settings and the clock; an instance can be
    shared between threads and requests.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._clock = clock or time.time

    @property
    def api_version(self) -> str:
        return self._settings.api_version

    def render_widget_markup(
        self,
        raw_credential: CredentialKey | str,
        identity: IdentityInput = None,
    ) -> str:
        """Return the script tags for a logged-in user or an anonymous visitor.

        Without an identity, or with an empty first name, the visitor is
        anonymous and a logout command is rendered; this entry point never
        raises `MissingFirstNameError`.
        """

        credential = _as_credential(raw_credential)
        ident = _as_identity(identity)

        if ident is not None and ident.wants_login:
            logger.debug("Rendering login widget for site %s", credential.site_id)
            command = self.build_login_command(
                credential,
                ident.first_name,
                last_name=ident.last_name,
                pic=ident.pic,
                profile_html=ident.profile_html,
                is_admin=ident.is_admin,
            )
        else:
            logger.debug("Rendering anonymous widget for site %s", credential.site_id)
            command = self.build_logout_command(credential)

        return self.render_markup(credential, command)

    def login_command_string(
        self,
        first_name: str | None,
        *,
        last_name: str | None = None,
        pic: str | None = None,
        profile_html: str | None = None,
        is_admin: bool = False,
    ) -> str:
        """Unsigned canonical login command."""

        if not first_name:
            raise MissingFirstNameError()

        fields = [
            f"v={self.api_version}",
            "c=login",
            f"fn={encode_field(first_name)}",
        ]
        if last_name is not None:
            fields.append(f"ln={encode_field(last_name)}")
        if pic is not None:
            fields.append(f"pic={encode_field(pic)}")
        if profile_html is not None:
            fields.append(f"prof={encode_field(profile_html)}")
        fields.append(f"admin={'t' if is_admin else 'f'}")
        return ",".join(fields)

    def logout_command_string(self) -> str:
        return f"v={self.api_version},c=logout"

    def build_login_command(
        self,
        credential: CredentialKey | str,
        first_name: str | None,
        *,
        last_name: str | None = None,
        pic: str | None = None,
        profile_html: str | None = None,
        is_admin: bool = False,
    ) -> str:
        """Signed login command, ready for `env_commandString`.

        Raises `MissingFirstNameError` when `first_name` is missing or empty.
        """

        key = _as_credential(credential)
        command = self.login_command_string(
            first_name,
            last_name=last_name,
            pic=pic,
            profile_html=profile_html,
            is_admin=is_admin,
        )
        return self.sign(key, command).serialize()

    def build_logout_command(self, credential: CredentialKey | str) -> str:
        key = _as_credential(credential)
        return self.sign(key, self.logout_command_string()).serialize()

    def sign(self, credential: CredentialKey, command: str) -> SignedPayload:
        """HMAC-SHA1 of `"<t>;<command>"` keyed with the secret key.

        `t` is whole seconds since epoch times 1000, which is the millisecond
        value the Envolve service expects. Two calls in different seconds
        yield different digests.
        """

        timestamp_millis = int(self._clock()) * 1000
        payload = SignedPayload.create(credential.secret_key, timestamp_millis, command)
        logger.debug("Signed command at %d: %s", timestamp_millis, command)
        return payload

    def render_markup(self, credential: CredentialKey, signed_command: str | None) -> str:
        return render_widget_snippet(
            site_id=credential.site_id,
            command_string=signed_command,
            script_root=self._settings.script_root,
        )


@functools.lru_cache(maxsize=1)
def _default_renderer() -> CommandRenderer:
    # Sin .env: las constantes del protocolo no dependen del cwd de la web app.
    return CommandRenderer(AppSettings(_env_file=None))


def render_widget_markup(raw_credential: CredentialKey | str, identity: IdentityInput = None) -> str:
    """Shortcut using one shared renderer built from defaults and env vars."""

    return _default_renderer().render_widget_markup(raw_credential, identity)
