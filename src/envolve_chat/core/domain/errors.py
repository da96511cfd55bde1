"""Errors raised by the Envolve helper.

All of them derive from `EnvolveAPIError` so the CLI (or an embedding web
app) can catch one type. They also derive from `ValueError` because every
failure here is a bad input value.
"""

from __future__ import annotations


class EnvolveAPIError(Exception):
    """Base error for credential, command and payload problems."""


class InvalidCredentialError(EnvolveAPIError, ValueError):
    """The raw credential is not `<site_id>-<secret_key>`."""

    def __init__(self, message: str = "Invalid or missing Envolve API Key.") -> None:
        super().__init__(message)


class MissingFirstNameError(EnvolveAPIError, ValueError):
    """A login command was requested without a first name."""

    def __init__(
        self,
        message: str = (
            "You must provide at least a first name. "
            "If you are providing a username, use it for the first name."
        ),
    ) -> None:
        super().__init__(message)


class SignedPayloadError(EnvolveAPIError, ValueError):
    """A serialized signed payload could not be split into its parts."""
