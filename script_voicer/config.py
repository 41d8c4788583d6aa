"""Credential and model resolution from CLI flags and the environment."""

import os
from dataclasses import dataclass, field

from script_voicer.constants import (
    API_URL,
    DEFAULT_MODEL,
    ENV_API_KEY,
    ENV_API_URL,
    ENV_GROUP_ID,
    ENV_MODEL,
)


@dataclass(frozen=True)
class Credentials:
    """API key and group id for the synthesis service.

    Build through ``Credentials.create()`` so both values are trimmed once;
    stray whitespace makes the service reject the key with "token not match
    group".
    """

    group_id: str
    api_key: str = field(repr=False)

    @classmethod
    def create(cls, api_key: str | None, group_id: str | None) -> "Credentials":
        return cls(group_id=(group_id or "").strip(), api_key=(api_key or "").strip())

    @property
    def complete(self) -> bool:
        return bool(self.api_key and self.group_id)


def load_credentials(
    api_key: str | None = None,
    group_id: str | None = None,
    environ: dict | None = None,
) -> Credentials:
    """Resolve credentials: explicit values first, then environment variables."""
    if environ is None:
        environ = os.environ
    return Credentials.create(
        api_key=api_key or environ.get(ENV_API_KEY, ""),
        group_id=group_id or environ.get(ENV_GROUP_ID, ""),
    )


def resolve_model(model: str | None = None, environ: dict | None = None) -> str:
    if environ is None:
        environ = os.environ
    return (model or environ.get(ENV_MODEL, "") or DEFAULT_MODEL).strip()


def resolve_api_url(environ: dict | None = None) -> str:
    if environ is None:
        environ = os.environ
    return (environ.get(ENV_API_URL, "") or API_URL).strip()
