"""Caller identity models.

Identity is an explicit tagged union rather than a nullable user id:

    Identity = Anonymous | Authenticated

Quota gating and persistence dispatch on the variant with ``isinstance``
so every code path handles both cases.  Verification happens upstream;
gifpicker only ever sees the opaque id an auth proxy hands it.
"""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """Profile fields upserted into the identity store on admission."""

    model_config = ConfigDict(frozen=True)

    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None


class Anonymous(BaseModel):
    """An unidentified caller.

    ``client_host`` is only consulted when the optional anonymous gate is
    enabled (see ``Settings.anonymous_quota_enabled``).
    """

    model_config = ConfigDict(frozen=True)

    client_host: str | None = None


class Authenticated(BaseModel):
    """A caller whose opaque external id was verified upstream."""

    model_config = ConfigDict(frozen=True)

    external_id: str = Field(min_length=1)
    profile: UserProfile = Field(default_factory=UserProfile)


Identity = Union[Anonymous, Authenticated]
