from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """HTTP basic credentials; serialized as ``{"user": ..., "pass": ...}``."""

    user: str
    password: str = Field(alias="pass")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @classmethod
    def coerce(cls, value: Any) -> Optional["Credentials"]:
        """Accept a Credentials instance, a ``{user, pass}`` mapping or None."""
        if value is None or isinstance(value, Credentials):
            return value
        if isinstance(value, Mapping):
            return cls.model_validate(dict(value))
        raise TypeError(
            f"credentials must be a mapping or Credentials, got {type(value).__name__}"
        )


class ResourceDescriptor(BaseModel):
    """
    Describes one remote resource type.
    `methods` maps an HTTP verb to a URL template holding one placeholder
    token, e.g. ``{"GET": "/node/{node}", "POST": "/entity/node"}``.
    """

    base: str
    credentials: Optional[Credentials] = None
    methods: Dict[str, str] = Field(default_factory=dict)
    entity_type: str = Field(alias="entityType")
    bundle: str = ""
    options: str = ""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CatalogEntry(BaseModel):
    """One entry of the server's ``/entity/types`` listing."""

    entity_type: str = Field(alias="entityType")
    bundle: Optional[str] = None

    # label, methods, etc. are passed through untouched
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @property
    def effective_bundle(self) -> str:
        return self.bundle or self.entity_type
