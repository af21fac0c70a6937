"""
Resource clients bound to the registry.

Two variants share the base/credentials accessors:
  - EntityResource: CRUD on one entity type/bundle, built from URL templates
  - EntityQuery: cross-entity listing, entity type supplied per call
"""

from __future__ import annotations

import re
from typing import Any, ClassVar, Dict, Mapping, Optional

from .client import HttpTransport
from .errors import MissingBaseUrlError, UnsupportedMethodError
from .models import Credentials, ResourceDescriptor

PLACEHOLDER_RE = re.compile(r"\{[^{}]+\}")
QUERY_TEMPLATE = "/entity/query/{entity_type}"
DEFAULT_FORMAT = "json"


def expand_template(template: str, value: Any) -> str:
    """Replace the first ``{token}`` in a URL template with `value`."""
    return PLACEHOLDER_RE.sub(lambda _m: str(value), template, count=1)


def resource_key(name: str, entity_type: str, bundle: Optional[str]) -> str:
    """
    Registry key for a resource.
    'node:article' / bundle 'article' -> 'node.article'
    'comment' / bundle 'comment' -> 'comment'
    """
    family = name.split(":", 1)[0]
    if bundle and bundle != entity_type:
        return f"{family}.{bundle}"
    return family


def default_methods(entity_type: str) -> Dict[str, str]:
    """Drupal core REST routes for a content entity type."""
    item = f"/{entity_type}/{{{entity_type}}}"
    return {
        "GET": item,
        "POST": f"/entity/{entity_type}",
        "PATCH": item,
        "DELETE": item,
    }


def default_options(entity_type: str) -> str:
    return f"/entity/types/{entity_type}/{{bundle}}"


class BaseResource:
    kind: ClassVar[str] = "base"

    def __init__(
        self,
        base: str,
        credentials: Optional[Credentials | Mapping[str, str]],
        *,
        transport: HttpTransport,
        format: str = DEFAULT_FORMAT,
    ):
        if not base:
            raise MissingBaseUrlError("Base URL is required and missing.")
        self._base = base
        self._credentials = Credentials.coerce(credentials)
        self.transport = transport
        self.format = format

    def get_base(self) -> str:
        return self._base

    def set_base(self, base: str) -> None:
        self._base = base

    def get_credentials(self) -> Optional[Credentials]:
        return self._credentials

    def set_credentials(self, credentials: Optional[Credentials | Mapping[str, str]]) -> None:
        self._credentials = Credentials.coerce(credentials)

    def _absolute(self, path: str) -> str:
        return self._base.rstrip("/") + path

    def _params(self, extra: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"_format": self.format}
        if extra:
            params.update(extra)
        return params


class EntityResource(BaseResource):
    """CRUD client for a single entity type/bundle pair."""

    kind: ClassVar[str] = "entity"

    def __init__(
        self,
        base: str,
        credentials: Optional[Credentials | Mapping[str, str]],
        methods: Mapping[str, str],
        entity_type: str,
        bundle: str = "",
        options: str = "",
        *,
        transport: HttpTransport,
        format: str = DEFAULT_FORMAT,
    ):
        super().__init__(base, credentials, transport=transport, format=format)
        self.methods = {verb.upper(): tpl for verb, tpl in methods.items()}
        self.entity_type = entity_type
        self.bundle = bundle
        self.options = options

    def __repr__(self) -> str:
        return f"<EntityResource {self.name} base={self._base!r}>"

    @property
    def name(self) -> str:
        return f"{self.entity_type}.{self.bundle}" if self.bundle else self.entity_type

    def supports(self, method: str) -> bool:
        return method.upper() in self.methods

    def url_for(self, method: str, identifier: Any = None) -> str:
        method = method.upper()
        template = self.methods.get(method)
        if template is None:
            raise UnsupportedMethodError(self.name, method)
        if identifier is None:
            return self._absolute(template)
        return self._absolute(expand_template(template, identifier))

    async def get(self, identifier: Any) -> Any:
        return await self.transport.get(
            self.url_for("GET", identifier),
            params=self._params(),
            credentials=self._credentials,
            resource=self.name,
        )

    async def post(self, body: Any) -> Any:
        return await self.transport.post(
            self.url_for("POST"),
            json=body,
            params=self._params(),
            credentials=self._credentials,
            resource=self.name,
        )

    async def patch(self, identifier: Any, body: Any) -> Any:
        return await self.transport.patch(
            self.url_for("PATCH", identifier),
            json=body,
            params=self._params(),
            credentials=self._credentials,
            resource=self.name,
        )

    async def delete(self, identifier: Any) -> Any:
        return await self.transport.delete(
            self.url_for("DELETE", identifier),
            params=self._params(),
            credentials=self._credentials,
            resource=self.name,
        )

    async def get_field_metadata(self) -> Any:
        """Fetch the field definitions advertised by the options endpoint."""
        if not self.options:
            raise UnsupportedMethodError(self.name, "OPTIONS")
        path = expand_template(self.options, self.bundle or self.entity_type)
        return await self.transport.get(
            self._absolute(path),
            params=self._params(),
            credentials=self._credentials,
            resource=self.name,
        )


class EntityQuery(BaseResource):
    """Listing/search client; the entity type is chosen per call."""

    kind: ClassVar[str] = "query"

    def __repr__(self) -> str:
        return f"<EntityQuery base={self._base!r}>"

    def url_for(self, entity_type: str) -> str:
        return self._absolute(expand_template(QUERY_TEMPLATE, entity_type))

    async def query(
        self, entity_type: str, params: Optional[Mapping[str, Any]] = None
    ) -> Any:
        # Paging/filter params are forwarded untouched
        return await self.transport.get(
            self.url_for(entity_type),
            params=self._params(params),
            credentials=self._credentials,
            resource="query",
        )


def build_resource(
    descriptor: ResourceDescriptor,
    *,
    transport: HttpTransport,
    format: str = DEFAULT_FORMAT,
) -> EntityResource:
    return EntityResource(
        descriptor.base,
        descriptor.credentials,
        descriptor.methods,
        descriptor.entity_type,
        descriptor.bundle,
        descriptor.options,
        transport=transport,
        format=format,
    )
