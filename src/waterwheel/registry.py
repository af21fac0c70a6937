from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from . import hal
from .client import HttpTransport
from .config import credentials_from_env, load_env_config
from .errors import (
    CatalogEntryError,
    MissingBaseUrlError,
    MissingCredentialsError,
    MissingResourcesError,
)
from .logging import log_event
from .models import CatalogEntry, Credentials, ResourceDescriptor
from .resources import (
    DEFAULT_FORMAT,
    BaseResource,
    EntityQuery,
    EntityResource,
    build_resource,
    default_methods,
    default_options,
    resource_key,
)

CATALOG_PATH = "/entity/types"
QUERY_KEY = "query"

log = logging.getLogger("waterwheel.registry")


class Waterwheel:
    """
    Registry of resource clients for one remote site.

    Keys are dotted names ('comment', 'node.article'); 'query' always maps to
    the EntityQuery client. The key -> client mapping is replaced wholesale on
    every update, so readers never observe a partial registration.
    """

    def __init__(
        self,
        base: str,
        credentials: Optional[Credentials | Mapping[str, str]] = None,
        resources: Optional[Mapping[str, Any]] = None,
        *,
        transport: Optional[HttpTransport] = None,
        format: str = DEFAULT_FORMAT,
    ):
        if not base:
            raise MissingBaseUrlError("Missing base path.")
        if credentials is None and resources is None:
            raise MissingCredentialsError("Missing credentials.")

        self.base = base
        self.credentials = Credentials.coerce(credentials)
        self.format = format

        self._owns_transport = transport is None
        self.transport = transport or HttpTransport()

        self._resources: Dict[str, BaseResource] = {
            QUERY_KEY: EntityQuery(
                base, self.credentials, transport=self.transport, format=format
            )
        }
        if resources is not None:
            self._install(self._build_from_catalog(resources))

    @classmethod
    def from_env(cls, **kwargs: Any) -> "Waterwheel":
        base_url, _, _ = load_env_config()
        return cls(base_url, credentials_from_env(use_dotenv=False), **kwargs)

    def __repr__(self) -> str:
        return f"<Waterwheel base={self.base!r} resources={len(self._resources)}>"

    async def aclose(self) -> None:
        if self._owns_transport:
            await self.transport.aclose()

    async def __aenter__(self) -> "Waterwheel":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- Lookup ------------------------------------------------------------ #

    @property
    def resources(self) -> Mapping[str, BaseResource]:
        """Read-only view of the current key -> client mapping."""
        return MappingProxyType(self._resources)

    @property
    def query(self) -> EntityQuery:
        resource = self._resources[QUERY_KEY]
        if not isinstance(resource, EntityQuery):
            raise TypeError(f"{QUERY_KEY!r} was overwritten by {resource!r}")
        return resource

    def get_resource(self, key: str) -> Optional[BaseResource]:
        return self._resources.get(key)

    def __getitem__(self, key: str) -> BaseResource:
        return self._resources[key]

    def __contains__(self, key: object) -> bool:
        return key in self._resources

    def get_available_resources(self) -> List[str]:
        return sorted(self._resources)

    # --- Registration ------------------------------------------------------ #

    def _install(self, built: Mapping[str, BaseResource]) -> None:
        # Copy-on-write: swap in a fresh dict, never mutate the live one
        merged = dict(self._resources)
        merged.update(built)
        self._resources = merged

    def _build_from_catalog(self, catalog: Any) -> Dict[str, EntityResource]:
        if not isinstance(catalog, Mapping):
            raise CatalogEntryError(
                CATALOG_PATH, f"expected an object, got {type(catalog).__name__}"
            )
        built: Dict[str, EntityResource] = {}
        for name, raw in catalog.items():
            try:
                entry = CatalogEntry.model_validate(raw)
            except ValidationError as exc:
                raise CatalogEntryError(name, "entityType is required") from exc

            bundle = entry.effective_bundle
            built[resource_key(name, entry.entity_type, bundle)] = EntityResource(
                self.base,
                self.credentials,
                default_methods(entry.entity_type),
                entry.entity_type,
                bundle,
                default_options(entry.entity_type),
                transport=self.transport,
                format=self.format,
            )
        return built

    def add_resources(
        self, resources: Optional[Mapping[str, Mapping[str, Any]]] = None
    ) -> Optional[MissingResourcesError]:
        """
        Register resource clients from descriptors keyed by resource name.
        Existing keys are overwritten. Descriptors lacking base or credentials
        inherit the registry's own. Returns an error value when called with
        nothing to register.
        """
        if resources is None:
            return MissingResourcesError("No resources were provided.")

        built: Dict[str, EntityResource] = {}
        for name, entry in resources.items():
            descriptor = ResourceDescriptor.model_validate(
                {
                    **entry,
                    "base": entry.get("base") or self.base,
                    "credentials": (
                        entry["credentials"]
                        if entry.get("credentials") is not None
                        else self.credentials
                    ),
                }
            )
            key = resource_key(name, descriptor.entity_type, descriptor.bundle)
            built[key] = build_resource(
                descriptor, transport=self.transport, format=self.format
            )

        self._install(built)
        log_event("resources_registered", log, keys=built)
        return None

    # --- Remote catalog ---------------------------------------------------- #

    async def fetch_resources(self) -> Any:
        """GET the remote entity type catalog, returned verbatim."""
        return await self.transport.get(
            self.base.rstrip("/") + CATALOG_PATH,
            params={"_format": self.format},
            credentials=self.credentials,
            resource="catalog",
        )

    async def populate_resources(self) -> List[str]:
        """
        Fetch the catalog and register one client per entry.
        An invalid entry aborts the whole population; nothing is registered.
        """
        catalog = await self.fetch_resources()
        built = self._build_from_catalog(catalog)
        self._install(built)
        log_event("resources_populated", log, keys=built, base=self.base)
        return self.get_available_resources()

    # --- HAL ----------------------------------------------------------------- #

    async def fetch_embedded(
        self, document: Optional[Mapping[str, Any]] = None, fields: hal.FieldFilter = None
    ) -> List[Any]:
        return await hal.fetch_embedded(
            self.transport, document, fields, credentials=self.credentials
        )
