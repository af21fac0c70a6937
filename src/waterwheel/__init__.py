"""waterwheel package exports."""

from .client import (
    HttpTransport,
    WaterwheelClientError,
    WaterwheelError,
    WaterwheelHTTPError,
    WaterwheelParseError,
)
from .config import credentials_from_env, load_env_config
from .errors import (
    NOT_HAL_MESSAGE,
    CatalogEntryError,
    MissingBaseUrlError,
    MissingCredentialsError,
    MissingResourcesError,
    NotHALError,
    UnsupportedMethodError,
)
from .hal import (
    embedded_references,
    fetch_embedded,
    get_embedded,
    get_link,
    get_link_href,
    reference_href,
    relation_name,
)
from .models import CatalogEntry, Credentials, ResourceDescriptor
from .registry import CATALOG_PATH, QUERY_KEY, Waterwheel
from .resources import (
    BaseResource,
    EntityQuery,
    EntityResource,
    build_resource,
    resource_key,
)

__all__ = [
    # Registry
    "Waterwheel",
    "CATALOG_PATH",
    "QUERY_KEY",
    # Resources
    "BaseResource",
    "EntityResource",
    "EntityQuery",
    "build_resource",
    "resource_key",
    # Models
    "Credentials",
    "ResourceDescriptor",
    "CatalogEntry",
    # Transport
    "HttpTransport",
    # Exceptions
    "WaterwheelError",
    "WaterwheelClientError",
    "WaterwheelHTTPError",
    "WaterwheelParseError",
    "MissingBaseUrlError",
    "MissingCredentialsError",
    "MissingResourcesError",
    "CatalogEntryError",
    "UnsupportedMethodError",
    "NotHALError",
    "NOT_HAL_MESSAGE",
    # HAL utilities
    "get_link",
    "get_link_href",
    "get_embedded",
    "relation_name",
    "reference_href",
    "embedded_references",
    "fetch_embedded",
    # Config helpers
    "load_env_config",
    "credentials_from_env",
]
