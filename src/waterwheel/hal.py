"""HAL+JSON helpers and the embedded-resource resolver."""

from __future__ import annotations

import asyncio
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from .client import HttpTransport
from .errors import NotHALError
from .models import Credentials

FieldFilter = Union[str, Sequence[str], None]


def get_link(payload: Mapping[str, Any], relation: str) -> Optional[Dict[str, Any]]:
    """
    Safely retrieves a link object from the _links dictionary.
    """
    if not payload or "_links" not in payload:
        return None
    return payload["_links"].get(relation)


def get_link_href(payload: Mapping[str, Any], relation: str) -> Optional[str]:
    """
    Extracts the 'href' (URL) from a specific link relation.
    Example: get_link_href(node_json, 'self') -> 'http://drupal.dev/node/1?_format=hal_json'
    """
    link = get_link(payload, relation)
    return link.get("href") if link else None


def get_embedded(payload: Mapping[str, Any], relation: str) -> Any:
    """
    Extracts the raw value stored under _embedded for a relation.
    """
    if not payload or "_embedded" not in payload:
        return None
    return payload["_embedded"].get(relation)


def relation_name(relation: str) -> str:
    """
    Short name of a relation key.
    Example: 'http://drupal.dev/rest/relation/node/article/field_actor' -> 'field_actor'
    """
    return relation.rstrip("/").split("/")[-1]


def reference_href(reference: Mapping[str, Any]) -> Optional[str]:
    """Locator of an embedded reference: _links.self.href, else a bare href."""
    return get_link_href(reference, "self") or reference.get("href")


def _as_list(value: Any) -> List[Mapping[str, Any]]:
    if isinstance(value, Mapping):
        return [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [v for v in value if isinstance(v, Mapping)]


def _match_relation(embedded: Mapping[str, Any], name: str) -> Optional[str]:
    if name in embedded:
        return name
    for relation in embedded:
        if relation_name(relation) == name:
            return relation
    return None


def _iter_references(
    embedded: Mapping[str, Any], fields: FieldFilter
) -> Iterator[Tuple[str, Mapping[str, Any]]]:
    relations: Iterable[Optional[str]]
    if fields is None:
        relations = list(embedded)
    elif isinstance(fields, str):
        relations = [_match_relation(embedded, fields)]
    else:
        relations = [_match_relation(embedded, name) for name in fields]

    for relation in relations:
        if relation is None:
            continue
        for reference in _as_list(embedded[relation]):
            yield relation, reference


def embedded_references(
    document: Mapping[str, Any], fields: FieldFilter = None
) -> List[Mapping[str, Any]]:
    """
    Flatten _embedded into an ordered list of reference objects.
    Without `fields` relations follow document order; otherwise the caller's
    order. Relations missing from the document contribute nothing.
    """
    return [ref for _, ref in _iter_references(document["_embedded"], fields)]


async def fetch_embedded(
    transport: HttpTransport,
    document: Optional[Mapping[str, Any]],
    fields: FieldFilter = None,
    *,
    credentials: Optional[Credentials] = None,
) -> List[Any]:
    """
    Resolve the embedded references of a HAL+JSON document.

    The result starts with the document itself, followed by one fetched
    payload per reference, in traversal order. Fetches run concurrently;
    the first failure cancels the rest and propagates unchanged.
    """
    if not isinstance(document, Mapping) or not isinstance(
        document.get("_embedded"), Mapping
    ):
        raise NotHALError()

    hrefs = []
    for relation, reference in _iter_references(document["_embedded"], fields):
        href = reference_href(reference)
        if not href:
            raise NotHALError(f"Embedded reference under {relation!r} has no href")
        hrefs.append(href)

    tasks = [
        asyncio.ensure_future(
            transport.get(href, credentials=credentials, resource="embedded")
        )
        for href in hrefs
    ]
    try:
        resolved = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise
    return [dict(document), *resolved]


__all__ = [
    "get_link",
    "get_link_href",
    "get_embedded",
    "relation_name",
    "reference_href",
    "embedded_references",
    "fetch_embedded",
]
