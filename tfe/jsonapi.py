"""
JSON:API Codec.

Encodes pydantic models as JSON:API documents and decodes documents back
into models.

A resource is declared as a Resource subclass naming its JSON:API type.
Plain fields are attributes (exchanged in kebab-case), fields declared
with relation() are relationships:

    class Organization(Resource):
        resource_type: ClassVar[str] = "organizations"

        name: str | None = None


    class Workspace(Resource):
        resource_type: ClassVar[str] = "workspaces"

        name: str | None = None
        auto_apply: bool | None = None
        organization: Organization | None = relation()

Documents:
    {"data": {"type": ..., "id": ..., "attributes": {...},
              "relationships": {"name": {"data": {"type": ..., "id": ...}}}},
     "included": [...]}
"""

import json
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from tfe.core.exceptions import DecodeError, EncodeError

MEDIA_TYPE = "application/vnd.api+json"

_RELATION_KEY = "jsonapi"
_RELATION_VALUE = "relation"


def to_kebab(name: str) -> str:
    """Convert a field name to its JSON:API member name."""
    return name.replace("_", "-")


class Resource(BaseModel):
    """Base model for JSON:API resource objects."""

    resource_type: ClassVar[str] = ""

    id: str | None = None

    model_config = ConfigDict(
        alias_generator=to_kebab,
        populate_by_name=True,
        extra="ignore",
    )

    @classmethod
    def relation_fields(cls) -> dict[str, str]:
        """Map relationship field names to their member names."""
        relations: dict[str, str] = {}
        for name, field in cls.model_fields.items():
            extra = field.json_schema_extra
            if isinstance(extra, dict) and extra.get(_RELATION_KEY) == _RELATION_VALUE:
                relations[name] = field.alias or name
        return relations


ResourceT = TypeVar("ResourceT", bound=Resource)


def relation(*, many: bool = False, **kwargs: Any) -> Any:
    """
    Declare a relationship field.

    Args:
        many: To-many relationship (defaults to an empty list) instead of
            to-one (defaults to None).
        **kwargs: Passed through to pydantic.Field.
    """
    extra = {_RELATION_KEY: _RELATION_VALUE}
    if many:
        return Field(default_factory=list, json_schema_extra=extra, **kwargs)
    return Field(default=None, json_schema_extra=extra, **kwargs)


# =============================================================================
# Encoding
# =============================================================================


def marshal_payload(value: Resource | list[Resource]) -> bytes:
    """
    Encode a resource, or a list of resources, as a JSON:API document.

    Related resources that carry attributes or relationships of their own
    are added once to the "included" section.

    Raises:
        EncodeError: If a value is not a typed Resource, or a related
            resource has no id.
    """
    included: dict[tuple[str, str], dict[str, Any]] = {}

    if isinstance(value, list):
        data: Any = [_marshal_node(item, included) for item in value]
    else:
        data = _marshal_node(value, included)

    document: dict[str, Any] = {"data": data}
    if included:
        document["included"] = list(included.values())

    try:
        return json.dumps(document).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Could not serialize document: {e}") from e


def _marshal_node(
    resource: Any, included: dict[tuple[str, str], dict[str, Any]]
) -> dict[str, Any]:
    if not isinstance(resource, Resource):
        raise EncodeError(f"Expected a Resource, got {type(resource).__name__}")
    if not resource.resource_type:
        raise EncodeError(f"{type(resource).__name__} does not declare a resource_type")

    relations = resource.relation_fields()
    node: dict[str, Any] = {"type": resource.resource_type}
    if resource.id is not None:
        node["id"] = resource.id

    attributes = resource.model_dump(
        mode="json",
        by_alias=True,
        exclude={"id", *relations},
        exclude_none=True,
    )
    if attributes:
        node["attributes"] = attributes

    relationships: dict[str, Any] = {}
    for name, member in relations.items():
        related = getattr(resource, name)
        if related is None:
            continue
        if isinstance(related, list):
            linkage: Any = [_marshal_linkage(item, included) for item in related]
        else:
            linkage = _marshal_linkage(related, included)
        relationships[member] = {"data": linkage}
    if relationships:
        node["relationships"] = relationships

    return node


def _marshal_linkage(
    related: Any, included: dict[tuple[str, str], dict[str, Any]]
) -> dict[str, str]:
    node = _marshal_node(related, included)
    if "id" not in node:
        raise EncodeError(f"Related {node['type']} resource has no id")

    key = (node["type"], node["id"])
    if ("attributes" in node or "relationships" in node) and key not in included:
        included[key] = node
    return {"type": node["type"], "id": node["id"]}


# =============================================================================
# Decoding
# =============================================================================


def unmarshal_payload(data: bytes | str, model: type[ResourceT]) -> ResourceT:
    """
    Decode a document holding a single resource object.

    Raises:
        DecodeError: If the document is malformed, holds a list, or its
            resource does not fit the model.
    """
    document = _load_document(data)
    primary = document.get("data")
    if not isinstance(primary, dict):
        raise DecodeError(f"Expected a single {model.resource_type} resource object")
    return _unmarshal_node(primary, model, _index_included(document))


def unmarshal_many_payload(data: bytes | str, model: type[ResourceT]) -> list[ResourceT]:
    """
    Decode a document holding a list of resource objects, keeping their order.

    Raises:
        DecodeError: If the document is malformed, holds a single object,
            or one of its resources does not fit the model.
    """
    document = _load_document(data)
    primary = document.get("data")
    if not isinstance(primary, list):
        raise DecodeError(f"Expected a list of {model.resource_type} resource objects")
    included = _index_included(document)
    return [_unmarshal_node(node, model, included) for node in primary]


def _load_document(data: bytes | str) -> dict[str, Any]:
    try:
        document = json.loads(data)
    except ValueError as e:
        raise DecodeError(f"Invalid JSON document: {e}") from e
    if not isinstance(document, dict) or "data" not in document:
        raise DecodeError("Document has no top-level data member")
    return document


def _index_included(document: dict[str, Any]) -> dict[tuple[str, str], dict[str, Any]]:
    included = document.get("included") or []
    if not isinstance(included, list):
        raise DecodeError("Document included member must be a list")
    index: dict[tuple[str, str], dict[str, Any]] = {}
    for node in included:
        if not isinstance(node, dict) or "id" not in node:
            continue
        if not isinstance(node.get("type"), str):
            raise DecodeError("Resource object must be a JSON object with a type")
        index[(node["type"], str(node["id"]))] = node
    return index


def _unmarshal_node(
    node: Any,
    model: type[ResourceT],
    included: dict[tuple[str, str], dict[str, Any]],
) -> ResourceT:
    if not isinstance(node, dict) or "type" not in node:
        raise DecodeError("Resource object must be a JSON object with a type")
    if node["type"] != model.resource_type:
        raise DecodeError(
            f"Trying to decode an object of type {node['type']!r} "
            f"into {model.__name__} ({model.resource_type!r})"
        )

    fields = _node_fields(node, included, visiting=frozenset())
    try:
        return model.model_validate(fields)
    except PydanticValidationError as e:
        raise DecodeError(f"Invalid {model.resource_type} resource: {e}") from e


def _node_fields(
    node: dict[str, Any],
    included: dict[tuple[str, str], dict[str, Any]],
    visiting: frozenset[tuple[str, str]],
) -> dict[str, Any]:
    """Flatten a resource object into a dict the target model can validate."""
    attributes = node.get("attributes") or {}
    if not isinstance(attributes, dict):
        raise DecodeError("Resource attributes must be a JSON object")

    fields: dict[str, Any] = dict(attributes)
    if node.get("id") is not None:
        fields["id"] = str(node["id"])

    key = (node.get("type"), fields.get("id"))
    visiting = visiting | {key}

    relationships = node.get("relationships") or {}
    if not isinstance(relationships, dict):
        raise DecodeError("Resource relationships must be a JSON object")

    for member, relationship in relationships.items():
        # Relationships may only carry links.
        if not isinstance(relationship, dict) or "data" not in relationship:
            continue
        linkage = relationship["data"]
        if linkage is None:
            fields[member] = None
        elif isinstance(linkage, list):
            fields[member] = [_resolve(item, included, visiting) for item in linkage]
        else:
            fields[member] = _resolve(linkage, included, visiting)

    return fields


def _resolve(
    linkage: Any,
    included: dict[tuple[str, str], dict[str, Any]],
    visiting: frozenset[tuple[str, str]],
) -> dict[str, Any]:
    if not isinstance(linkage, dict) or "id" not in linkage:
        raise DecodeError("Relationship linkage must be an object with an id")
    if not isinstance(linkage.get("type"), str):
        raise DecodeError("Resource object must be a JSON object with a type")

    key = (linkage.get("type"), str(linkage["id"]))
    node = included.get(key)
    if node is None or key in visiting:
        return {"id": key[1]}
    return _node_fields(node, included, visiting)
