"""Deterministic object keys for case content.

Keys follow ``cases/{case}/{owner|shared}/{resource_type}/{resource}/{artifact}``
so an upload and every later download agree on the location without an index
lookup.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

KEY_ROOT = "cases"
SHARED_SEGMENT = "shared"
IMAGES_SEGMENT = "images"


class ResourceType(str, Enum):
    CONTEMPORANEOUS_NOTES = "contemporaneous-notes"
    TABS = "tabs"


DEFAULT_ARTIFACTS = {
    ResourceType.CONTEMPORANEOUS_NOTES: "note.txt",
    ResourceType.TABS: "content.txt",
}


def _check_segment(value: str, label: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{label} must be a non-empty string")
    if "/" in value or "\\" in value or value in {".", ".."}:
        raise ValueError(f"{label} is not a valid key segment: {value!r}")
    return value


@dataclass(frozen=True)
class Personal:
    """Content owned by a single user within a case."""

    case_id: str
    owner_id: str

    kind = "personal"

    @property
    def owner_segment(self) -> str:
        return self.owner_id


@dataclass(frozen=True)
class Shared:
    """Content visible to every user with access to the case."""

    case_id: str

    kind = "shared"
    owner_id = None

    @property
    def owner_segment(self) -> str:
        return SHARED_SEGMENT


Scope = Union[Personal, Shared]


def scope_prefix(scope: Scope) -> str:
    case_id = _check_segment(scope.case_id, "case id")
    owner = _check_segment(scope.owner_segment, "owner id")
    return f"{KEY_ROOT}/{case_id}/{owner}"


def object_key(
    scope: Scope,
    resource_type: ResourceType | str,
    resource_id: str,
    artifact: str,
) -> str:
    resource = ResourceType(resource_type).value
    return "/".join([
        scope_prefix(scope),
        resource,
        _check_segment(resource_id, "resource id"),
        _check_segment(artifact, "artifact name"),
    ])


def content_key(scope: Scope, resource_type: ResourceType | str, resource_id: str) -> str:
    """Key of the text body of a note or tab."""
    resource = ResourceType(resource_type)
    return object_key(scope, resource, resource_id, DEFAULT_ARTIFACTS[resource])


def image_key(scope: Scope, resource_type: ResourceType | str, file_name: str) -> str:
    """Key of an image embedded in notes or tabs.

    Images are shared by every note (or tab) of the scope, so the key carries
    no resource id: ``cases/{case}/{owner|shared}/{resource_type}/images/{file_name}``.
    """
    return "/".join([
        scope_prefix(scope),
        ResourceType(resource_type).value,
        IMAGES_SEGMENT,
        _check_segment(file_name, "file name"),
    ])
