"""
Resource path convention.

The item path is ``prefix + version + "/" + name``, with ``/:id`` appended
when it carries no identifier placeholder yet. Derived paths:

    items    item path without the placeholder (collection operations)
    count    items + "/count"
    shallow  item + "/shallow"
"""

from dataclasses import dataclass

ID_PLACEHOLDER = "/:id"
DJANGO_ID_CONVERTER = "<str:id>"


@dataclass(frozen=True)
class ResourcePaths:
    item: str
    items: str
    count: str
    shallow: str


def build_resource_paths(prefix: str, version: str, name: str) -> ResourcePaths:
    """Compose the paths of a resource."""
    item = f"{prefix}{version}/{name}"
    if ID_PLACEHOLDER not in item:
        item += ID_PLACEHOLDER
    items = item.replace(ID_PLACEHOLDER, "", 1)
    return ResourcePaths(
        item=item,
        items=items,
        count=f"{items}/count",
        shallow=f"{item}/shallow",
    )


def to_django_route(path: str) -> str:
    """Convert ``/api/v1/Person/:id`` into ``api/v1/Person/<str:id>``."""
    return path.lstrip("/").replace(ID_PLACEHOLDER[1:], DJANGO_ID_CONVERTER, 1)
