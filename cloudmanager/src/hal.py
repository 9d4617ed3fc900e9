"""
HAL document wrapper used to navigate API resources.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from uritemplate import URITemplate

from cloudmanager.src.constants import Rel

class Link(BaseModel):
    href: str
    templated: bool = False
    name: Optional[str] = None

    def expand(self, **variables: Any) -> str:
        """Expand the href as an RFC 6570 template."""
        return URITemplate(self.href).expand(**variables)

def _rel_key(rel: Union[Rel, str]) -> str:
    return rel.value if isinstance(rel, Rel) else rel

class HalDocument:
    """
    Read-only view over a parsed HAL JSON body.
    Properties are everything outside `_links` and `_embedded`.
    """

    def __init__(self, data: Optional[Dict[str, Any]]):
        self._data = data or {}
        self._links = self._data.get("_links") or {}
        self._embedded = self._data.get("_embedded") or {}

    @property
    def properties(self) -> Dict[str, Any]:
        return {k: v for k, v in self._data.items() if k not in ("_links", "_embedded")}

    @property
    def raw(self) -> Dict[str, Any]:
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def link_array(self, rel: Union[Rel, str]) -> List[Link]:
        value = self._links.get(_rel_key(rel))
        if value is None:
            return []
        if isinstance(value, dict):
            value = [value]
        return [Link.model_validate(item) for item in value]

    def link(self, rel: Union[Rel, str]) -> Optional[Link]:
        links = self.link_array(rel)
        return links[0] if links else None

    def embedded_array(self, name: str) -> Optional[List["HalDocument"]]:
        """Embedded resources under `name`, or None if the response has none."""
        value = self._embedded.get(name)
        if value is None:
            return None
        if isinstance(value, dict):
            value = [value]
        return [HalDocument(item) for item in value]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HalDocument):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"HalDocument({self.properties!r})"

def parse(data: Optional[Dict[str, Any]]) -> HalDocument:
    return HalDocument(data)
