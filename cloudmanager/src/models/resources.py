from pydantic import BaseModel, Field, PrivateAttr
from typing import Optional, List, Dict, Any, Union

from cloudmanager.src.constants import Rel
from cloudmanager.src.hal import HalDocument, Link

class HalResource(BaseModel):
    """Snapshot of a HAL resource that keeps its links reachable."""

    _document: HalDocument = PrivateAttr(default_factory=lambda: HalDocument({}))

    class Config:
        extra = "allow"
        populate_by_name = True

    @classmethod
    def from_document(cls, document: HalDocument):
        resource = cls.model_validate(document.properties)
        resource._document = document
        return resource

    @property
    def document(self) -> HalDocument:
        return self._document

    def link(self, rel: Union[Rel, str]) -> Optional[Link]:
        return self._document.link(rel)

    def link_array(self, rel: Union[Rel, str]) -> List[Link]:
        return self._document.link_array(rel)

class Program(HalResource):
    id: str
    name: Optional[str] = None

class Phase(BaseModel):
    type: str
    name: Optional[str] = None
    branch: Optional[str] = None
    repository_id: Optional[str] = Field(default=None, alias="repositoryId")

    class Config:
        extra = "allow"
        populate_by_name = True

class Pipeline(HalResource):
    id: str
    name: Optional[str] = None
    status: Optional[str] = None
    phases: List[Phase] = []

    @property
    def busy(self) -> bool:
        return self.status == "BUSY"

class Environment(HalResource):
    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    program_id: Optional[str] = Field(default=None, alias="programId")
    namespace: Optional[str] = None
    cluster: Optional[str] = None
    available_log_options: List[Dict[str, Any]] = Field(default=[], alias="availableLogOptions")

class LogDownload(HalResource):
    service: str
    name: str
    date: str

class DownloadResult(BaseModel):
    service: str
    name: str
    date: str
    index: int
    path: str
    url: str

    class Config:
        extra = "allow"
