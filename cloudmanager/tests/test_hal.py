"""Tests for the HAL document wrapper."""

from cloudmanager.src import hal
from cloudmanager.src.constants import Rel

DOC = {
    "id": "1",
    "name": "thing",
    "_links": {
        "self": {"href": "/api/thing/1"},
        Rel.LOGS_DOWNLOAD.value: [{"href": "/a"}, {"href": "/b"}],
        Rel.LOGS.value: {"href": "/api/logs{?service,name,days}", "templated": True},
    },
    "_embedded": {
        "children": [{"id": "c1"}, {"id": "c2"}],
    },
}

def test_properties_exclude_hal_sections():
    document = hal.parse(DOC)
    assert document.properties == {"id": "1", "name": "thing"}
    assert document.get("name") == "thing"

def test_single_and_array_links():
    document = hal.parse(DOC)
    assert document.link(Rel.SELF).href == "/api/thing/1"
    assert document.link("self").href == "/api/thing/1"
    assert [link.href for link in document.link_array(Rel.LOGS_DOWNLOAD)] == ["/a", "/b"]
    assert document.link(Rel.LOGS_DOWNLOAD).href == "/a"

def test_missing_link():
    document = hal.parse(DOC)
    assert document.link(Rel.CANCEL) is None
    assert document.link_array(Rel.CANCEL) == []

def test_embedded_array():
    document = hal.parse(DOC)
    children = document.embedded_array("children")
    assert [child.get("id") for child in children] == ["c1", "c2"]
    assert document.embedded_array("missing") is None

def test_templated_link_expansion():
    link = hal.parse(DOC).link(Rel.LOGS)
    assert link.templated is True
    assert link.expand(service="author", name="aemerror", days=2) == (
        "/api/logs?service=author&name=aemerror&days=2"
    )

def test_documents_compare_by_content():
    assert hal.parse(DOC) == hal.parse(dict(DOC))
    assert hal.parse(DOC) != hal.parse({"id": "2"})

def test_empty_body():
    document = hal.parse(None)
    assert document.properties == {}
    assert document.link(Rel.SELF) is None
    assert document.embedded_array("programs") is None
