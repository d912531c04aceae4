import pytest
import requests

from src.crawler.zotero_client import ZoteroClient, is_text_attachment
from src.model.fulltext import ZoteroCredentials
from src.service.document_fetch_service import DocumentFetcher, NotAPdfError

LONG = "attention heads only need local context in most layers. " * 10


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text="", content=b"", headers=None):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.content = content or text.encode()
        self.headers = headers or {}

    def json(self):
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeSession:
    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def get(self, url, headers=None, timeout=None, **kwargs):
        self.requests.append(("GET", url, headers))
        return self.routes[url]

    def head(self, url, headers=None, timeout=None, **kwargs):
        self.requests.append(("HEAD", url, headers))
        response = self.routes[url]
        if isinstance(response, Exception):
            raise response
        return response


def _child(key, content_type, item_type="attachment"):
    return {"key": key, "data": {"itemType": item_type, "contentType": content_type, "filename": f"{key}.txt"}}


BASE = "https://api.zotero.test/users/42/items"


def test_text_attachment_filter():
    assert is_text_attachment(_child("A", "application/pdf"))
    assert is_text_attachment(_child("B", "text/plain"))
    assert not is_text_attachment(_child("C", "image/png"))
    assert not is_text_attachment(_child("D", "text/plain", item_type="note"))


def test_list_attachments_keeps_order_and_isolates_failures():
    session = FakeSession({
        f"{BASE}/ITEM/children": FakeResponse(json_data=[
            _child("BROKEN", "text/plain"),
            _child("IMG", "image/png"),
            _child("SHORT", "text/html"),
            _child("GOOD", "text/plain"),
        ]),
        f"{BASE}/BROKEN/file": FakeResponse(status_code=404),
        f"{BASE}/SHORT/file": FakeResponse(text="tiny"),
        f"{BASE}/GOOD/file": FakeResponse(text=LONG),
    })
    client = ZoteroClient(api_base_url="https://api.zotero.test/", timeout=5, session=session)

    attachments = client.list_attachments(ZoteroCredentials(token="secret", user_id="42"), "ITEM")

    assert [a.key for a in attachments] == ["BROKEN", "SHORT", "GOOD"]
    assert attachments[0].error and not attachments[0].has_full_text
    assert not attachments[1].has_full_text
    assert attachments[1].text_quality.word_count == 1
    assert attachments[2].has_full_text
    assert attachments[2].full_text == LONG
    assert session.requests[0][2]["Authorization"] == "Bearer secret"


def test_group_library_path():
    creds = ZoteroCredentials(token="t", userId="42", libraryType="group", libraryId="7")
    assert creds.library_path == "groups/7"


def test_fetcher_rejects_non_pdf_body():
    session = FakeSession({
        "https://example.org/p.pdf": FakeResponse(content=b"<html>captcha</html>", headers={"Content-Type": "text/html"}),
    })
    with pytest.raises(NotAPdfError):
        DocumentFetcher(timeout=5, user_agent="test", session=session).fetch_pdf("https://example.org/p.pdf")


def test_fetcher_content_type_check():
    session = FakeSession({
        "https://example.org/a": FakeResponse(headers={"Content-Type": "application/pdf"}),
        "https://example.org/b": FakeResponse(status_code=403),
        "https://example.org/c": requests.ConnectionError("refused"),
    })
    fetcher = DocumentFetcher(timeout=5, user_agent="test", session=session)
    assert fetcher.head_content_type("https://example.org/a") == "application/pdf"
    assert fetcher.head_content_type("https://example.org/b") is None
    assert fetcher.head_content_type("https://example.org/c") is None
    assert DocumentFetcher.is_pdf_url("https://example.org/files/Paper.PDF?dl=1")
    assert not DocumentFetcher.is_pdf_url("https://example.org/abs/1234")


def test_attachment_files_download_on_demand():
    session = FakeSession({
        f"{BASE}/ITEM/children": FakeResponse(json_data=[_child("FIRST", "text/plain"), _child("SECOND", "text/plain")]),
        f"{BASE}/FIRST/file": FakeResponse(text=LONG),
        f"{BASE}/SECOND/file": FakeResponse(text=LONG),
    })
    client = ZoteroClient(api_base_url="https://api.zotero.test", timeout=5, session=session)

    first = next(client.iter_attachments(ZoteroCredentials(token="t", user_id="42"), "ITEM"))

    assert first.key == "FIRST"
    assert [url for _, url, _ in session.requests] == [f"{BASE}/ITEM/children", f"{BASE}/FIRST/file"]


class EncodedResponse(FakeResponse):
    """Decodes `content` with `encoding`, like requests does for `.text`."""

    def __init__(self, content, headers, apparent_encoding):
        super().__init__(content=content, headers=headers)
        self.encoding = "ISO-8859-1"
        self.apparent_encoding = apparent_encoding

    @property
    def text(self):
        return self.content.decode(self.encoding)

    @text.setter
    def text(self, value):
        pass


def test_html_without_charset_uses_detected_encoding():
    body = "<p>Ergebnisse für größere Modelle</p>".encode("utf-8")
    session = FakeSession({
        "https://example.org/bare": EncodedResponse(body, {"Content-Type": "text/html"}, "utf-8"),
        "https://example.org/latin": EncodedResponse(
            "<p>café</p>".encode("latin-1"), {"Content-Type": "text/html; charset=ISO-8859-1"}, "utf-8"
        ),
    })
    fetcher = DocumentFetcher(timeout=5, user_agent="test", session=session)

    assert "größere" in fetcher.fetch_html("https://example.org/bare")
    # a declared charset wins
    assert fetcher.fetch_html("https://example.org/latin") == "<p>café</p>"
