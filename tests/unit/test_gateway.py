"""Tests for client-side document gateways."""

import json

import httpx
import pytest

from pmtools.errors import LoadError, SaveError
from pmtools.models.common import DocumentKind
from pmtools.models.document import CodeReviewDocument, PRDDocument
from pmtools.store.gateway import HttpDocumentGateway, RepositoryGateway
from pmtools.store.inmemory import InMemoryDocumentRepository

REVIEW = DocumentKind.code_review


def _gateway(handler) -> HttpDocumentGateway:  # type: ignore[no-untyped-def]
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpDocumentGateway(base_url="http://testserver", client=client)


class TestHttpDocumentGateway:
    """Gateway over the REST routes."""

    @pytest.mark.asyncio
    async def test_save_puts_existing_document(self) -> None:
        calls: list[tuple[str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            return httpx.Response(200, json=json.loads(request.content))

        gateway = _gateway(handler)
        await gateway.save(REVIEW, CodeReviewDocument(id="d1"))

        assert calls == [("PUT", "/api/reviews/d1")]
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_save_falls_back_to_post_for_new_document(self) -> None:
        calls: list[tuple[str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            if request.method == "PUT":
                return httpx.Response(404, json={"error": "Not found"})
            return httpx.Response(201, json=json.loads(request.content))

        gateway = _gateway(handler)
        await gateway.save(DocumentKind.prd, PRDDocument(id="p1"))

        assert calls == [("PUT", "/api/prds/p1"), ("POST", "/api/prds")]
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_save_sends_camel_case_body(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=bodies[-1])

        gateway = _gateway(handler)
        await gateway.save(REVIEW, CodeReviewDocument(id="d1"))

        assert bodies[0]["type"] == "code-review"
        assert "modifiedAt" in bodies[0]
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_save_failure_raises_save_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "Failed to update review"})

        gateway = _gateway(handler)
        with pytest.raises(SaveError):
            await gateway.save(REVIEW, CodeReviewDocument(id="d1"))
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_unreachable_store_raises_save_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        gateway = _gateway(handler)
        with pytest.raises(SaveError):
            await gateway.save(REVIEW, CodeReviewDocument(id="d1"))
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_fetch_parses_document(self) -> None:
        stored = CodeReviewDocument(id="d1", title="T").model_dump(mode="json", by_alias=True)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=stored)

        gateway = _gateway(handler)
        doc = await gateway.fetch(REVIEW, "d1")

        assert isinstance(doc, CodeReviewDocument)
        assert doc.title == "T"
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_fetch_unknown_raises_load_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "Not found"})

        gateway = _gateway(handler)
        with pytest.raises(LoadError):
            await gateway.fetch(REVIEW, "missing")
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_list_and_delete(self) -> None:
        stored = [PRDDocument(id="p1").model_dump(mode="json", by_alias=True)]

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "DELETE":
                return httpx.Response(204)
            return httpx.Response(200, json=stored)

        gateway = _gateway(handler)
        docs = await gateway.list(DocumentKind.prd)
        await gateway.delete(DocumentKind.prd, "p1")

        assert [d.id for d in docs] == ["p1"]
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_fetch_non_json_body_raises_load_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>proxy error</html>")

        gateway = _gateway(handler)
        with pytest.raises(LoadError):
            await gateway.fetch(REVIEW, "abc")
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_fetch_wrong_document_type_raises_load_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"type": "prd", "id": "abc"})

        gateway = _gateway(handler)
        with pytest.raises(LoadError):
            await gateway.fetch(REVIEW, "abc")
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_list_non_array_body_raises_load_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error": "not a list"})

        gateway = _gateway(handler)
        with pytest.raises(LoadError):
            await gateway.list(DocumentKind.prd)
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_aclose_only_closes_own_client(self) -> None:
        injected = httpx.AsyncClient()
        borrowed = HttpDocumentGateway(base_url="http://testserver", client=injected)
        owned = HttpDocumentGateway(base_url="http://testserver")

        await borrowed.aclose()
        await owned.aclose()

        assert not injected.is_closed
        assert owned.client.is_closed
        await injected.aclose()


class TestRepositoryGateway:
    """In-process gateway."""

    @pytest.mark.asyncio
    async def test_save_creates_then_replaces(self, repo: InMemoryDocumentRepository) -> None:
        gateway = RepositoryGateway(repo)

        await gateway.save(REVIEW, CodeReviewDocument(id="d1", title="First"))
        await gateway.save(REVIEW, CodeReviewDocument(id="d1", title="Second"))

        docs = await gateway.list(REVIEW)
        assert [(d.id, d.title) for d in docs] == [("d1", "Second")]

    @pytest.mark.asyncio
    async def test_fetch_unknown_raises_load_error(self, repo: InMemoryDocumentRepository) -> None:
        with pytest.raises(LoadError):
            await RepositoryGateway(repo).fetch(REVIEW, "missing")

    @pytest.mark.asyncio
    async def test_delete_unknown_raises_save_error(self, repo: InMemoryDocumentRepository) -> None:
        with pytest.raises(SaveError):
            await RepositoryGateway(repo).delete(REVIEW, "missing")
