import json

import httpx
import pytest

from search_tasks import SearchClient, SimilarDocumentsQuery


def _client(handler, **kwargs):
    return SearchClient(
        base_url="http://search.test/",
        api_key=kwargs.pop("api_key", "masterKey"),
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_fetch_task_route_and_headers():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"uid": 5, "status": "processing"})

    async with _client(handler) as client:
        body = await client.fetch_task(5)

    assert body == {"uid": 5, "status": "processing"}
    assert seen[0].url == "http://search.test/tasks/5"
    assert seen[0].headers["Authorization"] == "Bearer masterKey"


@pytest.mark.asyncio
async def test_fetch_task_404_raises_http_status_error():
    def handler(request):
        return httpx.Response(404, json={"code": "task_not_found"})

    async with _client(handler) as client:
        with pytest.raises(httpx.HTTPStatusError) as info:
            await client.fetch_task(99)

    assert info.value.response.status_code == 404


@pytest.mark.asyncio
async def test_get_indexes_passes_limit():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"results": [], "total": 0})

    async with _client(handler) as client:
        await client.get_indexes(limit=100)

    assert seen[0].url.params["limit"] == "100"


@pytest.mark.asyncio
async def test_search_similar_documents_sends_query_payload():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"hits": [{"id": "2"}], "id": "1"})

    query = SimilarDocumentsQuery(id="1", filter="brand = luxe", limit=3)
    async with _client(handler) as client:
        result = await client.search_similar_documents(
            "products", query.to_payload()
        )

    assert result["hits"] == [{"id": "2"}]
    assert seen[0].url.path == "/indexes/products/similar"
    assert json.loads(seen[0].content)["filter"] == "brand = luxe"
