import base64
import json

import httpx
import pytest
import respx
from httpx import Response
from waterwheel.client import (
    HttpTransport,
    WaterwheelClientError,
    WaterwheelHTTPError,
    WaterwheelParseError,
)
from waterwheel.models import Credentials


@pytest.mark.asyncio
async def test_get_request_success():
    async with respx.mock:
        route = respx.get("http://foo.dev/node/1").mock(
            return_value=Response(200, json={"nid": [{"value": 1}]})
        )

        async with HttpTransport() as transport:
            data = await transport.get(
                "http://foo.dev/node/1", params={"_format": "json"}
            )
            assert data == {"nid": [{"value": 1}]}

        assert route.called
        assert route.calls[0].request.url.params["_format"] == "json"


@pytest.mark.asyncio
async def test_credentials_are_sent_per_call():
    async with respx.mock:
        route = respx.get("http://foo.dev/node/1").mock(
            return_value=Response(200, json={})
        )

        async with HttpTransport() as transport:
            await transport.get(
                "http://foo.dev/node/1", credentials=Credentials(user="b", password="c")
            )
            await transport.get("http://foo.dev/node/1")

        expected = "Basic " + base64.b64encode(b"b:c").decode()
        assert route.calls[0].request.headers.get("Authorization") == expected
        assert "Authorization" not in route.calls[1].request.headers


@pytest.mark.asyncio
async def test_post_sends_json_body():
    async with respx.mock:
        route = respx.post("http://foo.dev/entity/comment").mock(
            return_value=Response(201, json={"cid": [{"value": 9}]})
        )

        async with HttpTransport() as transport:
            data = await transport.post(
                "http://foo.dev/entity/comment", json={"subject": [{"value": "hi"}]}
            )

        assert data["cid"][0]["value"] == 9
        assert json.loads(route.calls[0].request.content) == {
            "subject": [{"value": "hi"}]
        }


@pytest.mark.asyncio
async def test_404_raises_typed_error():
    async with respx.mock:
        respx.get("http://foo.dev/node/999").mock(
            return_value=Response(404, json={"message": "Not found"})
        )

        async with HttpTransport() as transport:
            with pytest.raises(WaterwheelHTTPError) as exc:
                await transport.get("http://foo.dev/node/999")

        assert exc.value.status_code == 404
        assert exc.value.method == "GET"
        assert "Not found" in str(exc.value)


@pytest.mark.asyncio
async def test_403_keeps_text_body():
    async with respx.mock:
        respx.patch("http://foo.dev/node/1").mock(
            return_value=Response(403, text="Access denied")
        )

        async with HttpTransport() as transport:
            with pytest.raises(WaterwheelHTTPError) as exc:
                await transport.patch("http://foo.dev/node/1", json={})

        assert exc.value.status_code == 403
        assert exc.value.response_text == "Access denied"
        assert exc.value.response_json is None


@pytest.mark.asyncio
async def test_503_is_not_retried():
    async with respx.mock:
        route = respx.get("http://foo.dev/entity/types").mock(
            side_effect=[
                Response(503, json={"message": "Service Unavailable"}),
                Response(200, json={}),
            ]
        )

        async with HttpTransport() as transport:
            with pytest.raises(WaterwheelHTTPError):
                await transport.get("http://foo.dev/entity/types")

        assert route.call_count == 1


@pytest.mark.asyncio
async def test_connect_timeout_raises_client_error():
    async with respx.mock:
        route = respx.get("http://foo.dev/node/1").mock(
            side_effect=httpx.ConnectTimeout("boom")
        )

        async with HttpTransport(timeout_seconds=0.1) as transport:
            with pytest.raises(WaterwheelClientError):
                await transport.get("http://foo.dev/node/1")

        assert route.call_count == 1


@pytest.mark.asyncio
async def test_empty_response_returns_empty_dict():
    """DELETE answers 204 No Content."""
    async with respx.mock:
        respx.delete("http://foo.dev/node/1").mock(return_value=Response(204))

        async with HttpTransport() as transport:
            assert await transport.delete("http://foo.dev/node/1") == {}


@pytest.mark.asyncio
async def test_json_array_response_is_returned():
    async with respx.mock:
        respx.get("http://foo.dev/entity/query/node").mock(
            return_value=Response(200, json=[{"nid": 1}, {"nid": 2}])
        )

        async with HttpTransport() as transport:
            data = await transport.get("http://foo.dev/entity/query/node")

    assert data == [{"nid": 1}, {"nid": 2}]


@pytest.mark.asyncio
async def test_non_json_response_raises_parse_error():
    async with respx.mock:
        respx.get("http://foo.dev/node/1").mock(
            return_value=Response(200, text="<html>Not JSON</html>")
        )

        async with HttpTransport() as transport:
            with pytest.raises(WaterwheelParseError) as exc:
                await transport.get("http://foo.dev/node/1")

        assert "Expected JSON" in str(exc.value)


@pytest.mark.asyncio
async def test_injected_http_client_is_not_closed():
    http = httpx.AsyncClient()
    transport = HttpTransport(http=http)
    await transport.aclose()

    assert not http.is_closed
    await http.aclose()
