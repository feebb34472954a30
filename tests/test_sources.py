import asyncio
import json

import httpx
import pytest

from tweetlate.core.errors import SourceError
from tweetlate.core.result import Failure, Success, failure_for_status
from tweetlate.models.tweet import TweetRecord
from tweetlate.sources.google_translate import GoogleTranslateClient, extract_translation
from tweetlate.sources.twitter import TwitterFeedClient

GOOGLE_RESPONSE = {"data": {"translations": [{"translatedText": "hello"}]}}


def mock_client(handler, requests):
    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))


@pytest.mark.parametrize(
    "status, retryable",
    [(500, True), (503, True), (429, True), (408, True), (400, False), (403, False), (404, False)],
)
def test_failure_for_status(status, retryable):
    failure = failure_for_status(status, "twitter")
    assert failure.retryable is retryable
    assert failure.status_code == status


def test_success_statuses_are_not_failures():
    assert failure_for_status(200, "twitter") is None
    assert failure_for_status(204, "google") is None


def test_extract_translation():
    assert extract_translation(GOOGLE_RESPONSE) == "hello"


def test_extract_translation_rejects_empty_body():
    with pytest.raises(SourceError) as excinfo:
        extract_translation({"data": {"translations": []}})
    assert excinfo.value.phase == "translate"
    assert excinfo.value.source == "google"


def test_translate_sends_expected_query(subscription):
    requests = []
    client = GoogleTranslateClient("foo", client=mock_client(lambda r: httpx.Response(200, json=GOOGLE_RESPONSE), requests))

    result = asyncio.run(client.translate(subscription, "hello"))

    assert result == Success("hello")
    params = dict(requests[0].url.params)
    assert params == {"key": "foo", "source": "en", "target": "es", "q": "hello", "format": "text"}


def test_translate_failure_status(subscription):
    requests = []
    client = GoogleTranslateClient("foo", client=mock_client(lambda r: httpx.Response(400), requests))

    result = asyncio.run(client.translate(subscription, "hello"))

    assert isinstance(result, Failure)
    assert result.status_code == 400
    assert not result.retryable
    assert len(requests) == 1


def test_translate_network_error_is_retryable(subscription):
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    client = GoogleTranslateClient("foo", client=mock_client(handler, []))

    result = asyncio.run(client.translate(subscription, "hello"))

    assert isinstance(result, Failure)
    assert result.retryable


def test_translate_malformed_body_is_not_retried(subscription):
    client = GoogleTranslateClient("foo", client=mock_client(lambda r: httpx.Response(200, json={"data": {}}), []))

    result = asyncio.run(client.translate(subscription, "hello"))

    assert isinstance(result, Failure)
    assert not result.retryable


def test_timeline_parses_tweets(subscription):
    body = [
        {"id_str": "3", "text": "hi"},
        {"id_str": "2", "text": "there"},
        {"id_str": "1", "text": "how"},
    ]
    client = TwitterFeedClient("token", client=mock_client(lambda r: httpx.Response(200, json=body), []))

    result = asyncio.run(client.fetch_since(subscription))

    assert result == Success(
        [TweetRecord("3", "hi"), TweetRecord("2", "there"), TweetRecord("1", "how")]
    )


def test_timeline_prefers_extended_text(subscription):
    body = [{"id_str": "7", "full_text": "the whole long tweet", "text": "the whole..."}]
    client = TwitterFeedClient("token", client=mock_client(lambda r: httpx.Response(200, json=body), []))

    result = asyncio.run(client.fetch_since(subscription))

    assert result == Success([TweetRecord("7", "the whole long tweet")])


def test_timeline_failure(subscription):
    client = TwitterFeedClient("token", client=mock_client(lambda r: httpx.Response(403), []))

    result = asyncio.run(client.fetch_since(subscription))

    assert isinstance(result, Failure)
    assert result.status_code == 403


def test_timeline_params_with_since_id(subscription):
    requests = []
    client = TwitterFeedClient("token", client=mock_client(lambda r: httpx.Response(200, json=[]), requests))

    asyncio.run(client.fetch_since(subscription, "123"))

    request = requests[0]
    assert dict(request.url.params) == {
        "screen_name": "nate_smith",
        "include_rts": "false",
        "count": "20",
        "tweet_mode": "extended",
        "since_id": "123",
    }
    assert request.headers["Authorization"] == "Bearer token"


def test_timeline_params_without_since_id(subscription):
    requests = []
    client = TwitterFeedClient("token", count=5, client=mock_client(lambda r: httpx.Response(200, json=[]), requests))

    asyncio.run(client.fetch_since(subscription))

    assert dict(requests[0].url.params) == {
        "screen_name": "nate_smith",
        "include_rts": "false",
        "count": "5",
        "tweet_mode": "extended",
    }


def test_timeline_unexpected_payload(subscription):
    client = TwitterFeedClient(
        "token", client=mock_client(lambda r: httpx.Response(200, content=json.dumps({"errors": []})), [])
    )

    result = asyncio.run(client.fetch_since(subscription))

    assert isinstance(result, Failure)
    assert not result.retryable
