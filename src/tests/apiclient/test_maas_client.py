# Copyright 2012-2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Test MAAS HTTP API client."""

import gzip
import http.client
from io import BytesIO
import urllib.error
from urllib.parse import parse_qs, urlparse
import urllib.request

import pytest

from apiclient.maas_client import (
    api_url,
    MAASAPIError,
    MAASClient,
    MAASDispatcher,
    MAASOAuth,
    MAASResponseError,
    read_json,
)
from maastesting.factory import factory

BASE_URL = "http://example.com/MAAS/api/2.0/"


@pytest.fixture
def dispatcher(mocker):
    dispatcher = mocker.Mock()
    dispatcher.dispatch_query.return_value = BytesIO(b"{}")
    yield dispatcher


@pytest.fixture
def maas_client(dispatcher):
    auth = MAASOAuth.from_api_key(factory.make_api_key())
    yield MAASClient(auth, dispatcher, BASE_URL)


def dispatched(dispatcher):
    """Return the URL, method, headers, and body of the only query."""
    dispatcher.dispatch_query.assert_called_once()
    args, kwargs = dispatcher.dispatch_query.call_args
    url, headers = args
    return url, kwargs["method"], headers, kwargs["data"]


class TestAPIURL:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("http://maas/MAAS", "http://maas/MAAS/api/2.0/"),
            ("http://maas/MAAS/", "http://maas/MAAS/api/2.0/"),
            ("http://maas:5240/", "http://maas:5240/api/2.0/"),
            ("http://maas/MAAS/api/2.0", "http://maas/MAAS/api/2.0/"),
            ("http://maas/MAAS/api/1.0/", "http://maas/MAAS/api/1.0/"),
        ],
    )
    def test_api_url(self, url, expected):
        assert api_url(url) == expected

    def test_api_url_uses_version(self):
        assert api_url("http://maas/MAAS/", "3.0") == (
            "http://maas/MAAS/api/3.0/"
        )


class TestMAASOAuth:
    def test_sign_request_adds_header(self):
        headers = {}
        auth = MAASOAuth("consumer_key", "resource_token", "resource_secret")
        auth.sign_request("http://example.com/", headers)
        assert "Authorization" in headers
        assert "PLAINTEXT" in headers["Authorization"]

    def test_from_api_key(self):
        auth = MAASOAuth.from_api_key("consumer:token:secret")
        headers = {}
        auth.sign_request("http://example.com/", headers)
        assert 'oauth_consumer_key="consumer"' in headers["Authorization"]
        assert 'oauth_token="token"' in headers["Authorization"]

    @pytest.mark.parametrize("api_key", ["", "a:b", "a:b:c:d"])
    def test_from_api_key_rejects_malformed_keys(self, api_key):
        with pytest.raises(ValueError, match="Expected 3 colon-separated"):
            MAASOAuth.from_api_key(api_key)


class TestMAASDispatcher:
    @pytest.fixture
    def opener(self, mocker):
        opener = mocker.Mock()
        response = opener.open.return_value
        response.info.return_value = {}
        mocker.patch.object(
            urllib.request, "build_opener", return_value=opener
        )
        yield opener

    def test_dispatch_query_sends_method_and_data(self, opener):
        MAASDispatcher().dispatch_query(
            "http://example.com/", {}, method="PUT", data="foo=bar"
        )
        [request], _ = opener.open.call_args
        assert request.get_method() == "PUT"
        assert request.data == b"foo=bar"

    def test_dispatch_query_requests_gzip(self, opener):
        MAASDispatcher().dispatch_query("http://example.com/", {})
        [request], _ = opener.open.call_args
        assert request.get_header("Accept-encoding") == "gzip"

    def test_dispatch_query_keeps_explicit_accept_encoding(self, opener):
        MAASDispatcher().dispatch_query(
            "http://example.com/", {"Accept-Encoding": "identity"}
        )
        [request], _ = opener.open.call_args
        assert request.get_header("Accept-encoding") == "identity"

    def test_dispatch_query_decompresses_gzip(self, opener):
        response = opener.open.return_value
        response.info.return_value = {"Content-Encoding": "gzip"}
        response.read.return_value = gzip.compress(b"content")
        result = MAASDispatcher().dispatch_query("http://example.com/", {})
        assert result.read() == b"content"

    def test_dispatch_query_insecure_skips_verification(self, opener):
        MAASDispatcher().dispatch_query(
            "https://example.com/", {}, insecure=True
        )
        handlers = urllib.request.build_opener.call_args[0]
        assert any(
            isinstance(handler, urllib.request.HTTPSHandler)
            for handler in handlers
        )

    def test_dispatch_query_without_proxies(self, opener):
        MAASDispatcher(autodetect_proxies=False).dispatch_query(
            "http://example.com/", {}
        )
        handlers = urllib.request.build_opener.call_args[0]
        assert any(
            isinstance(handler, urllib.request.ProxyHandler)
            for handler in handlers
        )

    def test_dispatch_query_attempts_once(self, opener):
        opener.open.side_effect = urllib.error.HTTPError(
            "http://example.com/", 503, "Service Unavailable", {}, None
        )
        with pytest.raises(urllib.error.HTTPError):
            MAASDispatcher().dispatch_query("http://example.com/", {})
        opener.open.assert_called_once()


class TestMAASClient:
    def test_make_url_joins_path_elements(self, maas_client):
        assert maas_client._make_url(["nodes", "abc", "raid", 42]) == (
            BASE_URL + "nodes/abc/raid/42/"
        )

    def test_make_url_strips_spurious_slashes(self, maas_client):
        assert maas_client._make_url("/machines/") == BASE_URL + "machines/"

    def test_get(self, maas_client, dispatcher):
        maas_client.get("machines")
        url, method, headers, data = dispatched(dispatcher)
        assert url == BASE_URL + "machines/"
        assert method == "GET"
        assert data is None

    def test_get_encodes_params_in_query(self, maas_client, dispatcher):
        maas_client.get("machines", op="list", hostname=["a", "b"])
        url, _, _, _ = dispatched(dispatcher)
        assert parse_qs(urlparse(url).query) == {
            "op": ["list"],
            "hostname": ["a", "b"],
        }

    def test_post_puts_op_in_query_and_params_in_body(
        self, maas_client, dispatcher
    ):
        maas_client.post("nodes/abc/raids", op="do", partitions=["1", "2"])
        url, method, headers, data = dispatched(dispatcher)
        assert method == "POST"
        assert urlparse(url).query == "op=do"
        assert parse_qs(data) == {"partitions": ["1", "2"]}
        assert headers["Content-Type"] == (
            "application/x-www-form-urlencoded"
        )

    def test_put(self, maas_client, dispatcher):
        maas_client.put("nodes/abc/raid/1", name="md0")
        url, method, _, data = dispatched(dispatcher)
        assert url == BASE_URL + "nodes/abc/raid/1/"
        assert method == "PUT"
        assert parse_qs(data) == {"name": ["md0"]}

    def test_delete_sends_empty_body(self, maas_client, dispatcher):
        maas_client.delete("nodes/abc/raid/1")
        _, method, _, data = dispatched(dispatcher)
        assert method == "DELETE"
        assert data == ""

    def test_requests_are_signed(self, maas_client, dispatcher):
        maas_client.get("machines")
        _, _, headers, _ = dispatched(dispatcher)
        assert "Authorization" in headers

    def test_passes_insecure_to_dispatcher(self, maas_client, dispatcher):
        maas_client.insecure = True
        maas_client.get("x")
        _, kwargs = dispatcher.dispatch_query.call_args
        assert kwargs["insecure"] is True

    def test_http_error_becomes_api_error(self, maas_client, dispatcher):
        url = BASE_URL + "nodes/abc/raid/1/"
        dispatcher.dispatch_query.side_effect = urllib.error.HTTPError(
            url, 404, "Not Found", {}, BytesIO(b"No RAID matches.")
        )
        with pytest.raises(MAASAPIError) as excinfo:
            maas_client.get("nodes/abc/raid/1")
        error = excinfo.value
        assert error.status == 404
        assert error.url == url
        assert error.text == "No RAID matches."
        assert str(error) == "404 Not Found: No RAID matches."

    def test_broken_exchange_becomes_response_error(
        self, maas_client, dispatcher
    ):
        dispatcher.dispatch_query.side_effect = http.client.BadStatusLine(
            "garbage"
        )
        with pytest.raises(MAASResponseError, match="Broken reply from"):
            maas_client.get("machines")

    def test_get_json(self, maas_client, dispatcher):
        dispatcher.dispatch_query.return_value = BytesIO(b'[{"id": 1}]')
        assert maas_client.get_json("machines") == [{"id": 1}]


class TestMAASAPIError:
    def test_message_without_content(self):
        error = MAASAPIError("http://example.com/", 500, "Server Error")
        assert str(error) == "500 Server Error"
        assert error.text == ""


class TestReadJSON:
    def test_read_json_decodes_bytes(self):
        assert read_json(BytesIO(b'{"a": 1}')) == {"a": 1}

    def test_read_json_rejects_other_content(self):
        with pytest.raises(MAASResponseError, match="Invalid JSON in reply"):
            read_json(BytesIO(b"<html>MAAS login</html>"))

    def test_read_json_rejects_undecodable_content(self):
        with pytest.raises(MAASResponseError):
            read_json(BytesIO(b"\xff\xfe"))

    def test_read_json_reports_truncated_body(self, mocker):
        response = mocker.Mock()
        response.read.side_effect = http.client.IncompleteRead(b"{")
        with pytest.raises(MAASResponseError, match="Broken reply"):
            read_json(response)
