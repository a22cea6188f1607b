# Copyright 2012-2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""MAAS OAuth API connection library."""

__all__ = [
    "MAASAPIError",
    "MAASClient",
    "MAASDispatcher",
    "MAASOAuth",
    "MAASResponseError",
    "api_url",
]

import gzip
import http.client
from io import BytesIO
import json
import re
import ssl
import urllib.error
import urllib.parse
import urllib.request

from oauthlib import oauth1
import structlog

from apiclient.encoding import encode_form_data, flatten_params, urlencode

logger = structlog.get_logger()


class MAASAPIError(Exception):
    """The MAAS server answered with a non-2xx status."""

    def __init__(self, url, status, reason, content=b""):
        self.url = url
        self.status = status
        self.reason = reason
        self.content = content
        message = f"{status} {reason}"
        text = self.text
        if text:
            message = f"{message}: {text}"
        super().__init__(message)

    @property
    def text(self):
        if isinstance(self.content, bytes):
            return self.content.decode("utf-8", errors="replace").strip()
        return str(self.content or "").strip()

    @classmethod
    def from_http_error(cls, error):
        try:
            content = error.read()
        except OSError:
            content = b""
        return cls(error.filename, error.code, error.reason, content)


class MAASResponseError(Exception):
    """The MAAS server answered with something that is not a valid reply."""


def api_url(url, version="2.0"):
    """Ensure that `url` looks like a URL to the MAAS API.

    The path always ends with ``/api/{version}/``; an explicit version already
    present in `url` is kept.
    """
    parts = urllib.parse.urlparse(url)
    path = parts.path if parts.path.endswith("/") else parts.path + "/"
    if re.search("/api/[0-9.]+/$", path) is None:
        path += f"api/{version}/"
    return parts._replace(path=path).geturl()


class MAASOAuth:
    """Helper class to OAuth-sign an HTTP request."""

    def __init__(self, consumer_key, resource_token, resource_secret):
        self._consumer_key = consumer_key
        self._resource_token = resource_token
        self._resource_secret = resource_secret

    @classmethod
    def from_api_key(cls, api_key):
        """Build from an API key of the form ``consumer:token:secret``."""
        parts = api_key.split(":")
        if len(parts) != 3:
            raise ValueError(
                "Malformed API key.  Expected 3 colon-separated items, "
                "got %d." % len(parts)
            )
        return cls(*parts)

    def sign_request(self, url, headers):
        """Sign a request.

        @param url: The URL to which the request is to be sent.
        @param headers: The headers in the request.  These will be updated
            with the signature.
        """
        client = oauth1.Client(
            self._consumer_key,
            resource_owner_key=self._resource_token,
            resource_owner_secret=self._resource_secret,
            signature_method=oauth1.SIGNATURE_PLAINTEXT,
        )
        _, signed_headers, _ = client.sign(url)
        headers.update(signed_headers)


class RequestWithMethod(urllib.request.Request):
    """Enhances urllib.Request so an http method can be supplied."""

    def __init__(self, *args, **kwargs):
        self._method = kwargs.pop("method", None)
        urllib.request.Request.__init__(self, *args, **kwargs)

    def get_method(self):
        return self._method if self._method else super().get_method()


class MAASDispatcher:
    """Helper class to connect to a MAAS server using blocking requests.

    Each query is attempted exactly once; errors are left to the caller.

    @ivar autodetect_proxies: Extract proxy information from the
        environment variables (http_proxy, no_proxy). Default True
    """

    def __init__(self, autodetect_proxies=True):
        self.autodetect_proxies = autodetect_proxies

    def dispatch_query(
        self, request_url, headers, method="GET", data=None, insecure=False
    ):
        """Synchronously dispatch an OAuth-signed request to L{request_url}.

        :param request_url: The URL to which the request is to be sent.
        :param headers: Headers to include in the request.
        :type headers: A dict.
        :param method: The HTTP method, e.g. C{GET}, C{POST}, etc.
        :param data: The data to send, if any.
        :type data: A byte string.
        :param insecure: Skip HTTPS certificate verification

        :return: A open file-like object that contains the response.
        """
        headers = dict(headers)
        # header keys are case insensitive, so we have to pass over them
        set_accept_encoding = not any(
            key.lower() == "accept-encoding" for key in headers
        )
        if set_accept_encoding:
            headers["Accept-encoding"] = "gzip"
        # Encode 'non-bytes' data into utf-8 bytes as required by urllib.
        if data is not None and not isinstance(data, bytes):
            data = bytes(data, "utf-8")
        req = RequestWithMethod(request_url, data, headers, method=method)
        handlers = []
        if insecure:
            handlers.append(
                urllib.request.HTTPSHandler(
                    context=ssl._create_unverified_context()
                )
            )
        if not self.autodetect_proxies:
            handlers.append(urllib.request.ProxyHandler({}))
        opener = urllib.request.build_opener(*handlers)
        res = opener.open(req)
        # If we set the Accept-encoding header, then we decode the header for
        # the caller.
        is_gzip = (
            set_accept_encoding
            and res.info().get("Content-Encoding") == "gzip"
        )
        if is_gzip:
            # gzip.GzipFile wants to be able to seek the file object.
            res_content_io = BytesIO(res.read())
            ungz = gzip.GzipFile(mode="rb", fileobj=res_content_io)
            res = urllib.request.addinfourl(
                ungz, res.headers, res.url, res.code
            )
        return res


class MAASClient:
    """Base class for connecting to MAAS servers.

    All "path" parameters can be either a string describing a resource path
    relative to the API root, or a sequence of items that, when represented
    as unicode, make up the elements of the resource's path.  So
    `['nodes', system_id, 'raids']` is equivalent to
    `"nodes/%s/raids" % system_id`.
    """

    def __init__(self, auth, dispatcher, base_url, insecure=False):
        """Intialise the client.

        :param auth: A `MAASOAuth` to sign requests.
        :param dispatcher: An object with a `dispatch_query` method, like
            `MAASDispatcher`.
        :param base_url: The API root of the MAAS server, e.g.
            http://my.maas.com:5240/MAAS/api/2.0/
        :param insecure: Skip HTTPS certificate verification
        """
        self.dispatcher = dispatcher
        self.auth = auth
        self.url = base_url
        self.insecure = insecure

    def _make_url(self, path):
        """Compose an absolute URL to `path`.

        Resource URLs in the MAAS API always end with a slash, so one is
        added when missing.
        """
        assert not isinstance(path, bytes)
        if not isinstance(path, str):
            path = "/".join(str(element) for element in path)
        # urljoin is very sensitive to leading slashes and when spurious
        # slashes appear it removes path parts. This is why joining is
        # done manually here.
        url = self.url.rstrip("/") + "/" + path.strip("/")
        return url + "/"

    def _dispatch(self, url, method, headers, data=None):
        logger.debug("MAAS API request", method=method, url=url)
        try:
            return self.dispatcher.dispatch_query(
                url,
                headers,
                method=method,
                data=data,
                insecure=self.insecure,
            )
        except urllib.error.HTTPError as error:
            raise MAASAPIError.from_http_error(error) from error
        except http.client.HTTPException as error:
            raise MAASResponseError(
                f"Broken reply from {url}: {error!r}"
            ) from error

    def _formulate_get(self, path, params=None):
        """Return URL and headers for a GET request.

        Parameters are encoded into the URL.
        """
        url = self._make_url(path)
        if params:
            url += "?" + urlencode(flatten_params(params))
        headers = {}
        self.auth.sign_request(url, headers)
        return url, headers

    def _formulate_change(self, path, params):
        """Return URL, headers, and body for a non-GET request.

        Parameters are encoded as a form body, except `op`, which always
        goes in the query string.
        """
        url = self._make_url(path)
        params = dict(params)
        op = params.pop("op", None)
        if op is not None:
            url += "?" + urlencode([("op", op)])
        body, headers = encode_form_data(params)
        self.auth.sign_request(url, headers)
        return url, headers, body

    def get(self, path, op=None, **kwargs):
        """Dispatch a GET.

        :param op: Optional: named GET operation to invoke.  If given, any
            keyword arguments are passed to the named operation.
        :return: The result of the dispatch_query call on the dispatcher.
        """
        if op is not None:
            kwargs["op"] = op
        url, headers = self._formulate_get(path, kwargs)
        return self._dispatch(url, "GET", headers)

    def post(self, path, op=None, **kwargs):
        """Dispatch POST method `op` on `path`, with the given parameters."""
        if op is not None:
            kwargs["op"] = op
        url, headers, body = self._formulate_change(path, kwargs)
        return self._dispatch(url, "POST", headers, body)

    def put(self, path, **kwargs):
        """Dispatch a PUT on the resource at `path`."""
        url, headers, body = self._formulate_change(path, kwargs)
        return self._dispatch(url, "PUT", headers, body)

    def delete(self, path):
        """Dispatch a DELETE on the resource at `path`."""
        url, headers, body = self._formulate_change(path, {})
        # The body will be empty, but it must be passed.  Otherwise, the
        # request will hang while trying to read a response (bug 1313556).
        return self._dispatch(url, "DELETE", headers, body)

    def get_json(self, path, op=None, **kwargs):
        return read_json(self.get(path, op=op, **kwargs))

    def post_json(self, path, op=None, **kwargs):
        return read_json(self.post(path, op=op, **kwargs))

    def put_json(self, path, **kwargs):
        return read_json(self.put(path, **kwargs))


def read_json(response):
    """Decode the JSON document in `response`.

    :raise MAASResponseError: if the body cannot be read or is not JSON.
    """
    try:
        content = response.read()
    except http.client.HTTPException as error:
        raise MAASResponseError(f"Broken reply: {error!r}") from error
    try:
        if isinstance(content, bytes):
            content = content.decode("utf-8")
        return json.loads(content)
    except ValueError as error:
        raise MAASResponseError(f"Invalid JSON in reply: {error}") from error
