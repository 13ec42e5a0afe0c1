'''
HTTP transport for the Consul KV API.
'''

import logging

from os import environ
from urllib.parse import urljoin, urlsplit

from tornado.escape import json_decode
from tornado.httpclient import AsyncHTTPClient

from .errors import UrlError
from . import DEFAULT_URL, ENVIRONMENT_VARIABLE

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

class Response(object):
    '''
    Uniform capture of one completed HTTP exchange.

    `raw` always holds the response text, even for error statuses. `json`
    holds the parsed body or `None` if the body is empty or not JSON.
    '''

    __slots__ = ('_status', '_raw', '_json', '_body')

    def __init__(self, status, raw, json=None, body=b''):
        self._status = status
        self._raw = raw
        self._json = json
        self._body = body

    @classmethod
    def from_http(cls, response):
        '''
        Build a `Response` from a `tornado.httpclient.HTTPResponse`.
        '''

        body = response.body or b''
        raw = body.decode('utf-8', 'replace')

        try:
            json = json_decode(raw) if raw else None
        except ValueError:
            json = None

        return cls(response.code, raw, json, body)

    @property
    def status(self):
        return self._status

    @property
    def raw(self):
        return self._raw

    @property
    def json(self):
        return self._json

    @property
    def body(self):
        return self._body

    def is_success(self):
        return self._status == 200

    def __repr__(self):
        return 'Response(status={!r}, raw={!r})'.format(self._status, self._raw)

class Client(object):
    '''
    Handle on a Consul agent reached over HTTP.

    The underlying `AsyncHTTPClient` is shared with the rest of the process
    unless one is passed in, so many operations may be in flight at once.
    '''

    def __init__(self, url=None, client=None):
        if not url:
            # fall back to environment variable
            url = environ.get(ENVIRONMENT_VARIABLE, None)
        if not url:
            # fall back to default
            url = DEFAULT_URL

        if '://' not in url:
            url = 'http://' + url

        self._url = url.rstrip('/') + '/'
        self._check(self._url)

        self._client = client or AsyncHTTPClient()

    @staticmethod
    def _check(url):
        try:
            parts = urlsplit(url)
            # accessing the port validates it
            parts.port  # pylint: disable=pointless-statement
        except ValueError as exc:
            raise UrlError('invalid URL {!r}: {}'.format(url, exc)) from exc

        if parts.scheme not in ('http', 'https'):
            raise UrlError('unsupported URL scheme: {!r}'.format(url))
        if not parts.hostname:
            raise UrlError('URL has no host: {!r}'.format(url))

        return parts

    @property
    def url(self):
        return self._url

    def join(self, path):
        '''
        Resolve `path` relative to the base URL.

        Raises `UrlError` if the result is malformed or leaves the base URL's
        scheme and host.
        '''

        url = urljoin(self._url, path)
        parts = self._check(url)

        base = urlsplit(self._url)
        if (parts.scheme, parts.netloc) != (base.scheme, base.netloc):
            raise UrlError('path {!r} escapes {}'.format(path, self._url))

        return url

    async def fetch(self, url, method, body=None, headers=None):
        '''
        Perform one HTTP request and capture the result as a `Response`.

        Non-2xx statuses are returned, not raised. Connection failures and
        other transport errors propagate from tornado.
        '''

        # ask for JSON on every request
        headers = dict(headers or {}, Accept='application/json')

        response = await self._client.fetch(url,
                                            method=method,
                                            body=body,
                                            headers=headers,
                                            raise_error=False,
                                            allow_nonstandard_methods=True)

        logger.debug('{} {} -> {}'.format(method, url, response.code))

        return Response.from_http(response)
