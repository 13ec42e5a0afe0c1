'''
Request builder and verbs for the `/v1/kv` endpoint.
'''

import logging

from collections import OrderedDict
from urllib.parse import quote

from tornado.escape import json_encode
from tornado.httputil import url_concat

from .errors import ConversionError, OperationConsumedError
from .record import records_from_response, keys_from_response

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

class KvQuery(object):
    '''
    Optional query parameters of a KV request.

    A field left as `None` is not sent at all.
    '''

    FIELDS = ['dc', 'recurse', 'raw', 'keys', 'separator']

    def __init__(self, dc=None, recurse=None, raw=None, keys=None, separator=None):
        self.dc = dc
        self.recurse = recurse
        self.raw = raw
        self.keys = keys
        self.separator = separator

    def to_args(self):
        '''
        Return the present fields as query arguments in a fixed order.
        '''

        args = OrderedDict()
        for name in KvQuery.FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool):
                value = json_encode(value)
            args[name] = value

        return args

class Kv(object):
    '''
    Builder for a single request against the KV store.

    Setters return the builder so calls can be chained. A `Kv` is consumed
    by the first `get()`, `put()`, `delete()`, `list()`, `list_keys()`,
    `get_raw()` or `send_request()`.
    '''

    PREFIX = 'v1/kv/'

    def __init__(self, path=''):
        self._path = Kv.PREFIX + quote(path, safe='/')
        self._query = KvQuery()
        self._payload = None
        self._body = None
        self._consumed = False

    @property
    def path(self):
        return self._path

    @property
    def query(self):
        return self._query

    def _check(self):
        if self._consumed:
            raise OperationConsumedError('operation on {!r} was already sent'.format(self._path))

    def dc(self, dc):
        self._check()
        self._query.dc = dc
        return self

    def recurse(self, value=True):
        self._check()
        self._query.recurse = bool(value)
        return self

    def raw(self, value=True):
        self._check()
        self._query.raw = bool(value)
        return self

    def keys(self, value=True):
        self._check()
        self._query.keys = bool(value)
        return self

    def separator(self, separator):
        self._check()
        self._query.separator = separator
        return self

    def payload(self, payload):
        '''
        Send `payload` encoded as JSON.

        Takes precedence over `body()` if both are set.
        '''

        self._check()
        self._payload = payload
        return self

    def body(self, body):
        '''
        Send `body` as is. Strings are encoded as UTF-8.
        '''

        self._check()
        if isinstance(body, str):
            body = body.encode('utf-8')
        self._body = body
        return self

    def apply_if(self, value, fun):
        '''
        Return `fun(self, value)` if `value is not None` and `self` otherwise.
        '''

        if value is not None:
            return fun(self, value)
        else:
            return self

    async def send_request(self, method, client):
        '''
        Dispatch this operation with HTTP `method` through `client`.

        Returns the `Response` whatever its status.
        '''

        self._check()
        self._consumed = True

        url = url_concat(client.join(self._path), self._query.to_args())

        # JSON payload wins over a raw body
        if self._payload is not None:
            body = json_encode(self._payload)
            headers = {'Content-Type': 'application/json'}
        else:
            body = self._body
            headers = None

        return await client.fetch(url, method, body=body, headers=headers)

    async def get(self, client):
        '''
        Fetch the record at this key.

        Returns `None` if the key does not exist. If the server returns
        several records, the last one is returned.
        '''

        response = await self.send_request('GET', client)
        if response.status == 404:
            return None

        records = records_from_response(response)
        if records:
            return records[-1]
        else:
            return None

    async def put(self, client):
        '''
        Store the payload or body at this key and return the `Response`.
        '''

        return await self.send_request('PUT', client)

    async def delete(self, client):
        '''
        Delete this key and return the `Response`.
        '''

        return await self.send_request('DELETE', client)

    async def list(self, client):
        '''
        Fetch all records below this key prefix.

        Any `keys()` or `raw()` set on the builder is dropped since both
        change the response away from a list of records. Returns an empty
        list if no key matches.
        '''

        self._check()
        self._query.keys = None
        self._query.raw = None

        response = await self.recurse(True).send_request('GET', client)
        if response.status == 404:
            return []

        return records_from_response(response)

    async def list_keys(self, client):
        '''
        Fetch the names of all keys below this key prefix.

        If a separator is set, keys are folded at the first separator after
        the prefix, as Consul does. Returns an empty list if no key matches.
        '''

        response = await self.keys(True).send_request('GET', client)
        if response.status == 404:
            return []

        return keys_from_response(response)

    async def get_raw(self, client):
        '''
        Fetch the value at this key as bytes without base-64 or JSON wrapping.

        Returns `None` if the key does not exist.
        '''

        response = await self.raw(True).send_request('GET', client)
        if response.status == 404:
            return None
        elif not response.is_success():
            logger.error('unexpected HTTP response: {}\
                \n\nResponse:\n{}'.format(response.status, response.raw))
            raise ConversionError('no value in response (status {})'.format(response.status))

        return response.body
