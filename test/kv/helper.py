'''
Helper for running tests against an in-memory Consul KV endpoint.
'''

from base64 import b64encode

from tornado.escape import json_encode
from tornado.testing import AsyncHTTPTestCase
from tornado.web import Application, RequestHandler

from consulkv.client import Client

class FakeKvHandler(RequestHandler):
    '''
    Handler mimicking Consul's `/v1/kv/<key>` for GET, PUT, and DELETE.
    '''

    def _flag(self, name):
        value = self.get_query_argument(name, None)
        return value is not None and value.lower() != 'false'

    def _matches(self, key, prefix):
        store = self.application.store
        if prefix:
            return [k for k in sorted(store) if k.startswith(key)]
        elif key in store:
            return [key]
        else:
            return []

    def prepare(self):
        self.application.requests.append(self.request)

        dc = self.get_query_argument('dc', None)
        if dc is not None and dc not in self.application.datacenters:
            self.send_error(500, reason='No path to datacenter')

    def get(self, key):
        keys = self._matches(key, self._flag('recurse') or self._flag('keys'))
        if not keys:
            # Consul answers a missing key with an empty 404
            self.set_status(404)
            return

        if self._flag('keys'):
            separator = self.get_query_argument('separator', None)
            names = []
            for k in keys:
                if separator:
                    index = k.find(separator, len(key))
                    if index >= 0:
                        k = k[:index + len(separator)]
                if k not in names:
                    names.append(k)
            self.set_header('Content-Type', 'application/json')
            self.write(json_encode(names))
        elif self._flag('raw'):
            self.set_header('Content-Type', 'application/octet-stream')
            self.write(self.application.store[keys[0]]['Value'])
        else:
            self.set_header('Content-Type', 'application/json')
            self.write(json_encode([self.application.record(k) for k in keys]))

    def put(self, key):
        self.application.put(key, self.request.body,
                             flags=int(self.get_query_argument('flags', 0)))
        self.write('true')

    def delete(self, key):
        for k in self._matches(key, self._flag('recurse')):
            del self.application.store[k]
        self.write('true')

class FakeConsulServer(Application):
    '''
    Tornado web application holding a flat key-value store.
    '''

    def __init__(self, datacenters=('dc1',)):
        super(FakeConsulServer, self).__init__()

        self.store = {}
        self.index = 0
        self.requests = []
        self.datacenters = list(datacenters)

        self.add_handlers(r'.*', [(r'/v1/kv/(?P<key>.*)', FakeKvHandler)])

    def put(self, key, value, flags=0):
        '''
        Store `value` as bytes at `key`, bumping the indices as Consul does.
        '''

        self.index += 1
        entry = self.store.get(key)
        if entry is None:
            entry = self.store[key] = {'CreateIndex': self.index, 'LockIndex': 0}

        entry['ModifyIndex'] = self.index
        entry['Flags'] = flags
        entry['Value'] = value

    def record(self, key):
        '''
        Render the entry at `key` the way Consul sends it.
        '''

        entry = self.store[key]
        obj = dict(entry, Key=key)
        obj['Value'] = b64encode(entry['Value']).decode('ascii') if entry['Value'] else None
        return obj

class KvServerTestCase(AsyncHTTPTestCase):
    '''
    Unit test base class that sets up a fake Consul server and a client
    just for the tests in this case.
    '''

    def setUp(self):
        '''
        Initialize the client.
        '''
        super(KvServerTestCase, self).setUp()
        self.client = Client(self.get_url(''), client=self.http_client)

    def get_app(self):
        '''
        Initialize the server.
        '''
        self.server = FakeConsulServer()
        return self.server
