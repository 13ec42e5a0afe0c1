'''
Typed records returned by the Consul KV API.
'''

import logging

from base64 import b64decode
from binascii import Error as Base64Error
from collections import namedtuple

from tornado.escape import json_decode

import jsonschema

from .errors import ConversionError, DecodeError

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

RECORDS_SCHEMA = {
    '$schema': 'http://json-schema.org/draft-04/schema#',
    'type': 'array',
    'items': {
        'type': 'object',
        'properties': {
            'CreateIndex': {'type': 'integer', 'minimum': 0},
            'Flags': {'type': 'integer', 'minimum': 0},
            'Key': {'type': 'string'},
            'LockIndex': {'type': 'integer', 'minimum': 0},
            'ModifyIndex': {'type': 'integer', 'minimum': 0},
            'Value': {'type': ['string', 'null']},
            'Session': {'type': 'string'},
        },
        'required': ['CreateIndex', 'Flags', 'Key', 'LockIndex', 'ModifyIndex', 'Value'],
    },
}

KEYS_SCHEMA = {
    '$schema': 'http://json-schema.org/draft-04/schema#',
    'type': 'array',
    'items': {
        'type': 'string',
    },
}

_Record = namedtuple('_Record', ['create_index', 'flags', 'key', 'lock_index',
                                 'modify_index', 'raw_value', 'session'])

class Record(_Record):
    '''
    One key-value entry as stored by Consul.

    `raw_value` is the base-64 text sent by the server. Use `value_as_slice()`
    for the decoded bytes or `value()` if the bytes are known to be JSON.
    '''

    __slots__ = ()

    # map wire names to field names
    FIELDS = [
        ('CreateIndex', 'create_index'),
        ('Flags', 'flags'),
        ('Key', 'key'),
        ('LockIndex', 'lock_index'),
        ('ModifyIndex', 'modify_index'),
        ('Value', 'raw_value'),
        ('Session', 'session'),
    ]

    def __new__(cls, create_index, flags, key, lock_index, modify_index, raw_value, session=None):
        return super(Record, cls).__new__(cls, create_index, flags, key, lock_index,
                                          modify_index, raw_value or '', session)

    @classmethod
    def from_json(cls, obj):
        '''
        Build a `Record` from one object of a KV response.
        '''

        return cls(**{name: obj.get(wire) for (wire, name) in cls.FIELDS})

    def value_as_slice(self):
        '''
        Decode the stored value from base-64.

        Raises `DecodeError` if the value is not valid base-64.
        '''

        try:
            return b64decode(self.raw_value, validate=True)
        except (Base64Error, ValueError) as exc:
            raise DecodeError('invalid base-64 value at {!r}: {}'.format(self.key, exc)) from exc

    def value(self):
        '''
        Decode the stored value from base-64 and then parse it as JSON.

        Raises `DecodeError` if either step fails.
        '''

        data = self.value_as_slice()
        try:
            return json_decode(data)
        except ValueError as exc:
            raise DecodeError('value at {!r} is not JSON: {}'.format(self.key, exc)) from exc

def _validate(response, schema, what):
    if response.json is None:
        logger.error('missing JSON in response: {}\
            \n\nResponse:\n{}'.format(response.status, response.raw))
        raise ConversionError('no JSON in response (status {})'.format(response.status))

    try:
        jsonschema.validate(response.json, schema)
    except jsonschema.ValidationError as exc:
        logger.error('malformed response: {}\
            \n\nResponse:\n{}'.format(exc.message, response.raw))
        raise ConversionError('response is not {}: {}'.format(what, exc.message)) from exc

    return response.json

def records_from_response(response):
    '''
    Convert a `Response` holding a JSON array of KV entries into `Record`s.

    Raises `ConversionError` if the response has no JSON or the JSON has the
    wrong shape.
    '''

    return [Record.from_json(obj) for obj in _validate(response, RECORDS_SCHEMA, 'a list of records')]

def keys_from_response(response):
    '''
    Convert a `Response` from a keys-only query into a list of key names.
    '''

    return list(_validate(response, KEYS_SCHEMA, 'a list of keys'))
