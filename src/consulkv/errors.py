'''
Exceptions raised by the Consul KV client.

Transport failures are not wrapped. Errors from tornado or the socket layer
reach the caller as raised.
'''

class KvError(Exception):
    '''
    Base class for all errors raised by `consulkv`.
    '''

class UrlError(KvError, ValueError):
    '''
    The base URL or a request path could not be turned into a valid URL.
    '''

class ConversionError(KvError):
    '''
    The response carried no JSON or JSON of an unexpected shape.
    '''

class DecodeError(KvError, ValueError):
    '''
    A record value is not valid base-64 or not valid JSON.
    '''

class OperationConsumedError(KvError, RuntimeError):
    '''
    A `Kv` builder was used again after it was dispatched.
    '''
