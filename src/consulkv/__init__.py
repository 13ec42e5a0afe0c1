'''

# consulkv

An asynchronous client for the Consul hierarchical key-value store.

## Design

Consul exposes its key-value store over HTTP at `/v1/kv/<key>`. Keys are
forward-slash (`/`) delimited paths much like a UNIX file path or URL. Each
stored entry is returned as a record holding bookkeeping indices, a flags
bitmask, and the value itself encoded in base-64.

The client supports four primary operations.
 - `get`: retrieve the record at a key
 - `put`: store a value at a key
 - `delete`: remove a key
 - `list`: retrieve every record below a key prefix
Requests are described with a `Kv` builder which accumulates the optional query
parameters (`dc`, `recurse`, `raw`, `keys`, `separator`) and the request body
before it is dispatched through a `Client`.

A missing key is not an error. `get` on a key that does not exist returns
`None` and `list` on a prefix with no keys returns an empty list. `put` and
`delete` return the `Response` untouched so the caller decides what a
non-200 status means.

Record values are decoded lazily. `Record.value_as_slice()` returns the raw
bytes and `Record.value()` further parses those bytes as JSON.

### Example

Suppose the store starts empty.
```
Kv('path/to/key0').payload({'Some': 'Shit'}).put(client)
Kv('path/to/key1').payload({'Some': 'Shit'}).put(client)
```
The operations below will have the following results.
 - `Kv('path/').list(client) -> [Record(key='path/to/key0', ...), Record(key='path/to/key1', ...)]`
 - `Kv('path/to/key0').get(client).value() -> {'Some': 'Shit'}`
 - `Kv('path/does/not/exist').get(client) -> None`

## Usage

All operations are coroutines and must be awaited on a running event loop.
```
from consulkv import Client, Kv

client = Client('http://localhost:8500')

await Kv('a/b/c').payload(4).put(client)
record = await Kv('a/b/c').get(client)
record.value() # -> 4
```
If no URL is given, the `CONSUL_HTTP_ADDR` environment variable is consulted
before falling back to `http://localhost:8500`.

A `Kv` builder is single-use. Reusing one after it has been dispatched raises
`OperationConsumedError`.
'''

DEFAULT_PORT = 8500
DEFAULT_URL = 'http://localhost:{}/'.format(DEFAULT_PORT)
ENVIRONMENT_VARIABLE = 'CONSUL_HTTP_ADDR'

from .errors import KvError, UrlError, ConversionError, DecodeError, OperationConsumedError  # noqa: E402
from .client import Client, Response  # noqa: E402
from .record import Record  # noqa: E402
from .kv import Kv, KvQuery  # noqa: E402

__all__ = [
    'Client', 'Response', 'Record', 'Kv', 'KvQuery',
    'KvError', 'UrlError', 'ConversionError', 'DecodeError', 'OperationConsumedError',
]
