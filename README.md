# hockeypuck

Building blocks for an OpenPGP public key server that speaks the HTTP
Keyserver Protocol (HKP):

- `hockeypuck.config` – a TOML-backed `Settings` object with lenient typed
  accessors, and a process-wide configuration set with `set_config`,
  `load_config` or `load_config_file` and read back with `config()`.
- `hockeypuck.log` – `init_log` sends output of the `hockeypuck` logger to
  the file named by `hockeypuck.logfile`, or to standard error if none is
  set, and when a file is used reopens it on `SIGHUP`, `SIGUSR1` and
  `SIGUSR2` so that it works with logrotate. `open_log` (re)opens the
  output; `log_file(settings)` returns the configured path.
- `hockeypuck.hkp.settings` – `HkpSettings` with `http_bind`,
  `https_bind`, `tls_certificate` and `tls_key`.
- `hockeypuck.hkp.requests` – parsing of `/pks/lookup`, `/pks/add` and
  `/pks/hashquery` requests (`Lookup`, `Add`, `HashQuery` over an
  `HttpRequest`), the `Operation` and `Option` types, `parse_options` and
  `RequestError`.
- `hockeypuck.hkp.templates` – HTML pages: `render_search_form`,
  `render_add_form`, `render_add_result`, `render_stats`.
- `hockeypuck.hkp.router` – a WSGI `Router` that parses requests, queues
  them on a `Service` and writes back each worker's `Response`.
- `hockeypuck.openpgp.settings` – `OpenPGPSettings` for PKS mail sync,
  `PksStatus`, `smtp_auth_host` and the `next_delay` backoff rule.
- `hockeypuck.openpgp.keychange` – `KeyChange`, `KeyChangeType` and
  `new_uuid`.
- `hockeypuck.openpgp.packets` – raw OpenPGP packet reading
  (`read_opaque_packets`, `read_opaque_keyrings`), `OpaquePacket`,
  `OpaqueKeyring`, `PacketError` and the SKS-ordered digest
  `sks_digest_opaque`.
- `hockeypuck.openpgp.formatting` – helpers for key index pages and for
  key loading statements.

## Configuration

Settings are read from TOML. Keys are dotted paths into the document:

```python
from hockeypuck.config import set_config, config

set_config("""
[hockeypuck]
logfile = "/var/log/hockeypuck.log"

[hockeypuck.hkp]
bind = ":11371"

[hockeypuck.openpgp.pks]
to = ["pks@example.com"]
""")

settings = config()
settings.get_string("hockeypuck.logfile")                # "/var/log/hockeypuck.log"
settings.get_string_default("hockeypuck.hkps.bind", "")  # ""
settings.get_strings("hockeypuck.openpgp.pks.to")        # ["pks@example.com"]
settings.get_int_default("hockeypuck.openpgp.nworkers", 4)  # 4
```

`must_get_int` raises `ValueError` when a value is missing or not an
integer; `get_int_default` falls back to the default instead. Integer
strings are converted and stored back, as is the result of `get_bool`.

The HKP and OpenPGP layers read their own views of the same configuration;
their `config()` raises `RuntimeError` if no configuration has been set:

```python
from hockeypuck.hkp import settings as hkp_settings
from hockeypuck.openpgp import settings as openpgp_settings

hkp_settings.config().http_bind()        # ":11371" unless configured
openpgp_settings.config().smtp_host()    # "localhost:25" unless configured
```

## HKP requests

```python
from hockeypuck.hkp.requests import HttpRequest, Lookup, Operation, Option, parse_options

opts = parse_options("mr,nm")
bool(opts & Option.MACHINE_READABLE)    # True
bool(opts & Option.JSON_FORMAT)         # False

lookup = Lookup(HttpRequest(url="/pks/lookup?op=get&search=alice"))
lookup.parse()
lookup.op is Operation.GET              # True
lookup.search                           # "alice"
```

A `Lookup` requires `op` (`get`, `index`, `vindex`, `stats` or `hget`)
and, for every operation except `stats`, `search`. An `Add` must be a
`POST` carrying `keytext`. A `HashQuery` must be a `POST` whose body holds
a 4-byte big-endian count followed by that many 4-byte length-prefixed
digests, which are decoded to hex strings. Each `parse` raises
`RequestError` when a request breaks these rules.

## Serving requests

`Router` is a WSGI application for `/openpgp/add`, `/openpgp/lookup`,
`/pks/lookup`, `/pks/add` and `/pks/hashquery`; other paths get 404, and
requests that fail to parse get 400 "Application error". Parsed requests
are put on `router.service.requests`; something must take each one and
put a `Response` on its `response` queue:

```python
import threading
from wsgiref.simple_server import make_server

from hockeypuck.hkp.router import Response, Router


class PlainResponse(Response):
    def __init__(self, text):
        self.text = text

    def error(self):
        return None

    def write_to(self, writer):
        writer.add_header("Content-Type", "text/plain")
        writer.write(self.text)


router = Router()


def worker():
    while True:
        request = router.service.requests.get()
        request.response.put(PlainResponse(f"{type(request).__name__} received\n"))


threading.Thread(target=worker, daemon=True).start()
make_server("localhost", 11371, router).serve_forever()
```

## Index formatting

```python
from hockeypuck.openpgp.formatting import algorithm_code, fingerprint_format

fingerprint_format("0123456789ABCDEF0123456789ABCDEF01234567")
# "0123 4567 89AB CDEF 0123  4567 89AB CDEF 0123 4567"
algorithm_code(1)    # "R"
algorithm_code(17)   # "D"
```

## What this package does not do

- It has no key store: nothing saves, looks up or deletes keys, and no
  worker answers lookups or adds. The `Service` queue must be served by
  your own code, as in the example above.
- It reads OpenPGP packets only as raw tags and bodies; it does not decode
  keys, user IDs or signatures, check signatures or merge keys.
- It does not send PKS sync mail; it only holds the settings and the
  backoff rule for it.
- It has no command-line program and no HTTP listener of its own; run the
  `Router` under any WSGI server.

## Running the tests

Install the `test` extra and run `pytest` from the project root.