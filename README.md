# devglue

A collection of small helpers for tools that talk to devices over the
network. Each helper lives in its own module:

- `devglue.sha512`: pure-Python SHA-512 and SHA-384 with a hashlib-like
  interface (`Sha512`, `Sha384` with `update`, `digest`, `hexdigest`,
  `copy`; one-shot `sha512()` and `sha384()`).
- `devglue.tlv`: a tag/length/value encoder with one-byte tags and lengths
  (`TlvBuffer`) and lookups (`find_value`, `get_uint`, `get_uint8`,
  `copy_data`).
- `devglue.utils`: string and file helpers (`string_concat`, `build_path`,
  `format_size`, `generate_uuid`, `read_file`, `write_file`).
- `devglue.termcolors`: printf-style output that removes ANSI colour
  sequences when colours are turned off (`init`, `set_enabled`,
  `colors_enabled`, `strip_escapes`, `cfprintf`, `cprintf`).
- `devglue.thread`: thread helpers (`start_thread`, `thread_alive`, `Once`,
  `cond_wait_timeout`).
- `devglue.netif`: IPv6 scope and network interface queries
  (`in6_addr_scope`, `sockaddr_in6_scope_id`, `primary_mac_address`).
- `devglue.sockets`: TCP and Unix domain socket helpers with timeouts
  (`create`, `connect`, `connect_addr`, `create_unix`, `connect_unix`,
  `accept`, `receive`, `peek`, `receive_timeout`, `send`, `check_fd`,
  `get_socket_port`, `addr_to_string`, `shutdown`, `close`, and the
  `FdMode` enum).

## Installation

```
pip install devglue
```

Python 3.10 or newer is required. `psutil` is installed with the package;
`devglue.netif` uses it to list network interfaces.

## Examples

Hashing:

```python
from devglue.sha512 import Sha512, sha384

h = Sha512(b"abc")
h.update(b"def")
print(h.hexdigest())
print(sha384(b"abc").hex())
```

`digest()` does not finish the hash object; more data can be fed afterwards.

TLV encoding and decoding. A value longer than 255 bytes is split into
several records with the same tag, and `copy_data` joins them again:

```python
from devglue.tlv import TlvBuffer, get_uint, copy_data

buf = TlvBuffer()
buf.append(0x01, (42).to_bytes(2, "little"))
buf.append(0x02, b"x" * 600)
data = bytes(buf)

assert get_uint(data, 0x01) == 42
assert copy_data(data, 0x02) == b"x" * 600
```

`find_value` returns `None` for a missing tag; `get_uint`, `get_uint8` and
`copy_data` raise `KeyError` for it, and `ValueError` for a value of the
wrong size or for truncated data.

Sizes and paths:

```python
from devglue.utils import format_size, build_path

format_size(1500)                # '1.5 KB'
format_size(999)                 # '999 Bytes'
build_path("var", "lib", "db")   # 'var/lib/db'
```

`read_file` raises `ValueError` for an empty file.

Coloured output:

```python
from devglue import termcolors

termcolors.init()   # colours on if stdout is a terminal; COLOR=0 or COLOR=1 overrides
termcolors.cprintf("\x1b[1;32m%s\x1b[0m\n", "OK")
```

With colours off, the escape sequences are removed before writing; a
sequence not closed by `m` raises `ValueError`.

Waiting on a condition:

```python
import threading
from devglue.thread import cond_wait_timeout

cond = threading.Condition()
with cond:
    woken = cond_wait_timeout(cond, 100)   # False after 100 ms without notify
```

A TCP echo over localhost:

```python
from devglue import sockets

server = sockets.create("127.0.0.1", 0)
port = sockets.get_socket_port(server)
client = sockets.connect("127.0.0.1", port)
peer = sockets.accept(server)
sockets.send(client, b"ping")
print(sockets.receive(peer, 4))
for s in (client, peer, server):
    sockets.close(s)
```

Sockets returned by `connect`, `connect_addr` and `connect_unix` are left
non-blocking; `send`, `receive` and `peek` wait for readiness first. A
wait that runs out raises `TimeoutError`, and a peer that has closed the
connection raises `ConnectionResetError`.

Set the `SOCKET_DEBUG` environment variable to a number and call
`sockets.init_from_env()` to get diagnostic messages on stderr. A higher
number gives more messages. `sockets.set_verbose()` sets the level directly.

## What it does not do

This is a library only: it installs no command-line programs and runs no
server of its own. It does not speak any device protocol; it provides the
hashing, encoding, socket and threading pieces such a protocol is built on.