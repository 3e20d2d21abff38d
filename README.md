# trojango

trojango is the core of a trojan-style proxy. It parses a JSON or YAML
configuration into per-module settings, chooses a start-up mode from the
command line, and relays connections and packets between inbound sources
and an outbound sink that you supply. Alongside it come the helpers such a
proxy uses.

## Modules

- `trojango.config` – `register_config_creator(name, creator)` registers a
  factory for a module's default settings (a dataclass or a dict);
  `with_json_config` and `with_yaml_config` parse one document into every
  registered config and return a new context dict; `with_config` and
  `from_context` store and fetch one config by module name.
- `trojango.proxy` – `Proxy(sources, sink)` with `run()` (blocks until
  `close()`) and `close()`; `register_proxy_creator(name, creator)`;
  `new_proxy_from_config_data(data, is_json)`, which reads `run_type`,
  `log_level` and `log_file` (`ProxyConfig`), sets the log level and output,
  and calls the creator registered for the upper-cased run type. Also the
  start-up handlers `ConfigOption` and `StdinOption`.
- `trojango.easy` – `EasyOption`, whose `client_config()` and
  `server_config()` build a `ClientConfig` or `ServerConfig` (with a
  `TLSConfig` for `ssl`) from a few values.
- `trojango.option` – `register_handler` and `pop_option_handler`, which
  removes and returns the registered handler of highest priority.
- `trojango.redirector` – `Redirector` and `Redirection`: forwards an
  inbound socket to another address on background threads until `close()`.
- `trojango.geodata` – `decode(filename, code)` and `emit_bytes(f, code)`
  return the raw bytes of one entry of a `geoip.dat` / `geosite.dat` list,
  matching the code case-insensitively, without reading the whole list.
  Errors are `GeodataError` subclasses: `CodeNotFoundError`,
  `InvalidGeodataFileError`, `InvalidGeodataVarintLengthError`,
  `FailedToReadBytesError`, `FailedToReadExpectedLenBytesError`.
- `trojango.rewind` – `RewindReader` and `RewindConn` (replay buffered bytes
  after `rewind()`), and `StickyWriter` (joins the first `max_buffered`
  writes into one).
- `trojango.notifier` – `Notifier`, a coalescing `signal()` / `wait(timeout)`.
- `trojango.logger` – the process-wide front end (`info`, `warnf`, `fatal`,
  …, `set_log_level`, `set_output`, `register_logger`) and `LogLevel`
  (`ALL`, `INFO`, `WARN`, `ERROR`, `FATAL`, `OFF`). Until a logger is
  registered, messages go to `EmptyLogger`, which drops them.
- `trojango.golog` – `Logger`, a coloured, timestamped stream logger; importing
  the module registers one on standard output.
- `trojango.simplelog` – `SimpleLogger`, which writes "date time message"
  lines to standard error.
- `trojango.logbuffer` and `trojango.colorful` – the byte buffer and ANSI
  colour helpers the logger builds lines with (colours are empty outside
  Linux).
- `trojango.common` – `TrojanError` (with `base(err)` to chain a cause),
  `sha224_string`, `human_friendly_traffic`, `pick_port`,
  `get_asset_location`, `write_file`, `fetch_http_content`.

## The command

    trojango --config config.json
    trojango --stdin-format json < config.json
    trojango --client --remote example.com:443 --password password
    trojango --server --password password --cert server.crt --key server.key

Every option is also accepted with a single dash (`-config`, `-client`, …).
Handlers are tried in priority order: easy mode (`--client` / `--server`)
first, then standard input (`--stdin-format json` or `yaml`; `disabled` by
default), then the config file. Without `--config`, `config.json`,
`config.yml` and `config.yaml` are tried in turn. Config files must end in
`.json`, `.yaml` or `.yml`.

Easy mode defaults: a client's local address is `127.0.0.1:1080`; a server's
local address is `0.0.0.0:443` and its remote address `127.0.0.1:80`. An
empty password is refused.

## Configuration

The keys read by the proxy are `run_type` (`run-type` in YAML), `log_level`
(`log-level`; 0 all, 1 info, 2 warn, 3 error, 4 fatal, 5 off; default 1)
and `log_file` (`log-file`, opened for appending). Every registered config
creator sees the same document.

```python
from dataclasses import dataclass
from trojango import config, proxy

@dataclass
class MySettings:
    enabled: bool = False

config.register_config_creator("MINE", MySettings)
proxy.register_proxy_creator("CLIENT", build_my_client_proxy)
proxy.new_proxy_from_config_data(b'{"run_type": "client"}', True).run()
```

## Geodata files

`geoip.dat` and `geosite.dat` are looked up next to the program, or in the
directory named by the `TROJAN_GO_LOCATION_ASSET` environment variable.

```python
from trojango.common import get_asset_location
from trojango.geodata import decode

entry = decode(get_asset_location("geoip.dat"), "private")
```

## What this package does not do

- It registers no run types. `new_proxy_from_config_data` raises
  `TrojanError("unknown proxy type: …")` unless a creator for the configured
  `run_type` has been registered with `register_proxy_creator`, so the
  `trojango` command on its own reports the error and exits with status 1.
- It has no tunnel layers: no TLS, WebSocket, multiplexing, SOCKS, HTTP,
  shadowsocks or transparent-proxy servers or clients, and no routing.
  `Proxy` relays between sources and a sink you provide.
- It has no user authentication, traffic statistics or management API
  server; `trojango.api` is only a registry for such services.
- `trojango.geodata` returns an entry's raw bytes; it does not parse them
  into CIDR or domain lists.