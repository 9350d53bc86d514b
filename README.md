# knockd

A small port-knocking daemon. It listens on a short sequence of TCP ports.
When a client connects to those ports in the configured order, within the
configured time limits, the daemon appends a service activation entry for
that client's IP address to a log file.

## Installation

```
pip install .
```

## Configuration

The daemon reads a JSON file like this one:

```json
{
    "trigger_ports": [7000, 8000, 9000],
    "sequence_timeout_ms": 5000,
    "inter_knock_timeout_ms": 1000,
    "activation_log_file": "/tmp/knockd.log"
}
```

- `trigger_ports`: the knock sequence. It must be a list of 3 to 5
  integers, each between 1 and 65535.
- `sequence_timeout_ms`: the most time the whole sequence may take, in
  milliseconds (an integer).
- `inter_knock_timeout_ms`: the most time allowed between two consecutive
  knocks, in milliseconds (an integer).
- `activation_log_file`: the file that log entries are appended to.

`knockd.config.Config.load(path)` reads and validates the file and returns a
frozen `Config` with the fields `trigger_ports` (a tuple),
`sequence_timeout_ms`, `inter_knock_timeout_ms` and `log_file`. It raises
`knockd.config.ConfigError` when the file does not exist, cannot be read, is
not valid JSON, or fails any of the checks above. When the file exists but
its contents are rejected, the error is also appended to
`/var/log/ssad_activations.log`, because no configured log path is known at
that point (if that file cannot be opened, the entry is dropped).

## Running

```
knockd /path/to/config.json
```

Without an argument the command prints a usage line and exits with status 1.
If the configuration cannot be loaded, the error is printed to standard
error and the exit status is 1.

Otherwise the daemon starts one listener thread per trigger port, bound to
all interfaces (`0.0.0.0`), and runs until it receives SIGINT (Ctrl-C). It
then prints `Received signal 2, shutting down...`, the listeners finish
within about a second, and it exits with status 0. A port that cannot be
bound or listened on gets an `ERROR` entry in the activation log; the other
ports keep running.

Each connection is accepted, counted as a knock from the client's address,
and closed at once. Each completed sequence appends a line like this:

```
[2024-01-01 12:00:00] INFO: service activation <203.0.113.7>
```

A knock on the wrong port resets that client's sequence, as does exceeding
either timeout. A completed sequence clears the client's state, so the next
knock starts a new sequence.

## Using it as a library

```python
from knockd.config import Config
from knockd.logger import Logger
from knockd.tracker import Tracker

config = Config.load("config.json")
tracker = Tracker(config, Logger(config.log_file))
for port in config.trigger_ports:
    tracker.record_knock("203.0.113.7", port)
```

- `knockd.logger.Logger(path).write(level, message, *args)` appends
  `[YYYY-MM-DD HH:MM:SS] LEVEL: message` in local time. `message` is
  %-formatted with `args` when any are given, and truncated to 1023
  characters. `level` is a `knockd.logger.LogLevel` (`INFO`, `WARN`, `ERROR`
  or `DEBUG`). Writes are serialised with a lock. If the file cannot be
  opened, the entry is silently dropped.
- `knockd.tracker.Tracker(config, logger, clock=time.monotonic)` is
  thread-safe. It keeps a `KnockState` (`index`, `start_time`, `last_knock`)
  for each address. `clock` can be replaced with any function that returns
  seconds, which is useful in tests.
- `knockd.daemon.Daemon(host="0.0.0.0")` runs the listeners.
  `run(config_path)` blocks and returns 0 or 1 as described above. `stop()`
  asks the listeners to finish and may be called from another thread. The
  `running` property reports whether `stop()` has not yet been called.
- `knockd.daemon.main(argv=None)` is the command-line entry point.

## What it does not do

An activation is only a log entry. The daemon does not open firewall rules,
start a service, or run anything when a sequence completes. The command has
no options: the listen address cannot be set from the command line, only
through `Daemon(host=...)`.

## Tests

```
pip install .[test]
pytest
```