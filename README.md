# reactorkit

Small, dependency-free building blocks for reactor-style network services
on POSIX systems (Linux is assumed where `/proc/self` is read).

## Modules

- `reactorkit.timestamp`: `Timestamp`, a UTC point in time with microsecond
  resolution, plus `time_difference` and `add_time`.
- `reactorkit.date`: `Date`, a Gregorian date kept as a Julian day number,
  and the conversions `get_julian_day_number` / `get_year_month_day`.
- `reactorkit.timezone`: `TimeZone`, loaded from a TZif file
  (`TimeZone.from_file`) or with a fixed offset (`TimeZone.fixed`), and the
  UTC helpers `TimeZone.to_utc_time` / `TimeZone.from_utc_time`, which return
  and take `BrokenDownTime` fields.
- `reactorkit.current_thread`: the cached thread id, the thread's name and a
  text stack trace.
- `reactorkit.strutil`: `split_str`, which splits on a separator and trims
  spaces and tabs from each piece.
- `reactorkit.logstream`: `FixedBuffer`, `LogStream` (values are appended
  with `<<`), `Fmt`, and the size formatters `format_si` and `format_iec`.
- `reactorkit.logger`: `Logger`, `LogLevel`, and the helpers `log`,
  `log_syserr` and `check_not_null`.
- `reactorkit.fileutil`: `ReadSmallFile`, `read_file` and `AppendFile`.
- `reactorkit.logfile`: `LogFile`, a log file that rolls over by size and by
  day.
- `reactorkit.processinfo`: process id, user, host name, open files, CPU time
  and threads of the running process.
- `reactorkit.sync`: `CountDownLatch`, `BlockingQueue`,
  `BoundedBlockingQueue` and `AtomicInteger`.
- `reactorkit.buffer`: `Buffer`, a growable byte buffer with prepend space
  and network-order integer reads and writes.
- `reactorkit.inet_address`: `InetAddress`, an IPv4 or IPv6 address and port.
- `reactorkit.sockets`: socket helpers (`create_nonblocking`, `accept`,
  `connect`, `is_self_connect`, ...) and `Socket`, which owns a socket.
- `reactorkit.channel`: `Channel`, which dispatches poll events on one
  descriptor to its read, write, close and error callbacks.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

Timestamps and formatted sizes:

```python
from reactorkit.timestamp import Timestamp, add_time
from reactorkit.logstream import format_si, format_iec

start = Timestamp.from_unix_time(1_500_000_000, 0)
print(start.to_formatted_string(True))  # 20170714 02:40:00.000000
later = add_time(start, 1.5)
print(later.to_string())                # 1500000001.500000

print(format_si(12345))                 # 12.3k
print(format_iec(1 << 20))              # 1.00Mi
```

A byte buffer with network-order integers:

```python
from reactorkit.buffer import Buffer

buf = Buffer()
buf.append(b"HEAD\r\n")
buf.append_int32(42)
end = buf.find_crlf()                  # 4
line = buf.retrieve_as_bytes(end)      # b"HEAD"
buf.retrieve(2)
print(buf.read_int32())                # 42
```

Logging:

```python
from reactorkit.logger import Logger, LogLevel, log

log(LogLevel.INFO, "server started on port ", 8080)

lines = []
Logger.set_output(lines.append)        # collect finished lines as bytes
log(LogLevel.WARN, "disk almost full")
Logger.set_output(None)                # back to standard output
```

Each line starts with the UTC time, the thread id and the level, and ends
with ` - <file>:<line>`. TRACE, DEBUG and INFO lines below the level set with
`Logger.set_log_level` are dropped; the starting level is TRACE if the
environment variable `REACTORKIT_LOG_TRACE` is set, DEBUG if
`REACTORKIT_LOG_DEBUG` is set, and INFO otherwise. A FATAL line is written,
flushed, and then raises `FatalLogError`.

Writing to a rolling log file in the current directory:

```python
from reactorkit.logfile import LogFile

log_file = LogFile("server", roll_size=64 * 1024 * 1024)
log_file.append(b"hello\n")
log_file.flush()
log_file.close()
```

## What the package does not do

reactorkit has no event loop, poller, timer queue, TCP server or TCP
connection classes. `Channel` expects the caller to supply a loop object with
`update_channel(channel)` and `remove_channel(channel)` methods and to set
`revents` before calling `handle_event`. There is no background log writer,
no named thread wrapper and no thread pool; use `threading` or
`concurrent.futures` alongside the helpers in `reactorkit.sync`. The package
installs no command-line programs.