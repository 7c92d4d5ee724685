from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, TextIO


@dataclass
class _TimerEntry:
    name: str
    start: float
    end: float | None = None

    @property
    def elapsed(self) -> float:
        return (self.end or time.perf_counter()) - self.start


class PipelineLogger:
    """Run logger for labeling jobs with three independent sinks.

    - console   : INFO+  (human-readable, optional)
    - info_file : INFO+  (same as console but persisted)
    - trace_file: TRACE+ (every line, including per-span diagnostic notes)

    Each sink has its own level gate; all of them are written in one call.
    """

    LEVELS: dict[str, int] = {
        "TRACE": -1,
        "DEBUG":  0,
        "INFO":   1,
        "NOTE":   0,
        "METRIC": 1,
        "WARN":   2,
        "ERROR":  3,
    }

    def __init__(
        self,
        log_file: str | Path | None = None,
        trace_file: str | Path | None = None,
        console: bool = True,
        min_level: str = "INFO",
    ) -> None:
        self.console = console
        self.min_level = self.LEVELS.get(min_level.upper(), 1)
        self._info_file: TextIO | None = None
        self._trace_file: TextIO | None = None
        self.log_path: Path | None = None
        self.trace_path: Path | None = None
        self._timers: dict[str, _TimerEntry] = {}
        self._metrics: dict[str, list[tuple[float, Any]]] = {}
        self._start = time.perf_counter()
        self._bridge: tuple[logging.Logger, logging.Handler] | None = None

        if log_file:
            self.log_path = Path(log_file)
            self._info_file = self._open_sink(self.log_path, "promptspans log")

        if trace_file:
            self.trace_path = Path(trace_file)
            self._trace_file = self._open_sink(self.trace_path, "promptspans trace")

    @staticmethod
    def _open_sink(path: Path, title: str) -> TextIO:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = open(path, "w", encoding="utf-8", buffering=1)
        banner = "=" * 80
        handle.write(f"{banner}\n{title} - {time.strftime('%Y-%m-%d %H:%M:%S')}\n{banner}\n\n")
        return handle

    def _raw_info(self, line: str) -> None:
        if self._info_file:
            self._info_file.write(line + "\n")

    def _raw_trace(self, line: str) -> None:
        if self._trace_file:
            self._trace_file.write(line + "\n")

    def _emit(self, level: str, msg: str) -> None:
        level_int = self.LEVELS.get(level, 1)
        ts = time.strftime("%H:%M:%S")
        elapsed = time.perf_counter() - self._start
        line = f"[{ts}] [{elapsed:7.3f}s] {level:6} | {msg}"

        if self.console and level_int >= self.min_level:
            print(line, flush=True)

        if level_int >= 1:
            self._raw_info(line)

        self._raw_trace(line)

    def trace(self, msg: str) -> None:
        self._emit("TRACE", msg)

    def debug(self, msg: str) -> None:
        self._emit("DEBUG", msg)

    def info(self, msg: str) -> None:
        self._emit("INFO", msg)

    def warn(self, msg: str) -> None:
        self._emit("WARN", msg)

    def error(self, msg: str) -> None:
        self._emit("ERROR", msg)

    def notes(self, stage: str, notes: Iterable[str]) -> None:
        """Record a stage's diagnostic notes (trace sink, console at DEBUG)."""
        for note in notes:
            self._emit("NOTE", f"{stage}: {note}")

    def section(self, title: str) -> None:
        sep = "=" * 80
        for line in ("", sep, f"  {title}", sep):
            if self.console:
                print(line, flush=True)
            self._raw_info(line)
            self._raw_trace(line)

    def metric(self, name: str, value: Any, unit: str = "") -> None:
        t = time.perf_counter() - self._start
        self._metrics.setdefault(name, []).append((t, value))
        vstr = f"{value:.3f}" if isinstance(value, float) else str(value)
        if unit:
            vstr += f" {unit}"
        self._emit("METRIC", f"{name} = {vstr}")

    def metrics(self, name: str) -> list[Any]:
        return [value for _, value in self._metrics.get(name, [])]

    def timer_start(self, name: str) -> None:
        self._timers[name] = _TimerEntry(name=name, start=time.perf_counter())

    def timer_end(self, name: str) -> float:
        t = self._timers.get(name)
        if t is None:
            self.warn(f"Timer '{name}' never started")
            return 0.0
        t.end = time.perf_counter()
        return t.elapsed

    @contextmanager
    def timer(self, name: str):
        self.timer_start(name)
        try:
            yield
        finally:
            elapsed = self.timer_end(name)
            self._emit("METRIC", f"timer:{name} = {elapsed * 1000:.2f}ms")

    def summary(self) -> None:
        self.section("RUN SUMMARY")
        total = time.perf_counter() - self._start
        self.info(f"Total wall time: {total:.3f}s")

        completed = {n: t.elapsed for n, t in self._timers.items() if t.end}
        for name, elapsed in sorted(completed.items(), key=lambda x: -x[1])[:20]:
            self.info(f"  {name:<40} {elapsed * 1000:>9.2f}ms")

        if self.log_path:
            self.info(f"Info log : {self.log_path}")
        if self.trace_path:
            self.info(f"Trace log: {self.trace_path}")

    def install_stdlib_bridge(self, root_logger: str = "promptspans", level: int = logging.INFO) -> None:
        """Route ``logging`` records under *root_logger* into this run log.

        Replaces any bridge left by an earlier run logger.
        """
        root = logging.getLogger(root_logger)
        for h in [h for h in root.handlers if isinstance(h, _BridgeHandler)]:
            root.removeHandler(h)
        handler = _BridgeHandler(self)
        handler.setLevel(level)
        root.setLevel(min(root.level or logging.DEBUG, level))
        root.addHandler(handler)
        self._bridge = (root, handler)

    def close(self) -> None:
        if self._bridge is not None:
            root, handler = self._bridge
            root.removeHandler(handler)
            self._bridge = None
        if self._info_file:
            self._info_file.close()
            self._info_file = None
        if self._trace_file:
            self._trace_file.close()
            self._trace_file = None

    def __enter__(self) -> "PipelineLogger":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


class _BridgeHandler(logging.Handler):
    _MAP = {
        logging.DEBUG:    "debug",
        logging.INFO:     "info",
        logging.WARNING:  "warn",
        logging.ERROR:    "error",
        logging.CRITICAL: "error",
    }

    def __init__(self, logger: PipelineLogger) -> None:
        super().__init__()
        self._run_logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            getattr(self._run_logger, self._MAP.get(record.levelno, "info"))(
                f"[{record.name}] {msg}"
            )
        except Exception:
            self.handleError(record)

