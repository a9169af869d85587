"""Paced character writer.

Tokens from a model arrive in bursts; writing each finished line at once
looks choppy. StreamingWriter hands every buffer to one background thread
that prints it a character at a time with a small fixed delay, so output
reads as a steady stream while the producer never waits.

Lifecycle::

    IDLE ──write()──▶ RUNNING ──finish()/abandon()──▶ DRAINING ──▶ STOPPED

The queue is the only channel between the producer and the consumer thread.
The consumer is the only code that touches the sink.
"""

from __future__ import annotations

import logging
import queue
import sys
import threading
import time
import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import TextIO

logger = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 3.0


class WriterState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


@dataclass(frozen=True)
class _Write:
    content: str


@dataclass(frozen=True)
class _Shutdown:
    pass


_Entry = _Write | _Shutdown


@dataclass
class _Outcome:
    """Written once by the consumer as it exits; read by the producer after."""

    finished: threading.Event = field(default_factory=threading.Event)
    error: BaseException | None = None


def _consume(entries: queue.Queue, sink: TextIO, delay: float, outcome: _Outcome) -> None:
    """Consumer loop. Runs on the writer thread until a shutdown entry."""
    first_char = True
    try:
        while True:
            entry = entries.get()
            if isinstance(entry, _Shutdown):
                sink.flush()
                break
            for ch in entry.content:
                if not first_char and delay > 0:
                    time.sleep(delay)
                first_char = False
                sink.write(ch)
                sink.flush()
    except Exception as e:
        logger.error("streaming writer sink failed: %s", e)
        outcome.error = e
    finally:
        outcome.finished.set()


def _request_shutdown(entries: queue.Queue) -> None:
    entries.put(_Shutdown())


class StreamingWriter:
    """Non-blocking writer that emits text one character at a time.

    Args:
        delay_ms: Pause before each character after the first; 0 disables pacing.
        sink: Text stream to write to. Defaults to sys.stdout.

    write() only enqueues. finish() is the one blocking call: it returns once
    every earlier write has been emitted, in order. abandon() (or dropping
    the writer unfinished) asks the thread to stop without waiting for it.
    """

    def __init__(self, delay_ms: float = DEFAULT_DELAY_MS, sink: TextIO | None = None):
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        self._delay = delay_ms / 1000.0
        self._sink = sink if sink is not None else sys.stdout
        self._entries: queue.Queue[_Entry] = queue.Queue()
        self._outcome = _Outcome()
        self._thread: threading.Thread | None = None
        self._finalizer: weakref.finalize | None = None
        self._state = WriterState.IDLE
        # Guards state transitions; write() may be called from several threads.
        self._lock = threading.Lock()

    @property
    def delay(self) -> float:
        """Per-character delay in seconds."""
        return self._delay

    @property
    def state(self) -> WriterState:
        """Current lifecycle state; STOPPED as soon as the consumer has exited."""
        if self._state is not WriterState.IDLE and self._outcome.finished.is_set():
            self._state = WriterState.STOPPED
        return self._state

    def _start(self) -> None:
        """Start the consumer thread. Caller holds _lock."""
        self._thread = threading.Thread(
            target=_consume,
            args=(self._entries, self._sink, self._delay, self._outcome),
            name="streamdown-writer",
            daemon=True,
        )
        self._thread.start()
        # Best-effort stop if the writer is dropped without finish().
        self._finalizer = weakref.finalize(self, _request_shutdown, self._entries)
        self._state = WriterState.RUNNING
        logger.debug("streaming writer started (delay=%.1fms)", self._delay * 1000)

    def write(self, data: bytes | str) -> int:
        """Queue data for paced output and return immediately.

        Bytes are decoded as UTF-8, invalid sequences replaced. Raises
        BrokenPipeError once the consumer has stopped or shutdown was
        requested.
        """
        text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
        with self._lock:
            if self._state is WriterState.IDLE:
                self._start()
            if self._state is not WriterState.RUNNING or self._outcome.finished.is_set():
                raise BrokenPipeError("streaming writer is no longer running") from self._outcome.error
            self._entries.put(_Write(text))
        return len(data)

    def flush(self) -> None:
        """No-op: the consumer flushes after every character."""

    def finish(self) -> None:
        """Request shutdown and block until everything queued has been emitted.

        Re-raises a sink error the consumer hit along the way.
        """
        with self._lock:
            if self._state is WriterState.IDLE:
                self._state = WriterState.STOPPED
                return
            if self._state is WriterState.RUNNING:
                _request_shutdown(self._entries)
                self._state = WriterState.DRAINING
            if self._finalizer is not None:
                self._finalizer.detach()
        if self._thread is not None:
            self._thread.join()
        self._state = WriterState.STOPPED
        logger.debug("streaming writer drained")
        if self._outcome.error is not None:
            raise self._outcome.error

    def abandon(self) -> None:
        """Request shutdown without waiting; queued output may be cut short."""
        with self._lock:
            if self._state is WriterState.IDLE:
                self._state = WriterState.STOPPED
                return
            if self._state is WriterState.RUNNING:
                if self._finalizer is not None:
                    self._finalizer.detach()
                _request_shutdown(self._entries)
                self._state = WriterState.DRAINING
                logger.debug("streaming writer abandoned")

    def __enter__(self) -> StreamingWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.finish()
        else:
            self.abandon()
