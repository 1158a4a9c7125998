"""Simulated input: data frames generated from expressions of time."""

from __future__ import annotations

import math
import random
import struct

from dataplotter.expressions import Engine, ExpressionError, VariableExpression

ROLLING_DEFAULTS = (
    "5*sin(2*Pi*t)",
    "2*cos(2*Pi*t) + 0.1*random()*sin(100*t)",
)
OSC_DEFAULTS = (
    "5*sin(2*Pi*1e3*t)",
    "2*cos(2*Pi*2e3*t + time)",
    'sin(time) // "time" counts seconds since start of simulation',
)
OSC_CHANNELS = 3
LOGIC_TEST_LENGTH = 256 * 2

STATUS_OK = "OK"
STATUS_EMPTY = "Empty"
STATUS_ERROR = "Error"


def _number(value: float) -> str:
    return format(value, ".6g")


def _float32(value: float) -> bytes:
    try:
        return struct.pack("<f", value)
    except OverflowError:
        return struct.pack("<f", math.copysign(math.inf, value))


class ExpressionTable:
    """Rows of channel expressions with their status: OK, Empty or Error."""

    def __init__(self, engine: Engine, channel_count: int = 1) -> None:
        if channel_count < 1:
            raise ValueError(f"a table needs at least one channel, got {channel_count}")
        self.engine = engine
        self.channels: list[VariableExpression] = []
        self.texts: list[str] = []
        self.statuses: list[str] = []
        for _ in range(channel_count):
            self.add_row()

    def __len__(self) -> int:
        return len(self.channels)

    @property
    def names(self) -> list[str]:
        return [f"Ch{i}" for i in range(1, len(self.channels) + 1)]

    def add_row(self) -> None:
        """Append an empty channel row."""
        self.channels.append(VariableExpression())
        self.texts.append("")
        self.statuses.append(STATUS_EMPTY)

    def remove_row(self) -> None:
        """Remove the last channel row; the last remaining row is kept."""
        if len(self.channels) > 1:
            self.channels.pop()
            self.texts.pop()
            self.statuses.pop()

    def set_expression(self, row: int, text: str) -> str:
        """Set the expression of ``row`` and return its new status."""
        ok = self.channels[row].set_expression(self.engine, text)
        status = STATUS_OK if ok else STATUS_EMPTY if not text else STATUS_ERROR
        self.texts[row] = text
        self.statuses[row] = status
        return status


class RollingGenerator:
    """Produces point frames (``$$P``) with one value per channel at each tick."""

    def __init__(self, time_scale: float = 1.0, rng: random.Random | None = None) -> None:
        self.time_scale = time_scale
        self.timestamp = 0.0
        self.engine = Engine({"t": 0.0}, rng=rng)
        self.table = ExpressionTable(self.engine, len(ROLLING_DEFAULTS))
        for row, text in enumerate(ROLLING_DEFAULTS):
            self.table.set_expression(row, text)

    def tick(self, interval: float) -> bytes:
        """Advance time by ``interval`` seconds (times the time scale) and return a frame."""
        self.timestamp += interval * self.time_scale
        self.engine.variables["t"] = self.timestamp
        fields = [f"$$P{self.timestamp:.10g}"]
        for channel in self.table.channels:
            try:
                fields.append(_number(channel.evaluate(self.engine)))
            except ExpressionError:
                fields.append("-")
        return (",".join(fields) + ";").encode("ascii")

    def reset_time(self) -> None:
        self.timestamp = 0.0


class OscilloscopeGenerator:
    """Produces whole-channel frames (``$$C``) of float32 samples at each tick."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.timestamp = 0.0
        self.engine = Engine({"t": 0.0, "time": 0.0}, rng=rng)
        self.table = ExpressionTable(self.engine, OSC_CHANNELS)
        for row, text in enumerate(OSC_DEFAULTS):
            self.table.set_expression(row, text)

    def tick(self, interval: float, length: int, sample_rate_khz: float) -> list[bytes]:
        """Advance ``time`` by ``interval`` seconds and return one frame per valid channel."""
        if length < 1:
            raise ValueError(f"length must be at least 1, got {length}")
        if sample_rate_khz <= 0:
            raise ValueError(f"sample rate must be positive, got {sample_rate_khz}")
        self.timestamp += interval
        fs = sample_rate_khz * 1000
        self.engine.variables["time"] = self.timestamp

        frames = []
        for number, channel in enumerate(self.table.channels, start=1):
            header = f"$$C{number},{_number(1.0 / fs)},{length};f4".encode("ascii")
            payload = bytearray()
            ok = True
            for i in range(length):
                self.engine.variables["t"] = i / fs
                try:
                    value = channel.evaluate(self.engine)
                    ok = True
                except ExpressionError:
                    value = math.nan
                    ok = False
                payload += _float32(value)
            if ok:
                frames.append(header + bytes(payload) + b";")
        return frames

    def reset_time(self) -> None:
        self.timestamp = 0.0


def logic_test_frame() -> bytes:
    """A logic frame counting through all byte values twice."""
    payload = bytes(i & 0xFF for i in range(LOGIC_TEST_LENGTH))
    return f"$$L,1,{LOGIC_TEST_LENGTH};U1".encode("ascii") + payload + b";"


def clear_all_frame() -> bytes:
    """Command frame that clears all channels."""
    return b"$$Sclearall;"