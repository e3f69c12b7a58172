"""Segment planner: turns a duration and slice length into segments."""

from clipsplit.errors import InvalidInput, InvalidSliceLength
from clipsplit.models import SegmentDescriptor


def parse_slice_seconds(value: object) -> int:
    """Coerce a user-supplied slice length to a positive int.

    Accepts ints and integral numeric strings/floats ("60", 60.0).
    Raises InvalidSliceLength for anything else.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidSliceLength(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                raise InvalidSliceLength(text) from None
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidSliceLength(value)
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise InvalidSliceLength(value)
    return value


def output_name(index: int, container: str = "mp4") -> str:
    """Deterministic artifact name for the 0-based segment *index*."""
    return f"output_{index + 1}.{container}"


def plan(total_duration: int, slice_seconds: int) -> list[SegmentDescriptor]:
    """Split ``[0, total_duration)`` into contiguous slices.

    Every descriptor carries the nominal ``slice_seconds`` as its length,
    including the last one. That segment's real output duration is
    ``total_duration - start`` (at most ``slice_seconds``); the trim copies
    until end-of-stream.

    A zero duration yields an empty plan.
    """
    slice_seconds = parse_slice_seconds(slice_seconds)

    if isinstance(total_duration, bool) or not isinstance(total_duration, int):
        raise InvalidInput(f"Source duration must be a whole number of seconds, got {total_duration!r}")
    if total_duration < 0:
        raise InvalidInput(f"Source duration cannot be negative: {total_duration}")

    count = -(-total_duration // slice_seconds)
    return [
        SegmentDescriptor(index=i, start=i * slice_seconds, length=slice_seconds)
        for i in range(count)
    ]
