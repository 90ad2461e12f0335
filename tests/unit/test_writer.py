from __future__ import annotations

import hashlib
import io
import random
import unittest

from chunkhash.boundaries import at_offsets, every
from chunkhash.digests import DigestRecorder, DigestVerifier
from chunkhash.errors import (
    AccumulatorError,
    BoundaryError,
    DigestCallbackError,
    DigestMismatchError,
    ShortWriteError,
    SinkError,
)
from chunkhash.io.tee import NullSink
from chunkhash.writer import HashingWriter
from tests.helpers import PAYLOAD, ListSink, reference_events, sha256


def _events(recorder: DigestRecorder) -> list[tuple[int, bytes]]:
    return [(event.offset, event.digest) for event in recorder.events]


def _hash_with_splits(data: bytes, step: int, cuts: list[int]) -> list[tuple[int, bytes]]:
    recorder = DigestRecorder()
    writer = HashingWriter(NullSink(), hashlib.sha256, every(step), recorder)
    previous = 0
    for cut in cuts + [len(data)]:
        writer.write(data[previous:cut])
        previous = cut
    writer.close()
    return _events(recorder)


class FailingHash:
    def __init__(self) -> None:
        self.calls = 0

    def update(self, data) -> None:
        self.calls += 1
        if self.calls == 2:
            raise RuntimeError("accumulator broke")

    def digest(self) -> bytes:
        return b"x"


class HashingWriterScenarioTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        recorder = DigestRecorder()
        writer = HashingWriter(io.BytesIO(), hashlib.sha256, every(7), recorder)
        cls.written = writer.write(PAYLOAD)
        writer.close()
        cls.events = recorder.events

    def _verifying_writer(self, expected) -> HashingWriter:
        return HashingWriter(NullSink(), hashlib.sha256, every(7), DigestVerifier(expected))

    def test_chunk_count_and_offsets(self) -> None:
        total = len(PAYLOAD)
        self.assertEqual(total, 851968)
        self.assertEqual(self.written, total)
        self.assertEqual(len(self.events), 1 + total // 7)
        self.assertEqual(len(self.events), 121710)
        for index, event in enumerate(self.events[:-1]):
            self.assertEqual(event.offset, (index + 1) * 7)
        self.assertEqual(self.events[-1].offset, total)

    def test_each_digest_covers_its_byte_range(self) -> None:
        previous = 0
        for event in self.events:
            self.assertEqual(event.digest, sha256(PAYLOAD[previous : event.offset]))
            previous = event.offset

    def test_verify_with_random_splits(self) -> None:
        rng = random.Random(1234)
        writer = self._verifying_writer(self.events)
        position = 0
        while position < len(PAYLOAD):
            size = rng.randint(1, 4096)
            self.assertEqual(writer.write(PAYLOAD[position : position + size]), len(PAYLOAD[position : position + size]))
            position += size
        writer.close()

    def test_corrupt_first_byte_fails_at_first_boundary(self) -> None:
        corrupted = b"X" + PAYLOAD[1:]
        writer = self._verifying_writer(self.events)

        with self.assertRaises(DigestCallbackError) as ctx:
            writer.write(corrupted)

        self.assertEqual(ctx.exception.offset, 7)
        self.assertEqual(ctx.exception.written, 7)
        self.assertIsInstance(ctx.exception.error, DigestMismatchError)
        self.assertIs(ctx.exception.__cause__, ctx.exception.error)

    def test_corrupt_last_byte_fails_only_on_close(self) -> None:
        corrupted = PAYLOAD[:-1] + b"X"
        writer = self._verifying_writer(self.events)

        self.assertEqual(writer.write(corrupted), len(corrupted))
        with self.assertRaises(DigestCallbackError) as ctx:
            writer.close()

        self.assertEqual(ctx.exception.offset, len(PAYLOAD))
        self.assertEqual(ctx.exception.error.offset, len(PAYLOAD))


class HashingWriterTests(unittest.TestCase):
    data = PAYLOAD[:13 * 40]

    def test_granularity_does_not_change_digests(self) -> None:
        expected = reference_events(self.data, 7)
        self.assertEqual(_hash_with_splits(self.data, 7, []), expected)
        self.assertEqual(_hash_with_splits(self.data, 7, list(range(1, len(self.data)))), expected)
        rng = random.Random(7)
        cuts = sorted(rng.sample(range(1, len(self.data)), 25))
        self.assertEqual(_hash_with_splits(self.data, 7, cuts), expected)

    def test_exact_multiple_has_no_trailing_chunk(self) -> None:
        data = self.data[:70]
        events = _hash_with_splits(data, 7, [3, 14, 15])
        self.assertEqual(len(events), 10)
        self.assertEqual(events[-1][0], 70)

    def test_forwards_bytes_unmodified(self) -> None:
        sink = io.BytesIO()
        writer = HashingWriter(sink, hashlib.sha256, every(5), DigestRecorder())
        writer.write(self.data[:12])
        writer.write(bytearray(self.data[12:]))
        writer.close()
        self.assertEqual(sink.getvalue(), self.data)
        self.assertFalse(sink.closed)

    def test_empty_write_and_close_are_noops(self) -> None:
        recorder = DigestRecorder()
        sink = ListSink()
        writer = HashingWriter(sink, hashlib.sha256, every(4), recorder)

        self.assertEqual(writer.write(b""), 0)
        writer.close()

        self.assertEqual(sink.calls, 0)
        self.assertEqual(len(recorder), 0)

    def test_counters_track_progress(self) -> None:
        writer = HashingWriter(NullSink(), hashlib.sha256, every(4), DigestRecorder())
        writer.write(b"abcdef")
        self.assertEqual(writer.bytes_written, 6)
        self.assertEqual(writer.bytes_summed, 4)
        self.assertEqual(writer.next_stop, 8)
        writer.close()
        self.assertEqual(writer.bytes_summed, 6)
        self.assertTrue(writer.closed)

    def test_sink_error_reports_forwarded_count(self) -> None:
        sink = ListSink(fail_on=3)
        recorder = DigestRecorder()
        writer = HashingWriter(sink, hashlib.sha256, every(4), recorder)

        with self.assertRaises(SinkError) as ctx:
            writer.write(b"0123456789")

        self.assertEqual(ctx.exception.written, 8)
        self.assertEqual(ctx.exception.offset, 8)
        self.assertIsInstance(ctx.exception.__cause__, OSError)
        self.assertEqual(bytes(sink.buffer), b"01234567")
        self.assertEqual([event.offset for event in recorder.events], [4, 8])

    def test_short_write_hashes_only_accepted_bytes(self) -> None:
        sink = ListSink(short_on=2, short_by=1)
        recorder = DigestRecorder()
        writer = HashingWriter(sink, hashlib.sha256, every(4), recorder)

        with self.assertRaises(ShortWriteError) as ctx:
            writer.write(b"0123456789")

        self.assertEqual(ctx.exception.written, 7)
        self.assertEqual(writer.bytes_written, 7)
        writer.close()
        self.assertEqual(recorder.events[-1].offset, 7)
        self.assertEqual(recorder.events[-1].digest, sha256(b"456"))

    def test_accumulator_error_is_wrapped(self) -> None:
        writer = HashingWriter(NullSink(), FailingHash, every(4), DigestRecorder())

        with self.assertRaises(AccumulatorError) as ctx:
            writer.write(b"ab")
            writer.write(b"cd")

        self.assertEqual(ctx.exception.written, 2)
        self.assertIsInstance(ctx.exception.error, RuntimeError)

    def test_callback_error_stops_processing(self) -> None:
        sink = ListSink()

        def reject(offset: int, digest: bytes) -> None:
            raise ValueError(f"rejected {offset}")

        writer = HashingWriter(sink, hashlib.sha256, every(3), reject)
        with self.assertRaises(DigestCallbackError) as ctx:
            writer.write(b"abcdefgh")

        self.assertEqual(ctx.exception.offset, 3)
        self.assertEqual(bytes(sink.buffer), b"abc")
        self.assertEqual(writer.bytes_summed, 0)

    def test_stale_boundary_raises(self) -> None:
        with self.assertRaises(BoundaryError):
            HashingWriter(NullSink(), hashlib.sha256, at_offsets([0]), DigestRecorder())

        writer = HashingWriter(NullSink(), hashlib.sha256, at_offsets([3, 3]), DigestRecorder())
        with self.assertRaises(BoundaryError) as ctx:
            writer.write(b"abcdef")
        self.assertEqual(ctx.exception.written, 3)

    def test_exhausted_boundaries_leave_one_trailing_chunk(self) -> None:
        recorder = DigestRecorder()
        writer = HashingWriter(NullSink(), hashlib.sha256, [2, 5], recorder)
        writer.write(b"abcdefghij")
        self.assertIsNone(writer.next_stop)
        writer.close()
        self.assertEqual(
            _events(recorder),
            [(2, sha256(b"ab")), (5, sha256(b"cde")), (10, sha256(b"fghij"))],
        )

    def test_write_after_close_and_double_close(self) -> None:
        recorder = DigestRecorder()
        writer = HashingWriter(NullSink(), hashlib.sha256, every(4), recorder)
        writer.write(b"ab")
        writer.close()
        writer.close()

        self.assertEqual(len(recorder), 1)
        with self.assertRaises(ValueError):
            writer.write(b"cd")

    def test_context_manager_flushes_on_success_only(self) -> None:
        recorder = DigestRecorder()
        with HashingWriter(NullSink(), hashlib.sha256, every(4), recorder) as writer:
            writer.write(b"abcdef")
        self.assertEqual([event.offset for event in recorder.events], [4, 6])

        recorder = DigestRecorder()
        with self.assertRaises(RuntimeError):
            with HashingWriter(NullSink(), hashlib.sha256, every(4), recorder) as writer:
                writer.write(b"abcdef")
                raise RuntimeError("abort")
        self.assertEqual([event.offset for event in recorder.events], [4])


if __name__ == "__main__":
    unittest.main()
