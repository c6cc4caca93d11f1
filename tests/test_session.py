"""Unit tests for the annotation session and the CLI."""

from __future__ import annotations

import contextlib
import io
import json
import os
import tempfile
import unittest
from unittest import mock

import numpy as np
import scipy.io.wavfile as wavfile

from speech_segmenter import AnnotationSession, InvalidParameters, SampleBuffer, SegmentationCancelled
from speech_segmenter.cli import main

SR = 16_000

PARAMS = {
    "amplitude_threshold": 0.1,
    "min_segment_duration": 0.3,
    "pause_tolerance": 0.2,
}


def _tone(freq: float, duration: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(round(duration * SR))) / SR
    return amplitude * np.sin(2 * np.pi * freq * t)


def _buffer() -> SampleBuffer:
    gap = np.zeros(SR)
    return SampleBuffer(np.concatenate([gap, _tone(120, 1.0), gap, _tone(240, 1.0), gap]), SR)


class TestSampleBuffer(unittest.TestCase):
    def test_channel_zero_and_read_only(self) -> None:
        stereo = np.stack([np.full(10, 0.5), np.full(10, -0.5)], axis=1)
        buffer = SampleBuffer(stereo, 8_000)
        np.testing.assert_array_equal(buffer.samples, np.full(10, 0.5))
        with self.assertRaises(ValueError):
            buffer.samples[0] = 1.0

    def test_invalid_sample_rate(self) -> None:
        with self.assertRaises(InvalidParameters):
            SampleBuffer(np.zeros(10), 0)

    def test_slice_seconds(self) -> None:
        buffer = SampleBuffer(np.arange(100, dtype=float), 10)
        np.testing.assert_array_equal(buffer.slice_seconds(1.0, 2.0), np.arange(10, 20))
        self.assertEqual(len(buffer.slice_seconds(5.0, 4.0)), 0)
        self.assertEqual(buffer.duration, 10.0)

    def test_from_wav_scales_int16(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "a.wav")
            wavfile.write(path, 8_000, np.array([0, 16384, -32768], dtype=np.int16))
            buffer = SampleBuffer.from_wav(path)
        self.assertEqual(buffer.sample_rate, 8_000)
        np.testing.assert_allclose(buffer.samples, [0.0, 0.5, -1.0])


class TestAnnotationSession(unittest.TestCase):
    """Tests for AnnotationSession."""

    def setUp(self) -> None:
        self.session = AnnotationSession()
        self.session.load_audio(_buffer())

    def test_run_segmentation_commits_and_captures(self) -> None:
        progress = []
        result = self.session.run_segmentation("silence_f0", PARAMS, progress=progress.append)
        self.assertEqual(len(result), 2)
        self.assertEqual([r["speaker_label"] for r in result], ["spk1", "spk2"])
        self.assertIn("f0", result[0])
        self.assertEqual(progress[-1], 100)
        self.assertEqual([s.speaker_id for s in self.session.store.sorted_segments()], [1, 2])
        self.assertEqual(self.session.history.undo_labels(), ["auto-segmentation"])

        self.session.history_undo()
        self.assertEqual(len(self.session.store), 0)
        self.session.history_redo()
        self.assertEqual(len(self.session.store), 2)

    def test_silence_result_has_no_labels(self) -> None:
        result = self.session.run_segmentation("silence", PARAMS)
        self.assertEqual(set(result[0]), {"start", "end"})

    def test_invalid_parameters_leave_state_untouched(self) -> None:
        self.session.create_segment(0.0, 0.5)
        with self.assertRaises(InvalidParameters):
            self.session.run_segmentation("silence_f0", {**PARAMS, "f0_max": 10})
        self.assertEqual(len(self.session.store), 1)
        self.assertEqual(self.session.history.undo_labels(), ["create segment"])

    def test_cancelled_run_commits_nothing(self) -> None:
        self.session.create_segment(0.0, 0.5)
        resets = []
        sink = mock.Mock()
        sink.reset.side_effect = lambda: resets.append(1)
        with self.assertRaises(SegmentationCancelled):
            self.session.run_segmentation("silence", PARAMS, progress=sink, cancel=lambda: True)
        self.assertEqual(len(self.session.store), 1)
        self.assertEqual(self.session.history.undo_depth, 1)
        self.assertEqual(resets, [1])

    def test_requires_audio(self) -> None:
        with self.assertRaises(InvalidParameters):
            AnnotationSession().run_segmentation("silence", PARAMS)

    def test_load_audio_clears_history(self) -> None:
        self.session.run_segmentation("silence", PARAMS)
        self.session.load_audio(_buffer())
        self.assertFalse(self.session.history.can_undo)
        self.assertEqual(len(self.session.store), 0)

    def test_edits_are_undoable(self) -> None:
        seg = self.session.create_segment(0.0, 1.0)
        self.session.change_speaker(seg.id, 2)
        self.session.rename_speaker(2, "Alice")
        self.session.delete_segment(seg.id)
        self.assertEqual(len(self.session.store), 0)

        self.session.history_undo()
        self.assertEqual(self.session.store.segments[0].speaker_id, 2)
        self.session.history_undo()
        self.assertEqual(self.session.store.speaker(2).name, "Speaker 2")
        self.session.history_undo()
        self.assertEqual(self.session.store.segments[0].speaker_id, 1)
        self.session.history_undo()
        self.assertEqual(len(self.session.store), 0)
        self.assertIsNone(self.session.history_undo())

    def test_invalid_edit_captures_nothing(self) -> None:
        with self.assertRaises(InvalidParameters):
            self.session.create_segment(1.0, 1.0)
        with self.assertRaises(KeyError):
            self.session.delete_segment("seg_missing")
        self.assertFalse(self.session.history.can_undo)

    def test_preview(self) -> None:
        self.assertEqual(self.session.preview_segmentation(0.1, 0.3), 2)


class TestCli(unittest.TestCase):
    def _write_wav(self, tmp: str) -> str:
        path = os.path.join(tmp, "speech.wav")
        audio = (_buffer().samples * 32767).astype(np.int16)
        wavfile.write(path, SR, audio)
        return path

    def test_prints_sorted_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write_wav(tmp)
            out = io.StringIO()
            argv = ["speech-segmenter", path, "--threshold", "0.1", "--pause-tolerance", "0.2"]
            with mock.patch("sys.argv", argv), contextlib.redirect_stdout(out):
                main()
        segments = json.loads(out.getvalue())
        self.assertEqual(len(segments), 2)
        self.assertLess(segments[0]["start"], segments[1]["start"])

    def test_invalid_parameters_exit_code(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write_wav(tmp)
            argv = ["speech-segmenter", path, "--strategy", "silence_f0", "--f0-min", "400"]
            with mock.patch("sys.argv", argv), contextlib.redirect_stderr(io.StringIO()):
                with self.assertRaises(SystemExit) as ctx:
                    main()
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
