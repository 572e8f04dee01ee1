"""Shared fixtures for the AutoSrt tests."""

import logging
import wave
from logging.handlers import RotatingFileHandler
from types import SimpleNamespace
from unittest.mock import MagicMock

import ffmpeg
import pytest

def write_wav(path, sample_rate=16000, channels=1, duration_s=0.1):
    """Writes a silent 16-bit PCM WAV file."""
    frames = int(sample_rate * duration_s)
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(b"\x00\x00" * frames * channels)
    return str(path)

class FakeProcess:
    """Stands in for the Popen object returned by ffmpeg.run_async."""

    def __init__(self, returncode=0, stderr=b"", on_communicate=None):
        self.pid = 4242
        self.returncode = None
        self.killed = False
        self._final_returncode = returncode
        self._stderr = stderr
        self._on_communicate = on_communicate

    def communicate(self):
        if self._on_communicate:
            self._on_communicate()
        self.returncode = self._final_returncode
        return b"", self._stderr

    def poll(self):
        return self.returncode

    def kill(self):
        self.killed = True
        self.returncode = -9

    def wait(self):
        return self.returncode

@pytest.fixture
def wav_writer():
    return write_wav

@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "uploads" / "clip.mp4"
    path.parent.mkdir()
    path.write_bytes(b"not really a video")
    return str(path)

@pytest.fixture
def fake_ffmpeg(monkeypatch):
    """
    Replaces ffmpeg and ffprobe.

    Extraction writes a silent WAV at the requested output path; probing
    reports ``state.sample_rate``. Set ``state.returncode``/``state.stderr``
    to simulate an ffmpeg failure.
    """
    state = SimpleNamespace(
        sample_rate=16000,
        returncode=0,
        stderr=b"",
        commands=[],
        processes=[],
    )

    def fake_run_async(stream, **kwargs):
        args = ffmpeg.get_args(stream)
        state.commands.append(args)
        output_path = [arg for arg in args if arg != "-y"][-1]

        def write_output():
            write_wav(output_path, sample_rate=state.sample_rate)

        process = FakeProcess(returncode=state.returncode, stderr=state.stderr, on_communicate=write_output)
        state.processes.append(process)
        return process

    def fake_probe(filename, cmd="ffprobe", **kwargs):
        return {"streams": [{"codec_type": "audio", "sample_rate": str(state.sample_rate), "channels": 1}]}

    monkeypatch.setattr(ffmpeg, "run_async", fake_run_async)
    monkeypatch.setattr(ffmpeg, "probe", fake_probe)
    return state

@pytest.fixture
def speech_response():
    """Builds an object shaped like a RecognizeResponse."""

    def build(*transcripts):
        results = []
        for transcript in transcripts:
            if transcript is None:
                results.append(SimpleNamespace(alternatives=[]))
            elif isinstance(transcript, (list, tuple)):
                results.append(SimpleNamespace(alternatives=[
                    SimpleNamespace(transcript=text, confidence=0.9 - i * 0.1)
                    for i, text in enumerate(transcript)
                ]))
            else:
                results.append(SimpleNamespace(alternatives=[SimpleNamespace(transcript=transcript, confidence=0.9)]))
        return SimpleNamespace(results=results)

    return build

@pytest.fixture
def speech_client(speech_response):
    """A speech client double that recognizes 'hello', 'world', 'test'."""
    client = MagicMock()
    client.recognize.return_value = speech_response("hello", " world", " test")
    return client

@pytest.fixture
def in_tmp_dir(tmp_path, monkeypatch):
    """Runs the test from tmp_path so default log and config paths land there."""
    monkeypatch.chdir(tmp_path)
    return tmp_path

@pytest.fixture
def fake_process():
    return FakeProcess

@pytest.fixture(autouse=True)
def reset_logging():
    """Drops handlers installed by setup_logging so they don't outlive the test."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) not in (logging.StreamHandler, RotatingFileHandler):
            continue
        root.removeHandler(handler)
        handler.close()
