"""Completion tone: a short sine beep played through QSoundEffect.

The tone is rendered once to a small WAV file under the data folder and
reused for every alert.
"""

import math
import struct
import wave
from PySide6.QtCore import QUrl
from PySide6.QtMultimedia import QSoundEffect
from tm.common.logger import log
from tm.common.setup import PATHS

TONE_HZ = 800
TONE_MS = 500
TONE_VOLUME = 0.3
SAMPLE_RATE = 44100


# Writes a mono 16-bit sine tone to `path`, with a few ms of fade at each end so it doesn't click.
def render_tone(path, frequency=TONE_HZ, duration_ms=TONE_MS, sample_rate=SAMPLE_RATE):
    n_samples = int(sample_rate * duration_ms / 1000)
    fade = max(1, int(sample_rate * 0.005))
    frames = bytearray()
    for i in range(n_samples):
        envelope = min(1.0, i / fade, (n_samples - 1 - i) / fade)
        sample = math.sin(2 * math.pi * frequency * i / sample_rate) * envelope
        frames += struct.pack("<h", int(sample * 32767))
    with wave.open(str(path), "wb") as f:
        f.setnchannels(1)
        f.setsampwidth(2)
        f.setframerate(sample_rate)
        f.writeframes(bytes(frames))
    return path


class ToneAlert:

    def __init__(self, parent=None, path=None):
        self.path = path or PATHS.data / f"tone_{TONE_HZ}hz_{TONE_MS}ms.wav"
        self._sound = QSoundEffect(parent)
        self._sound.setLoopCount(1)
        self._sound.setVolume(TONE_VOLUME)
        try:
            if not self.path.exists():
                render_tone(self.path)
            self._sound.setSource(QUrl.fromLocalFile(str(self.path)))
        except OSError:
            log.warning(f"Couldn't write alert tone to '{self.path}', alerts will be silent.", exc_info=True)

    # Fire-and-forget, callers never hear about playback problems.
    def play(self):
        if self._sound.source().isEmpty():
            return
        self._sound.play()
        log.debug("Played completion tone")

    def __call__(self):
        self.play()
