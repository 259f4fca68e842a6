"""Audio encoding and preview assembly.

Only the narration helpers are imported eagerly; the moviepy-backed preview
modules load on first use.
"""

from .audio import (
    WAV_HEADER_SIZE,
    decode_base64_audio,
    wav_duration,
    wrap_pcm_in_wav,
)

__all__ = [
    "WAV_HEADER_SIZE",
    "decode_base64_audio",
    "wav_duration",
    "wrap_pcm_in_wav",
]
