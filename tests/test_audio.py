"""Tests for the PCM-to-WAV encoder."""

import base64
import struct

import pytest

from shorts.editor.audio import (
    WAV_HEADER_SIZE,
    decode_base64_audio,
    wav_duration,
    wrap_pcm_in_wav,
)


def _u32(buf: bytes, offset: int) -> int:
    return struct.unpack_from("<I", buf, offset)[0]


def _u16(buf: bytes, offset: int) -> int:
    return struct.unpack_from("<H", buf, offset)[0]


def test_empty_payload_is_bare_header():
    wav = wrap_pcm_in_wav(b"")

    assert len(wav) == 44
    assert _u32(wav, 4) == 36
    assert _u32(wav, 40) == 0


def test_header_fields_for_default_mono_16bit():
    pcm = bytes(range(256)) * 4
    wav = wrap_pcm_in_wav(pcm)

    assert wav[0:4] == b"RIFF"
    assert _u32(wav, 4) == 36 + len(pcm)
    assert wav[8:12] == b"WAVE"
    assert wav[12:16] == b"fmt "
    assert _u32(wav, 16) == 16
    assert _u16(wav, 20) == 1
    assert _u16(wav, 22) == 1
    assert _u32(wav, 24) == 24000
    assert _u32(wav, 28) == 48000
    assert _u16(wav, 32) == 2
    assert _u16(wav, 34) == 16
    assert wav[36:40] == b"data"
    assert _u32(wav, 40) == len(pcm)
    assert wav[WAV_HEADER_SIZE:] == pcm


@pytest.mark.parametrize(
    "sample_rate,channels,bit_depth",
    [(44100, 2, 16), (48000, 2, 24), (8000, 1, 8), (16000, 6, 32)],
)
def test_rate_and_alignment_follow_format(sample_rate, channels, bit_depth):
    wav = wrap_pcm_in_wav(b"\x00" * 12, sample_rate, channels, bit_depth)

    assert _u16(wav, 22) == channels
    assert _u32(wav, 24) == sample_rate
    assert _u32(wav, 28) == sample_rate * channels * bit_depth // 8
    assert _u16(wav, 32) == channels * bit_depth // 8
    assert _u16(wav, 34) == bit_depth


def test_misaligned_payload_passes_through():
    pcm = b"\x01\x02\x03"  # not a multiple of the 2-byte block
    wav = wrap_pcm_in_wav(pcm)

    assert _u32(wav, 40) == 3
    assert _u32(wav, 4) == 39
    assert wav[44:] == pcm


def test_encoding_is_deterministic():
    pcm = b"\xff\x7f\x00\x80" * 100

    assert wrap_pcm_in_wav(pcm, 22050, 2) == wrap_pcm_in_wav(pcm, 22050, 2)


def test_accepts_bytearray_and_memoryview():
    pcm = b"\x10\x20\x30\x40"

    assert wrap_pcm_in_wav(bytearray(pcm)) == wrap_pcm_in_wav(pcm)
    assert wrap_pcm_in_wav(memoryview(pcm)) == wrap_pcm_in_wav(pcm)


def test_wav_duration_from_header():
    one_and_half_seconds = b"\x00\x00" * 36000

    assert wav_duration(wrap_pcm_in_wav(one_and_half_seconds)) == pytest.approx(1.5)
    assert wav_duration(wrap_pcm_in_wav(b"")) == 0.0
    assert wav_duration(b"RIFF") == 0.0


def test_decode_base64_audio():
    raw = b"\x00\x01\x02\x03"

    assert decode_base64_audio(base64.b64encode(raw).decode()) == raw
    assert decode_base64_audio(base64.b64encode(raw)) == raw
    with pytest.raises(ValueError):
        decode_base64_audio("not base64!")
