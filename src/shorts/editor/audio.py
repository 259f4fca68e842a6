"""Narration audio: PCM-to-WAV encoding and duration helpers."""

import base64
import binascii
import struct
from typing import Union

WAV_HEADER_SIZE = 44

# RIFF/WAVE canonical header, all multi-byte integers little-endian
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")

PCM_FORMAT = 1
DEFAULT_SAMPLE_RATE = 24000
DEFAULT_CHANNELS = 1
DEFAULT_BIT_DEPTH = 16


def _u32(value: int) -> int:
    return int(value) & 0xFFFFFFFF


def _u16(value: int) -> int:
    return int(value) & 0xFFFF


def wrap_pcm_in_wav(
    pcm: bytes,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    num_channels: int = DEFAULT_CHANNELS,
    bit_depth: int = DEFAULT_BIT_DEPTH,
) -> bytes:
    """Wrap raw little-endian PCM samples in a WAV container.

    The payload is copied untouched after a 44-byte header. Its length is
    not checked against the block alignment; this only stamps a header.

    Args:
        pcm: Raw interleaved PCM sample bytes.
        sample_rate: Samples per second per channel.
        num_channels: Number of interleaved channels.
        bit_depth: Bits per sample.

    Returns:
        The complete WAV file as bytes.
    """
    payload = bytes(pcm)
    size = len(payload)
    header = _HEADER.pack(
        b"RIFF",
        _u32(36 + size),
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT,
        _u16(num_channels),
        _u32(sample_rate),
        _u32(sample_rate * num_channels * bit_depth // 8),
        _u16(num_channels * bit_depth // 8),
        _u16(bit_depth),
        b"data",
        _u32(size),
    )
    return header + payload


def decode_base64_audio(data: Union[str, bytes]) -> bytes:
    """Decode a base64 audio payload into raw bytes.

    Raises:
        ValueError: If the payload is not valid base64.
    """
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 audio payload: {e}") from e


def wav_duration(wav: bytes) -> float:
    """Duration in seconds declared by a canonical WAV header.

    Returns 0.0 for buffers shorter than a header or with a zero byte rate.
    """
    if len(wav) < WAV_HEADER_SIZE:
        return 0.0
    fields = _HEADER.unpack_from(wav)
    byte_rate, data_size = fields[8], fields[12]
    if byte_rate == 0:
        return 0.0
    return data_size / byte_rate
