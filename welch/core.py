# BSD 3-Clause License

# Copyright (c) 2025, Miguel Dovale

# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:

# 1. Redistributions of source code must retain the above copyright notice, this
#    list of conditions and the following disclaimer.

# 2. Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.

# 3. Neither the name of the copyright holder nor the names of its
#    contributors may be used to endorse or promote products derived from
#    this software without specific prior written permission.

# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
# OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

# This software may be subject to U.S. export control laws. By accepting this
# software, the user agrees to comply with all applicable U.S. export laws and
# regulations. User has the responsibility to obtain export licenses, or other
# export authority as may be required before exporting such information to
# foreign countries or providing access to foreign persons.
#
"""
core.py — Welch periodogram kernels
-----------------------------------------------------------------------------
Welch method:
- split the signal in overlapping segments of length L,
- taper every segment with the window and take its DFT,
- accumulate the segment periodograms bin by bin.

Segment geometry for K segments with fractional overlap a:
    N = K*L - (K-1)*L*a = L*(K*(1-a) + a)   =>   L = N / (K*(1-a) + a)
Consecutive segments start ``L - round(L*a)`` samples apart.

Buffers are flat: segment ``j`` occupies ``buf[j*L:(j+1)*L]``.
-----------------------------------------------------------------------------
"""
__all__ = [
    "segment_size",
    "segment_stride",
    "segment_starts",
    "segment_signal",
    "transform_segments",
    "accumulate_periodogram",
]

from typing import Callable, Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .utils import round_half_up, chunker


def segment_size(signal_len: int, n_segment: int, overlap: float) -> int:
    """
    Segment length L for a signal of ``signal_len`` samples split into
    ``n_segment`` segments overlapping by the fraction ``overlap``.

    No range checks are made beyond a positive denominator; for example
    ``segment_size(128, 1, 1.0) == 128``.
    """
    denom = n_segment * (1.0 - overlap) + overlap
    if not denom > 0:
        raise ValueError(
            f"n_segment*(1-overlap)+overlap must be positive, got {denom!r}."
        )
    return int(np.trunc(signal_len / denom))


def segment_stride(L: int, overlap: float) -> int:
    """Distance in samples between the starts of consecutive segments."""
    return int(L) - round_half_up(L * overlap)


def segment_starts(N: int, L: int, stride: int) -> np.ndarray:
    """Start index of every full segment that fits in ``N`` samples."""
    return np.arange(0, N - L + 1, stride, dtype=np.int64)


def segment_signal(x: np.ndarray, w: np.ndarray, stride: int) -> np.ndarray:
    """
    Slice ``x`` into overlapping windowed segments.

    Parameters
    ----------
    x : (N,) ndarray
        Signal samples. Not modified.
    w : (L,) ndarray
        Window weights; their length sets the segment length.
    stride : int
        Distance between consecutive segment starts (>= 1).

    Returns
    -------
    buf : (K*L,) complex128 ndarray
        All windowed segments, concatenated, with zero imaginary part.
    """
    L = w.shape[0]
    segs = sliding_window_view(x, L)[::stride]
    return (segs * w).astype(np.complex128).ravel()


def _fft_segment(seg: np.ndarray) -> np.ndarray:
    return np.fft.fft(seg)


def transform_segments(
    buf: np.ndarray,
    L: int,
    fft: Optional[Callable] = None,
    pool=None,
) -> np.ndarray:
    """
    Forward, unnormalized DFT of every length-L chunk of ``buf``.

    Parameters
    ----------
    buf : (K*L,) complex ndarray
        Flat segment buffer.
    L : int
        Segment length.
    fft : callable, optional
        DFT routine applied to one segment, ``fft(seg) -> X``. When omitted,
        `numpy.fft.fft` is applied to all segments at once.
    pool : multiprocessing.pool.Pool, optional
        Transforms the segments in worker processes with ``pool.map``.

    Returns
    -------
    (K*L,) complex128 ndarray
        Transformed buffer with the same chunking as ``buf``.
    """
    segs = chunker(buf, L)
    if segs.shape[0] == 0:
        return np.empty(0, dtype=np.complex128)
    if pool is not None:
        out = pool.map(fft or _fft_segment, list(segs))
    elif fft is None:
        out = np.fft.fft(segs, axis=1)
    else:
        out = [fft(seg) for seg in segs]
    return np.asarray(out, dtype=np.complex128).reshape(-1)


def accumulate_periodogram(spec: np.ndarray, L: int) -> np.ndarray:
    """
    Sum of the segment periodograms over the positive-frequency half.

    Only the first ``L // 2`` bins of every chunk are kept (the Nyquist bin
    is excluded for even L). No normalization is applied.
    """
    n = L // 2
    psd = np.zeros(n, dtype=np.float64)
    for X in chunker(spec, L):
        head = X[:n]
        psd += head.real * head.real + head.imag * head.imag
    return psd
