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
import pytest
from pytest import approx

import numpy as np
import scipy.fft

from welch import core
from welch.utils import round_half_up, chunker

# --- Tests for segment geometry ---


@pytest.mark.parametrize(
    "n, k, a, expected",
    [
        (40, 4, 0.5, 16),
        (100, 4, 0.0, 25),
        (100, 3, 0.25, 40),
        (1000, 8, 0.5, 222),
        (12, 4, 0.5, 4),
        (128, 1, 1.0, 128),
    ],
)
def test_segment_size(n, k, a, expected):
    assert core.segment_size(n, k, a) == expected


def test_segment_size_whole_signal():
    """One segment with full overlap spans the whole signal."""
    for n in (1, 7, 128, 1001):
        assert core.segment_size(n, 1, 1.0) == n


def test_segment_size_rejects_non_positive_denominator():
    with pytest.raises(ValueError):
        core.segment_size(100, 0, 0.0)


def test_segment_stride_rounds_half_up():
    # 5 * 0.5 = 2.5 rounds to 3, not to the even 2
    assert core.segment_stride(5, 0.5) == 2
    assert core.segment_stride(16, 0.5) == 8
    assert core.segment_stride(10, 0.0) == 10
    assert core.segment_stride(1, 0.5) == 0


def test_segment_starts_as_many_as_fit():
    starts = core.segment_starts(12, 4, 2)
    np.testing.assert_array_equal(starts, [0, 2, 4, 6, 8])
    assert starts[-1] + 4 <= 12

    np.testing.assert_array_equal(core.segment_starts(10, 10, 10), [0])


# --- Tests for the pipeline kernels ---


def test_segment_signal_layout(random_signal):
    x = random_signal.copy()
    w = np.hanning(16)
    buf = core.segment_signal(x, w, 8)

    assert buf.dtype == np.complex128
    assert buf.shape == (7 * 16,)
    assert np.all(buf.imag == 0.0)
    np.testing.assert_allclose(buf[:16].real, x[:16] * w)
    np.testing.assert_allclose(buf[16:32].real, x[8:24] * w)
    # Input untouched
    np.testing.assert_array_equal(x, random_signal)


def test_transform_segments_matches_numpy(random_signal):
    L = 16
    buf = core.segment_signal(random_signal, np.ones(L), 8)
    spec = core.transform_segments(buf, L)

    assert spec.shape == buf.shape
    for j in range(buf.shape[0] // L):
        np.testing.assert_allclose(
            spec[j * L:(j + 1) * L], np.fft.fft(buf[j * L:(j + 1) * L])
        )


def test_transform_segments_custom_fft(random_signal):
    L = 32
    buf = core.segment_signal(random_signal, np.ones(L), 16)
    ref = core.transform_segments(buf, L)
    alt = core.transform_segments(buf, L, fft=scipy.fft.fft)
    np.testing.assert_allclose(alt, ref, rtol=1e-12, atol=1e-12)


def test_transform_is_unnormalized():
    L = 8
    buf = np.ones(L, dtype=np.complex128)
    spec = core.transform_segments(buf, L)
    assert spec[0].real == approx(L)


def test_accumulate_periodogram_sums_segments():
    L = 8
    spec = np.zeros(2 * L, dtype=np.complex128)
    spec[1] = 3 + 4j            # |X|^2 = 25 in segment 0
    spec[L + 1] = 1j            # |X|^2 = 1 in segment 1
    spec[L // 2] = 100.0        # Nyquist bin, dropped
    spec[L - 1] = 100.0         # negative frequency, dropped

    psd = core.accumulate_periodogram(spec, L)
    assert psd.shape == (L // 2,)
    np.testing.assert_allclose(psd, [0.0, 26.0, 0.0, 0.0])


def test_accumulate_periodogram_odd_length():
    L = 7
    spec = np.fft.fft(np.arange(L, dtype=float)).astype(np.complex128)
    psd = core.accumulate_periodogram(spec, L)
    assert psd.shape == (3,)
    np.testing.assert_allclose(psd, np.abs(spec[:3]) ** 2)


# --- Tests for helpers ---


@pytest.mark.parametrize(
    "val, expected",
    [(0.0, 0), (2.4, 2), (2.5, 3), (3.5, 4), (7.6, 8), (8.0, 8)],
)
def test_round_half_up(val, expected):
    assert round_half_up(val) == expected


def test_chunker():
    rows = chunker(np.arange(12), 4)
    assert rows.shape == (3, 4)
    np.testing.assert_array_equal(rows[1], [4, 5, 6, 7])

    with pytest.raises(ValueError):
        chunker(np.arange(12), 0)
    with pytest.raises(ValueError):
        chunker(np.arange(10), 4)
