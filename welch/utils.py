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
"""Small numeric helpers shared by the estimator kernels."""
import math

import numpy as np


def round_half_up(val):
    """Round a non-negative number to the nearest integer, ties away from zero.

    Python's built-in ``round`` rounds ties to even (``round(2.5) == 2``),
    which would shift the segment stride for half-integer overlaps.
    """
    if (float(val) % 1) >= 0.5:
        x = math.ceil(val)
    else:
        x = math.floor(val)
    return int(x)


def chunker(buffer, chunk_size):
    """Split a flat buffer into consecutive rows of ``chunk_size`` samples.

    Returns a 2D view of shape ``(len(buffer) // chunk_size, chunk_size)``.
    A trailing partial chunk is not allowed.
    """
    if chunk_size < 1:
        raise ValueError('Chunk size must be greater than 0.')
    buffer = np.asarray(buffer)
    if buffer.shape[0] % chunk_size:
        raise ValueError(
            f"Buffer of length {buffer.shape[0]} is not a multiple of chunk size {chunk_size}."
        )
    return buffer.reshape(-1, chunk_size)
