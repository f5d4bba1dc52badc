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
windows.py — window functions used to taper segments before the DFT
---------------------------------------------------------------------
Every window variant follows the same contract:
- ``Window(n)`` builds exactly ``n`` real weights,
- ``.weights`` returns them as a read-only float64 array,
- ``str(window)`` gives a human-readable description (diagnostics only).
Spectral windows are generated in their periodic (DFT-even) form.
---------------------------------------------------------------------
"""
__all__ = [
    "Window",
    "One",
    "Hann",
    "Hamming",
    "Kaiser",
    "FunctionWindow",
    "win_dict",
    "resolve_window",
]

import abc
import numbers
import functools
from typing import Callable, Union

import numpy as np
import scipy.signal.windows as windows


class Window(abc.ABC):
    """
    Base class for segment windows.

    Subclasses implement `_build` and return the weights for a given length.
    """

    def __init__(self, n: int):
        if isinstance(n, bool) or not isinstance(n, numbers.Integral):
            raise TypeError(f"Window length must be an integer, got {n!r}.")
        n = int(n)
        if n < 1:
            raise ValueError(f"Window length must be >= 1, got {n}.")
        w = np.ascontiguousarray(self._build(n), dtype=np.float64)
        if w.shape != (n,):
            raise ValueError(f"Window shape {w.shape} != ({n},)")
        w.flags.writeable = False
        self._weights = w

    @abc.abstractmethod
    def _build(self, n: int) -> np.ndarray:
        """Return ``n`` window weights."""

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    @property
    def S1(self) -> float:
        """Sum of the weights."""
        return float(np.sum(self._weights))

    @property
    def S2(self) -> float:
        """Sum of the squared weights."""
        return float(np.sum(self._weights * self._weights))

    def __len__(self) -> int:
        return self._weights.shape[0]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self)})"


class One(Window):
    """Rectangular window: every weight is one."""

    def _build(self, n):
        return windows.boxcar(n)

    def __str__(self):
        return "I am the One"


class Hann(Window):
    def _build(self, n):
        return windows.hann(n, sym=False)

    def __str__(self):
        return f"hann(L={len(self)})"


class Hamming(Window):
    def _build(self, n):
        return windows.hamming(n, sym=False)

    def __str__(self):
        return f"hamming(L={len(self)})"


class Kaiser(Window):
    """Kaiser window with shape parameter ``beta``."""

    def __init__(self, n: int, beta: float = 14.0):
        self.beta = float(beta)
        super().__init__(n)

    def _build(self, n):
        return windows.kaiser(n, self.beta, sym=False)

    def __str__(self):
        return f"kaiser(L={len(self)}, beta={self.beta:g})"


class FunctionWindow(Window):
    """
    Adapts a plain window function ``func(n) -> array`` (e.g. ``np.hanning``)
    to the `Window` contract.
    """

    def __init__(self, n: int, func: Callable[[int], np.ndarray]):
        self.func = func
        super().__init__(n)

    def _build(self, n):
        return self.func(n)

    def __str__(self):
        name = getattr(self.func, "__name__", "custom_win")
        return f"{name}(L={len(self)})"


win_dict = {
    "one": One,
    "rectangular": One,
    "boxcar": One,
    "hann": Hann,
    "hanning": Hann,
    "hamming": Hamming,
    "kaiser": Kaiser,
}


def resolve_window(win: Union[str, type, Callable]) -> Callable[[int], Window]:
    """
    Resolve a window selection into a factory ``f(n) -> Window``.

    Parameters
    ----------
    win : str, Window subclass or callable
        A name from `win_dict`, a `Window` subclass (or a ``functools.partial``
        of one, e.g. ``partial(Kaiser, beta=8.0)``), or a function that
        returns ``n`` weights for a length ``n``.

    Returns
    -------
    callable
        Factory building the window for a given segment length.
    """
    if isinstance(win, str):
        try:
            return win_dict[win.lower()]
        except KeyError as exc:
            raise ValueError(
                f"Window function '{win}' not recognized. "
                f"Available: {list(win_dict.keys())}"
            ) from exc
    if isinstance(win, type):
        if issubclass(win, Window):
            return win
        raise TypeError(f"Window class must derive from Window, got {win.__name__}.")
    if isinstance(win, functools.partial) and isinstance(win.func, type) and issubclass(win.func, Window):
        return win
    if callable(win):
        return functools.partial(FunctionWindow, func=win)
    raise TypeError("Window must be a recognized string, a Window subclass or a callable function.")
