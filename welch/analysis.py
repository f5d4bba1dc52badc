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
import time
import numbers
import logging
from typing import Any, Callable, Dict, Optional, Tuple, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from ._config import DEFAULT_N_SEGMENT, DEFAULT_OVERLAP, DEFAULT_WINDOW
from .windows import resolve_window
from .core import (
    segment_size,
    segment_stride,
    segment_starts,
    segment_signal,
    transform_segments,
    accumulate_periodogram,
)

logger = logging.getLogger(__name__)

WindowSpec = Union[str, type, Callable]


class ConfigurationError(ValueError):
    """Raised when estimator parameters violate a segmentation invariant."""


class Welch:
    """
    Welch periodogram estimator.

    Holds a read-only view of the signal together with the resolved
    segmentation (segment length, stride) and the window. All parameters are
    validated once, here; the segmenting, transform and averaging stages
    trust them.
    """

    def __init__(
        self,
        signal: np.ndarray,
        n_segment: int = DEFAULT_N_SEGMENT,
        overlap: float = DEFAULT_OVERLAP,
        window: WindowSpec = DEFAULT_WINDOW,
        *,
        fft: Optional[Callable] = None,
        verbose: bool = False,
    ):
        """
        Parameters
        ----------
        signal : array_like
            1D real-valued, uniformly sampled time-series. Not copied when it
            is already a float64 array, and never modified.
        n_segment : int, optional
            Requested number of segments K (>= 1). Defaults to 4.
        overlap : float, optional
            Fractional overlap a between consecutive segments, in [0, 1).
            Defaults to 0.5.
        window : str, Window subclass or callable, optional
            Window variant, see `welch.windows.resolve_window`.
            Defaults to the rectangular window.
        fft : callable, optional
            DFT routine applied per segment. Defaults to `numpy.fft.fft`.
        verbose : bool, optional
            If True, logs configuration and timing information.
        """
        self.verbose = bool(verbose)
        self.fft = fft

        # --- Process and validate input data ---
        x = np.asarray(signal, dtype=np.float64)
        if x.ndim != 1:
            raise ConfigurationError(f"Input signal must be a 1D array, got shape {x.shape}.")
        if x.shape[0] == 0:
            raise ConfigurationError("Input signal is empty.")
        x = x.view()
        x.flags.writeable = False
        self.signal = x
        N = x.shape[0]

        # Warn (don't fail) on NaN/Inf in input
        if not np.all(np.isfinite(x)):
            logger.warning("Input signal contains NaN/Inf; results may be undefined.")

        if isinstance(n_segment, bool) or not isinstance(n_segment, numbers.Integral):
            raise ConfigurationError(f"`n_segment` must be an integer, got {n_segment!r}.")
        if n_segment < 1:
            raise ConfigurationError(f"`n_segment` must be >= 1, got {n_segment!r}.")
        try:
            olap = float(overlap)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"`overlap` must be a float in [0, 1); got {overlap!r}") from exc
        if not np.isfinite(olap) or not (0.0 <= olap < 1.0):
            raise ConfigurationError(f"`overlap` must be in [0, 1); got {olap!r}")

        self.n_segment = int(n_segment)
        self.overlap = olap

        # Segment geometry
        try:
            L = segment_size(N, self.n_segment, self.overlap)
        except OverflowError as exc:
            raise ConfigurationError(
                f"`n_segment`={self.n_segment} is too large to compute a segment size."
            ) from exc
        if L < 1:
            raise ConfigurationError(
                f"Segment size L={L} < 1: signal of N={N} samples is too short "
                f"for n_segment={self.n_segment} and overlap={self.overlap}."
            )
        if L > N:
            raise ConfigurationError(f"Segment size L={L} exceeds signal length N={N}.")
        stride = segment_stride(L, self.overlap)
        if stride < 1:
            raise ConfigurationError(
                f"Segment stride {stride} < 1 for L={L} and overlap={self.overlap}; "
                "segments would never advance."
            )
        self.segment_size = L
        self.stride = stride

        self.window = resolve_window(window)(L)

        self.config: Dict[str, Any] = {
            "N": N,
            "n_segment": self.n_segment,
            "overlap": self.overlap,
            "segment_size": L,
            "stride": stride,
            "win": window,
            "win_name": str(self.window),
        }

        if self.verbose:
            logger.info(
                f"Welch: N={N} | K={self.n_segment} | olap={self.overlap:g} | "
                f"L={L} | stride={stride} | segments used={self.n_segments_used} | "
                f"win={self.window}"
            )

    @staticmethod
    def builder(signal: np.ndarray) -> "Builder":
        return Builder(signal)

    def __str__(self) -> str:
        return f"# of segments {self.n_segment}\n# window {self.window}\n"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(N={self.signal.shape[0]}, n_segment={self.n_segment}, "
            f"overlap={self.overlap!r}, segment_size={self.segment_size}, "
            f"window={self.window!r})"
        )

    @property
    def segment_starts(self) -> np.ndarray:
        """Start index of every segment that is averaged."""
        return segment_starts(self.signal.shape[0], self.segment_size, self.stride)

    @property
    def n_segments_used(self) -> int:
        """
        Number of segments actually averaged.

        Every full segment that fits is used, so this may differ from the
        requested `n_segment`.
        """
        return int(self.segment_starts.shape[0])

    def segment(self) -> np.ndarray:
        """Windowed segments, concatenated into one flat complex buffer."""
        return segment_signal(self.signal, self.window.weights, self.stride)

    def transform(self, pool=None) -> np.ndarray:
        """DFT of every segment, in the same flat layout as `segment`."""
        return transform_segments(self.segment(), self.segment_size, fft=self.fft, pool=pool)

    def periodogram(self, pool=None) -> np.ndarray:
        """
        Sum of the segment periodograms, one value per positive-frequency bin.

        The result has ``segment_size // 2`` entries and is not divided by
        the number of segments; see `average_periodogram`.
        """
        return accumulate_periodogram(self.transform(pool=pool), self.segment_size)

    def average_periodogram(self, pool=None) -> np.ndarray:
        """Segment periodograms averaged over `n_segments_used`."""
        return self.periodogram(pool=pool) / self.n_segments_used

    def compute(self, pool=None) -> "WelchResult":
        """
        Executes the estimate and returns a WelchResult object.

        Parameters
        ----------
        pool : multiprocessing.pool.Pool, optional
            Worker pool used to transform the segments.
        """
        t0 = time.perf_counter()
        psd_sum = self.periodogram(pool=pool)
        t_total = time.perf_counter() - t0

        if self.verbose:
            logger.info(
                f"Averaged {self.n_segments_used} segments of L={self.segment_size} "
                f"in {t_total:.4f} seconds."
            )

        results = {
            "psd_sum": psd_sum,
            "n_averages": self.n_segments_used,
            "segment_size": self.segment_size,
            "stride": self.stride,
            "window": str(self.window),
            "S1": self.window.S1,
            "S2": self.window.S2,
            "compute_t": t_total,
        }
        return WelchResult(results, self.config)


class Builder:
    """
    Chained configuration for a `Welch` estimator.

    Example
    -------
    >>> est = Builder(x).n_segment(8).overlap(0.25).window("hann").build()
    """

    def __init__(self, signal: np.ndarray):
        self.signal = signal
        self.config: Dict[str, Any] = {
            "n_segment": DEFAULT_N_SEGMENT,
            "overlap": DEFAULT_OVERLAP,
            "window": DEFAULT_WINDOW,
            "fft": None,
            "verbose": False,
        }

    def n_segment(self, n_segment: int) -> "Builder":
        self.config["n_segment"] = n_segment
        return self

    def overlap(self, overlap: float) -> "Builder":
        self.config["overlap"] = overlap
        return self

    def window(self, window: WindowSpec) -> "Builder":
        self.config["window"] = window
        return self

    def fft(self, fft: Callable) -> "Builder":
        self.config["fft"] = fft
        return self

    def verbose(self, verbose: bool = True) -> "Builder":
        self.config["verbose"] = verbose
        return self

    def build(self, window: Optional[WindowSpec] = None) -> Welch:
        """Validate the configuration and return the estimator."""
        cfg = dict(self.config)
        if window is not None:
            cfg["window"] = window
        return Welch(
            self.signal,
            cfg["n_segment"],
            cfg["overlap"],
            cfg["window"],
            fft=cfg["fft"],
            verbose=cfg["verbose"],
        )


class WelchResult:
    """
    Container for the output of `Welch.compute`.

    Attributes
    ----------
    psd_sum : np.ndarray
        Sum of the segment periodograms (``segment_size // 2`` bins).
    psd_mean : np.ndarray
        `psd_sum` divided by the number of averaged segments.
    n_averages : int
        Number of segments averaged.
    bins : np.ndarray
        Frequency bin index of every value. The frequency of bin ``i`` is
        ``i * fs / segment_size`` for a sampling rate ``fs``.
    """

    def __init__(self, results_dict: Dict[str, Any], config_dict: Dict[str, Any]):
        self._data = results_dict
        self._config = config_dict
        self._cache: Dict[str, Any] = {}

    def __getattr__(self, name: str) -> Any:
        """Lazy computation and caching of derived quantities."""
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._cache:
            return self._cache[name]

        if name == "psd_mean":
            val = self._data["psd_sum"] / self._data["n_averages"]
        elif name == "bins":
            val = np.arange(self._data["psd_sum"].shape[0], dtype=np.int64)
        elif name in self._data:
            val = self._data[name]
        elif name in self._config:
            val = self._config[name]
        else:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )

        self._cache[name] = val
        return val

    def __len__(self) -> int:
        return int(self._data["psd_sum"].shape[0])

    def to_dataframe(self) -> pd.DataFrame:
        """Exports the summed and averaged periodograms, indexed by bin."""
        return pd.DataFrame(
            {"psd_sum": self.psd_sum, "psd_mean": self.psd_mean},
            index=pd.Index(self.bins, name="bin"),
        )

    def plot(
        self,
        which: str = "psd_sum",
        *,
        ax: Optional[Axes] = None,
        ylabel: Optional[str] = None,
        **kwargs,
    ) -> Tuple[Figure, Axes]:
        """
        Log-log plot of a periodogram against the bin index. Bin 0 is skipped.

        Parameters
        ----------
        which : str, optional
            'psd_sum' or 'psd_mean'. Defaults to 'psd_sum'.
        ax : matplotlib.axes.Axes, optional
            Existing Axes to draw on. A new Figure is created otherwise.
        ylabel : str, optional
            Custom label for the y-axis.
        **kwargs
            Passed to `matplotlib.axes.Axes.loglog`.
        """
        plot_options = {
            "psd_sum": "Summed periodogram",
            "psd_mean": "Averaged periodogram",
        }
        if which not in plot_options:
            raise ValueError(
                f"Plot type '{which}' not recognized. Available options are: {list(plot_options.keys())}"
            )
        y = getattr(self, which)

        fig, ax1 = (ax.get_figure(), ax) if ax is not None else plt.subplots()
        ax1.loglog(self.bins[1:], y[1:], **kwargs)
        ax1.set_xlabel("Frequency bin")
        ax1.set_ylabel(ylabel if ylabel is not None else plot_options[which])
        fig.tight_layout()
        return fig, ax1


def compute_periodogram(signal: np.ndarray, **kwargs) -> WelchResult:
    """
    Computes the Welch periodogram of a signal in a single call.

    Parameters
    ----------
    signal : np.ndarray
        1D input time-series.
    **kwargs :
        Passed to `Welch` (`n_segment`, `overlap`, `window`, `fft`,
        `verbose`), except `pool`, which is passed to `Welch.compute`.

    Returns
    -------
    WelchResult
    """
    pool = kwargs.pop("pool", None)
    return Welch(signal, **kwargs).compute(pool=pool)
