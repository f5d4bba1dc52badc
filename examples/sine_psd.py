# sine_psd.py

import logging

import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from welch import Welch

logging.basicConfig(
    format='%(asctime)s %(levelname)-8s %(message)s',
    level=logging.INFO,
    datefmt='%Y-%m-%d %H:%M:%S'
)


def main():
    """Estimates the periodogram of a pure sine and saves signal/PSD plots."""
    sampling_frequency = 5_000.0
    f0 = 150.0
    n_step = 10 * int(sampling_frequency / f0)
    i = np.arange(n_step)
    signal = np.sin(2.0 * np.pi * i * f0 / sampling_frequency)

    tau = 1.0 / sampling_frequency
    fig, ax = plt.subplots()
    ax.plot(i * tau, signal)
    ax.set_xlabel("Time [s]")
    fig.savefig("signal.png")

    welch = Welch.builder(signal).n_segment(4).overlap(0.5).verbose().build()
    print(welch)
    psd = welch.periodogram()

    sum_sqr = float(np.sum(signal * signal))
    print(f"Signal energy: {sum_sqr:.3f}")

    # The estimator knows nothing about the sampling rate
    freq = np.arange(psd.size) * sampling_frequency / welch.segment_size
    fig, ax = plt.subplots()
    ax.loglog(freq[1:], psd[1:])
    ax.set_xlabel("Frequency [Hz]")
    fig.savefig("psd.png")

    peak = int(np.argmax(psd))
    print(f"Peak at bin {peak} ({freq[peak]:.1f} Hz)")


if __name__ == "__main__":
    main()
