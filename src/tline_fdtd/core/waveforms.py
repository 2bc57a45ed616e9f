"""Source waveforms for transmission line simulation.

A waveform is any callable mapping time in seconds to a voltage. The
classes here are stateless, so the same instance can drive several
simulations and is queried exactly once per time step.

Classes:
    SineWave: Continuous sinusoid
    StepWave: Step with optional delay and linear rise
    GaussianPulse: Gaussian-modulated sinusoid (broadband)
    SampledWaveform: Sampled data, e.g. loaded from a WAV file

Example:
    >>> from tline_fdtd import MatchedVSource, SineWave
    >>> source = MatchedVSource(
    ...     waveform=SineWave(frequency=4e8),
    ...     inductance=1e-6,
    ...     capacitance=400e-12,
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import numpy as np
from numpy.typing import NDArray
from scipy.io import wavfile


@dataclass(frozen=True)
class SineWave:
    """Sinusoidal source ``amplitude * sin(2π f t + phase)``.

    Args:
        frequency: Frequency in Hz
        amplitude: Peak voltage (default: 1.0)
        phase: Phase offset in radians (default: 0.0)
    """

    frequency: float
    amplitude: float = 1.0
    phase: float = 0.0

    def __call__(self, t: float) -> float:
        return self.amplitude * np.sin(2.0 * np.pi * self.frequency * t + self.phase)


@dataclass(frozen=True)
class StepWave:
    """Voltage step, optionally delayed and with a linear ramp.

    Args:
        amplitude: Final voltage (default: 1.0)
        delay: Time at which the step starts in seconds (default: 0.0)
        rise_time: Duration of the linear ramp in seconds; 0 gives an
            ideal step (default: 0.0)
    """

    amplitude: float = 1.0
    delay: float = 0.0
    rise_time: float = 0.0

    def __post_init__(self):
        if self.rise_time < 0:
            raise ValueError("rise_time must be non-negative")

    def __call__(self, t: float) -> float:
        if t < self.delay:
            return 0.0
        if self.rise_time == 0 or t >= self.delay + self.rise_time:
            return self.amplitude
        return self.amplitude * (t - self.delay) / self.rise_time


@dataclass(frozen=True)
class GaussianPulse:
    """Gaussian-modulated sinusoidal pulse.

    Energy is concentrated around ``frequency``. The pulse is delayed by four
    standard deviations so it starts from (numerically) zero.

    Args:
        frequency: Center frequency in Hz
        bandwidth: Frequency bandwidth in Hz (default: 2 * frequency)
        amplitude: Peak voltage (default: 1.0)
    """

    frequency: float
    bandwidth: float | None = None
    amplitude: float = 1.0

    def __post_init__(self):
        if self.frequency <= 0:
            raise ValueError("frequency must be positive")
        if self.bandwidth is None:
            object.__setattr__(self, "bandwidth", 2.0 * self.frequency)
        elif self.bandwidth <= 0:
            raise ValueError("bandwidth must be positive")

    @property
    def sigma(self) -> float:
        """Standard deviation of the envelope in seconds."""
        return 1.0 / (np.pi * self.bandwidth)

    @property
    def delay(self) -> float:
        """Time of the envelope peak in seconds."""
        return 4.0 * self.sigma

    def __call__(self, t: float) -> float:
        sigma = self.sigma
        t0 = self.delay
        envelope = np.exp(-((t - t0) ** 2) / (2 * sigma**2))
        carrier = np.sin(2 * np.pi * self.frequency * (t - t0))
        return self.amplitude * envelope * carrier


@dataclass(frozen=True, eq=False)
class SampledWaveform:
    """Waveform defined by uniformly spaced samples.

    Values between samples are linearly interpolated. Outside the sampled
    range the waveform is zero, or repeats when ``loop`` is set.

    Args:
        samples: Sample values
        sample_rate: Samples per second
        amplitude: Scale applied to every sample (default: 1.0)
        loop: Repeat the samples indefinitely (default: False)

    Example:
        >>> waveform = SampledWaveform.from_wav("pattern.wav", amplitude=0.5)
        >>> waveform(1e-9)
    """

    samples: NDArray[np.floating]
    sample_rate: float
    amplitude: float = 1.0
    loop: bool = False

    _times: NDArray[np.floating] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        samples = np.asarray(self.samples, dtype=np.float64)
        if samples.ndim != 1 or len(samples) == 0:
            raise ValueError("samples must be a non-empty 1D array")
        if self.sample_rate <= 0:
            raise ValueError("sample_rate must be positive")
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "_times", np.arange(len(samples)) / self.sample_rate)

    @classmethod
    def from_wav(
        cls,
        filepath: str | Path,
        amplitude: float = 1.0,
        channel: int | Literal["mix"] = "mix",
        loop: bool = False,
    ) -> SampledWaveform:
        """Load samples from a WAV file, normalized to [-1, 1].

        Args:
            filepath: Path to the WAV file
            amplitude: Peak voltage after normalization
            channel: Channel index for multi-channel files, or 'mix' to average
            loop: Repeat the file indefinitely

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the requested channel is not in the file
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Audio file not found: {filepath}")

        sr, data = wavfile.read(filepath)

        if data.dtype == np.int16:
            data = data.astype(np.float64) / 32768.0
        elif data.dtype == np.int32:
            data = data.astype(np.float64) / 2147483648.0
        elif data.dtype == np.uint8:
            data = (data.astype(np.float64) - 128) / 128.0
        else:
            data = data.astype(np.float64)

        if data.ndim > 1:
            if channel == "mix":
                data = np.mean(data, axis=1)
            else:
                if channel >= data.shape[1]:
                    raise ValueError(
                        f"Channel {channel} requested but file only has "
                        f"{data.shape[1]} channels"
                    )
                data = data[:, channel]

        return cls(samples=data, sample_rate=float(sr), amplitude=amplitude, loop=loop)

    @property
    def duration(self) -> float:
        """Length of the sampled data in seconds."""
        return len(self.samples) / self.sample_rate

    def __call__(self, t: float) -> float:
        if self.loop:
            t = t % self.duration
        elif t < 0 or t > self._times[-1]:
            return 0.0
        return self.amplitude * float(
            np.interp(t, self._times, self.samples, period=self.duration if self.loop else None)
        )
