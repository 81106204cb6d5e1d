"""Generate synthetic chord clips for testing.

Each beat restarts a block chord with a short attack and exponential decay,
so the clips carry both a clear pulse and a stable harmony.
"""

import os

import numpy as np
import soundfile as sf

# Ensure examples directory exists
EXAMPLES_DIR = os.path.join(os.path.dirname(__file__), "..", "examples")

SR = 22050

# Voicings: bass notes below 200 Hz, chord tones in the 200-600 Hz band
C_MAJOR = [65.41, 130.81, 164.81, 196.00, 261.63, 329.63, 392.00]
G_MAJOR = [98.00, 196.00, 246.94, 293.66, 392.00]
A_MINOR = [110.00, 220.00, 261.63, 329.63, 440.00]
F_MAJOR = [87.31, 174.61, 220.00, 261.63, 349.23]


def generate_sine_wave(freq: float, duration: float, sr: int = SR) -> np.ndarray:
    """Generate a sine wave at given frequency."""
    t = np.arange(int(sr * duration)) / sr
    return np.sin(2 * np.pi * freq * t).astype(np.float32)


def generate_chord_beat(
    frequencies: list,
    duration: float,
    sr: int = SR,
    accent: float = 1.0,
    decay: float = 0.15,
) -> np.ndarray:
    """One struck chord: 5 ms attack, then exponential decay."""
    n = int(round(sr * duration))
    t = np.arange(n) / sr
    chord = np.sum([np.sin(2 * np.pi * f * t) for f in frequencies], axis=0)
    chord /= len(frequencies)

    envelope = np.exp(-t / decay)
    attack = int(0.005 * sr)
    envelope[:attack] *= np.linspace(0, 1, attack)
    return (chord * envelope * accent).astype(np.float32)


def generate_pulsed_progression(
    chords: list,
    beats_per_chord: int,
    bpm: float = 120.0,
    beats_per_measure: int = 4,
    sr: int = SR,
) -> np.ndarray:
    """Chord progression struck on every beat, first beat of each bar accented."""
    beat = 60.0 / bpm
    audio = []
    n_beat = 0
    for freqs in chords:
        for _ in range(beats_per_chord):
            accent = 0.9 if n_beat % beats_per_measure == 0 else 0.6
            audio.append(generate_chord_beat(freqs, beat, sr, accent=accent))
            n_beat += 1
    return np.concatenate(audio)


def generate_silence(duration: float, sr: int = SR) -> np.ndarray:
    return np.zeros(int(sr * duration), dtype=np.float32)


def save_wav(filename: str, audio: np.ndarray, sr: int = SR, directory: str = EXAMPLES_DIR):
    """Save audio as 16-bit WAV file."""
    os.makedirs(directory, exist_ok=True)
    filepath = os.path.join(directory, filename)
    sf.write(filepath, audio, sr, subtype="PCM_16")
    print(f"Created: {filepath}")
    return filepath


def main():
    # 1. C for 4 s then G for 4 s at 120 BPM
    print("Generating c_then_g_120.wav...")
    save_wav("c_then_g_120.wav", generate_pulsed_progression([C_MAJOR, G_MAJOR], 8))

    # 2. I-vi-IV-V at 100 BPM, one bar each
    print("Generating c_am_f_g_100.wav...")
    save_wav(
        "c_am_f_g_100.wav",
        generate_pulsed_progression([C_MAJOR, A_MINOR, F_MAJOR, G_MAJOR], 4, bpm=100.0),
    )

    # 3. Silence (for edge case testing)
    print("Generating silence.wav...")
    save_wav("silence.wav", generate_silence(2.0))

    print("\nAll test audio files generated!")


if __name__ == "__main__":
    main()
