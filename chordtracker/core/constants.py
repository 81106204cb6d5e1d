"""Global constants for Chord Tracker.

The harmonic thresholds were tuned by ear against popular repertoire and are
kept here so they can be retuned without touching the algorithms.
"""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
PITCH_NAMES_FLAT = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# Chord labels
NO_CHORD_SYMBOL = "N.C."
MINOR_SUFFIX = "m"

# Audio processing defaults
DEFAULT_SR = 22050

# Musical defaults
DEFAULT_TEMPO = 120.0
DEFAULT_BEATS_PER_MEASURE = 4
MIN_CANONICAL_BPM = 70.0
MAX_CANONICAL_BPM = 150.0

# Rhythm detection
ENVELOPE_RATE_HZ = 1000
MIN_BEAT_PERIOD = 0.28  # seconds, ~215 BPM
MAX_BEAT_PERIOD = 1.0  # seconds, 60 BPM
AUTOCORR_STRIDE = 4
OFFSET_SEARCH_BEATS = 2

# Harmonic analysis
SILENCE_RMS = 0.01
CHROMA_WINDOW_SIZE = 8192  # large enough to resolve bass fundamentals
CHROMA_WINDOW_STEPS = 3
CHROMA_MIDI_MIN = 28  # E1, ~41 Hz
CHROMA_MIDI_MAX = 74  # exclusive, D5
TREBLE_CUTOFF_HZ = 600.0  # keeps vocals and lead lines out of the chroma
BASS_SPLIT_HZ = 200.0
BASS_WEIGHT_HZ = 1000.0  # bass magnitude is scaled by BASS_WEIGHT_HZ / freq
NOISE_REJECTION_RATIO = 2.2
MINOR_THIRD_BIAS = 1.15
MAX_ANALYSIS_DURATION = 600.0  # seconds

# Key estimate
LAST_CHORD_WEIGHT = 20
DEFAULT_KEY = "C"
