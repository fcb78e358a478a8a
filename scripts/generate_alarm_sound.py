#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Generate the alarm sound played on every alarm.

Writes a 16-bit mono WAV beep to the fixed location the alarm reads from.

Usage:
    python scripts/generate_alarm_sound.py
    python scripts/generate_alarm_sound.py --duration 5 --frequency 880
    python scripts/generate_alarm_sound.py --output /tmp/alarm.wav
"""
import argparse
import math
import struct
import sys
import wave
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from lib.alarm.dispatcher import ALARM_SOUND_FILE  # noqa: E402

SAMPLE_RATE = 44100
FADE_SECONDS = 0.01


def beep_samples(duration, frequency, pulse_hz=2.0, sample_rate=SAMPLE_RATE):
    """Yield 16-bit samples of a pulsing sine beep

    Args:
        duration: Length in seconds
        frequency: Tone frequency in Hz
        pulse_hz: On/off pulses per second (0 for a steady tone)
        sample_rate: Samples per second
    """
    total = int(sample_rate * duration)
    for i in range(total):
        t = i / sample_rate

        # Fade in/out to avoid clicks
        fade = min(1.0, t / FADE_SECONDS, (duration - t) / FADE_SECONDS)
        gate = 1.0
        if pulse_hz > 0 and math.sin(2 * math.pi * pulse_hz * t) < 0:
            gate = 0.0

        value = fade * gate * math.sin(2 * math.pi * frequency * t)
        yield int(32767 * 0.8 * value)


def write_wav(path, samples, sample_rate=SAMPLE_RATE):
    """Write samples to a mono 16-bit WAV file"""
    with wave.open(str(path), 'w') as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(b''.join(struct.pack('<h', s) for s in samples))


def main():
    parser = argparse.ArgumentParser(
        description='Generate the alarm sound (WAV beep)'
    )
    parser.add_argument('--duration', type=float, default=10.0,
                        help='Length in seconds (default: 10)')
    parser.add_argument('--frequency', type=float, default=800.0,
                        help='Tone frequency in Hz (default: 800)')
    parser.add_argument('--output', default=str(ALARM_SOUND_FILE),
                        help='Output path (default: %(default)s)')
    args = parser.parse_args()

    if args.duration <= 0 or args.frequency <= 0:
        print('Error: duration and frequency must be positive', file=sys.stderr)
        return 1

    write_wav(args.output, beep_samples(args.duration, args.frequency))
    print(f'Generated {args.output}: {args.duration:g}s at {args.frequency:g}Hz')
    return 0


if __name__ == '__main__':
    sys.exit(main())
