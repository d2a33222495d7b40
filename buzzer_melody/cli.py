"""Command line interface for Buzzer Melody.

``run_cli`` compiles a preset or a text score, optionally exports it as MIDI
or WAV, and plays it through the configured signal generator with the
cooperative player. Defaults come from the JSON settings file (see
:mod:`buzzer_melody.config`); flags override them.

Example
-------
Play the startup jingle through FluidSynth::

    buzzer-melody --preset startup --backend fluidsynth

Compile a score at 76 bpm with a 15 ms gap, print the steps and save a WAV
without playing it::

    buzzer-melody --score "G5/4 D5/4 B5/4 G5/8 D5/8" --bpm 76 --gap 15 \
        --dump --render-wav out.wav --no-play
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .app import AppContext, simulate
from .backends import BACKENDS
from .config import DEFAULT_SETTINGS_FILE, PlayerSettings, load_settings
from .core import Melody
from .errors import MelodyError, SignalGeneratorError
from .presets import preset_names
from .utils import parse_score

__all__ = ["build_parser", "run_cli", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buzzer-melody",
        description="Compile a melody into tone steps and play it on a single-tone generator.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--preset", type=str, help="Name of a built-in preset to play.")
    source.add_argument(
        "--score",
        type=str,
        help="Score as PITCH/DURATION tokens, e.g. 'G5/4 R/8 784/16'.",
    )
    parser.add_argument("--list-presets", action="store_true", help="List built-in presets and exit")
    parser.add_argument("--bpm", type=int, help="Tempo in beats per minute (1-300).")
    parser.add_argument("--gap", type=int, metavar="MS", help="Articulation gap between notes (0-1000 ms).")
    parser.add_argument("--loop", action="store_true", default=None, help="Repeat the melody until interrupted.")
    parser.add_argument("--capacity", type=int, help="Maximum number of compiled steps.")
    parser.add_argument("--backend", choices=BACKENDS, help="Signal generator used for playback.")
    parser.add_argument("--soundfont", type=str, help="SoundFont used by the fluidsynth backend.")
    parser.add_argument("--max-seconds", type=float, help="Stop playback after this many seconds.")
    parser.add_argument("--dump", action="store_true", help="Print the compiled steps.")
    parser.add_argument("--export-midi", type=str, metavar="PATH", help="Write the compiled melody as a MIDI file.")
    parser.add_argument("--render-wav", type=str, metavar="PATH", help="Write the compiled melody as a square-wave WAV file.")
    parser.add_argument("--dry-run", action="store_true", help="Simulate playback and print generator commands.")
    parser.add_argument("--no-play", dest="play", action="store_false", help="Compile and export only.")
    parser.add_argument(
        "--settings-file",
        type=str,
        help=f"JSON settings file (default: {DEFAULT_SETTINGS_FILE})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def _settings_from_args(args: argparse.Namespace) -> PlayerSettings:
    path = Path(args.settings_file) if args.settings_file else DEFAULT_SETTINGS_FILE
    data = load_settings(path)
    overrides = {
        "bpm": args.bpm,
        "gap_ms": args.gap,
        "loop": args.loop,
        "capacity": args.capacity,
        "backend": args.backend,
        "soundfont": args.soundfont,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    return PlayerSettings.from_dict(data)


def _dump(melody: Melody) -> None:
    for index, step in enumerate(melody):
        kind = "rest" if step.is_rest else f"{step.frequency_hz} Hz"
        print(f"{index:3d}  {kind:>8}  {step.duration_ms} ms")
    print(f"{len(melody)} steps, {melody.total_duration_ms()} ms")


def run_cli(argv: Optional[List[str]] = None) -> None:
    """Parse ``argv`` and compile, export and play the requested melody."""

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_presets:
        print("\n".join(preset_names()))
        return
    if not args.preset and not args.score:
        logging.error("Either --preset or --score is required.")
        sys.exit(1)

    try:
        settings = _settings_from_args(args)
    except MelodyError as exc:
        logging.error("Invalid settings: %s", exc)
        sys.exit(1)

    # Exports and dry runs never touch the audio backend.
    if not args.play or args.dry_run:
        settings.backend = "null"

    try:
        ctx = AppContext(settings)
    except SignalGeneratorError as exc:
        logging.error(str(exc))
        sys.exit(1)

    with ctx:
        try:
            if args.preset:
                melody = ctx.compile_preset(args.preset)
            else:
                melody = ctx.compile_score(parse_score(args.score))
        except (MelodyError, ValueError) as exc:
            logging.error("Could not compile melody: %s", exc)
            sys.exit(1)

        if args.dump:
            _dump(melody)

        try:
            if args.export_midi:
                from .midi_io import melody_to_midi

                melody_to_midi(melody, args.export_midi)
                print(f"MIDI file saved to {args.export_midi}")
            if args.render_wav:
                from .render import write_wav

                write_wav(melody, args.render_wav)
                print(f"WAV file saved to {args.render_wav}")
        except OSError as exc:
            logging.error("Could not write output: %s", exc)
            sys.exit(1)

        if args.dry_run:
            max_ms = None
            if settings.loop:
                max_ms = int((args.max_seconds or 0) * 1000) or melody.total_duration_ms() * 2
            recorder = simulate(melody, loop=settings.loop, max_ms=max_ms)
            for stamp, action, hz in recorder.events:
                print(f"{stamp:8d} ms  {action}" + (f" {hz} Hz" if hz is not None else ""))
            return

        if args.play:
            max_seconds = args.max_seconds
            ctx.player.play(melody, loop=settings.loop)
            try:
                ctx.run(max_seconds=max_seconds)
            except KeyboardInterrupt:
                logging.info("Playback interrupted")


def main(argv: Optional[List[str]] = None) -> None:
    """Console entry point: configure logging then run the CLI."""

    raw = sys.argv[1:] if argv is None else argv
    verbose = "-v" in raw or "--verbose" in raw
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    run_cli(argv)


if __name__ == "__main__":
    main()
