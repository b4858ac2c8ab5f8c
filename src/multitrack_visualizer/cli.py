"""Command-line entry point: render a song or MIDI file to video."""

from __future__ import annotations

import argparse
import logging

from multitrack_visualizer.audio.song import Song
from multitrack_visualizer.display.canvas import FrameBuffer
from multitrack_visualizer.errors import ConfigError, RenderError
from multitrack_visualizer.logging_setup import configure_logging
from multitrack_visualizer.midi.song import MidiSong
from multitrack_visualizer.project.loader import load_midi_config, load_song_config, load_window
from multitrack_visualizer.project.schema import WINDOW_PRESETS, WindowConfig
from multitrack_visualizer.render import render
from multitrack_visualizer.video.encoder import FrameEncoder, FrameSink, PngFrameWriter

logger = logging.getLogger("multitrack_visualizer")

DEFAULT_SONG = "./song.json"
DEFAULT_WINDOW = "./window.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multitrack-visualizer",
        description="Generate a video based on the waveforms of multiple audio tracks",
    )
    parser.add_argument("-s", "--song", default="", help="JSON config for the tracks, colours and audio files")
    parser.add_argument("-m", "--midi", default="", help="JSON config for loading a MIDI file instead of audio")
    parser.add_argument("-w", "--window", default=DEFAULT_WINDOW, help="JSON config for output size and scaling")
    parser.add_argument(
        "-p",
        "--window-preset",
        choices=sorted(WINDOW_PRESETS),
        default=None,
        help="Preset window instead of --window: 16x9, 9x16 or 9x18 (all 1080p)",
    )
    parser.add_argument("--png-dir", default=None, help="Write numbered PNG frames here instead of a video")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="INFO")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    song_path = args.song
    if not song_path and not args.midi:
        song_path = DEFAULT_SONG

    try:
        window = load_window(None if args.window_preset else args.window, args.window_preset)
        song = _load_song(song_path, args.midi, window)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    try:
        sink = _open_sink(args.png_dir, song.video_file_out, window)
    except ConfigError as exc:
        song.close()
        logger.error("%s", exc)
        return 1

    logger.info("Starting render")
    frame = FrameBuffer(window.width, window.height)
    try:
        frames = render(song, sink, frame, window.frame_rate)
    except RenderError as exc:
        logger.error("%s", exc)
        return 2
    logger.info("Finished rendering %d frames to %s", frames, args.png_dir or song.video_file_out)
    return 0


def _load_song(song_path: str, midi_path: str, window: WindowConfig) -> Song | MidiSong:
    if song_path:
        return Song.from_config(load_song_config(song_path), window)
    return MidiSong.from_config(load_midi_config(midi_path), window)


def _open_sink(png_dir: str | None, video_file_out: str, window: WindowConfig) -> FrameSink:
    if png_dir:
        return PngFrameWriter(png_dir, window)
    return FrameEncoder(video_file_out, window)


if __name__ == "__main__":
    raise SystemExit(main())
