"""
CLI entry point for Echo Imprint.

Usage:
    echo-imprint render <audio_file> [options]
    echo-imprint simulate [options]
    echo-imprint frozen <specimen.json> [options]
"""

import argparse
import json
import sys
import time
from pathlib import Path

from PIL import Image

from echo_imprint.config import PRESETS, get_preset
from echo_imprint.core.synth import synthesize_frozen
from echo_imprint.io.specimen import Specimen
from echo_imprint.pipeline import OrganismPipeline
from echo_imprint.render.canvas import CanvasConfig, SceneRasterizer
from echo_imprint.render.encoder import encode_video

# Square canvases; the organism is round.
PROFILES = {
    "low": {"size": 480, "fps": 30, "quality": "fast"},
    "medium": {"size": 720, "fps": 60, "quality": "medium"},
    "high": {"size": 1080, "fps": 60, "quality": "high"},
}


def _progress_bar(current: int, total: int, width: int = 35):
    """Print a progress bar to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "#" * filled + "-" * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  frame {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    else:
        if current % max(1, total // 20) == 0 or current >= total:
            print(f"{pct:5.1f}%  frame {current}/{total}", flush=True)


def _add_canvas_args(parser: argparse.ArgumentParser, preset_default: str | None = "default"):
    parser.add_argument(
        "-p", "--profile", type=str, default="medium",
        choices=sorted(PROFILES),
        help="Target profile (low: 480px 30fps, medium: 720px 60fps, high: 1080px 60fps)",
    )
    parser.add_argument("--size", type=int, default=None, help="Canvas size in pixels (overrides profile)")
    parser.add_argument(
        "--preset", type=str, default=preset_default,
        choices=sorted(PRESETS),
        help=f"Engine preset (default: {preset_default or 'the preset stored in the specimen'})",
    )
    parser.add_argument("--no-glow", action="store_true", help="Disable glow")
    parser.add_argument(
        "--vignette", type=float, default=0.25,
        help="Vignette strength [0.0-1.0] (default: 0.25)",
    )


def _canvas_config(args: argparse.Namespace) -> CanvasConfig:
    size = args.size or PROFILES[args.profile]["size"]
    return CanvasConfig(
        width=size,
        height=size,
        glow_enabled=not args.no_glow,
        vignette_strength=args.vignette,
    )


def _save_outputs(pipeline: OrganismPipeline, args: argparse.Namespace, canvas: CanvasConfig, **specimen_fields):
    """Freeze the finished session, write the optional snapshot and specimen files."""
    specimen_fields.setdefault("preset", args.preset)
    if args.snapshot is not None:
        specimen_fields["image_file"] = str(args.snapshot)

    specimen = pipeline.make_specimen(**specimen_fields)

    if args.snapshot is not None:
        Image.fromarray(pipeline.render_specimen(specimen, canvas)).save(args.snapshot)
        print(f"  Snapshot: {args.snapshot}")

    if args.specimen is not None:
        specimen.export_json(args.specimen)
        print(f"  Specimen: {args.specimen}")
    else:
        print(json.dumps(specimen.to_dict(), indent=2))


def cmd_render(args: argparse.Namespace):
    if not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        sys.exit(1)

    profile = PROFILES[args.profile]
    fps = args.fps or profile["fps"]
    quality = args.quality or profile["quality"]
    canvas = _canvas_config(args)

    output = args.output
    if output is None:
        output = args.audio.with_name(f"{args.audio.stem}_organism.mp4")

    # Step 1: Metering
    print(f"Analyzing audio: {args.audio}")
    t0 = time.time()

    pipeline = OrganismPipeline(target_fps=fps, config=get_preset(args.preset))
    result = pipeline.process(args.audio)
    features = result["features"]

    print(f"  Duration: {result['duration']:.1f}s")
    print(f"  Frames: {result['n_frames']}")
    print(f"  Analysis took {time.time() - t0:.1f}s")

    if args.max_duration is not None:
        max_frames = int(args.max_duration * fps)
        if max_frames < len(features):
            features = features[:max_frames]
            print(f"  Limiting to {args.max_duration}s ({max_frames} frames)")

    total_frames = len(features)

    # Step 2: Render + encode
    print(f"\nRendering {total_frames} frames at {canvas.width}x{canvas.height} @ {fps}fps")
    t1 = time.time()

    encode_video(
        frame_iterator=pipeline.render_frames(features, canvas, progress_callback=_progress_bar),
        output_path=output,
        width=canvas.width,
        height=canvas.height,
        fps=fps,
        quality=quality,
        audio_path=args.audio,
        duration=args.max_duration or result["duration"],
        total_frames=total_frames,
    )

    elapsed = time.time() - t1
    file_size_mb = output.stat().st_size / 1024 / 1024

    print(f"\nDone! {file_size_mb:.1f} MB")
    print(f"  Render+encode took {elapsed:.1f}s ({total_frames / max(elapsed, 0.01):.1f} fps)")
    print(f"  Output: {output}")

    # Step 3: Freeze
    _save_outputs(pipeline, args, canvas, audio_file=str(args.audio))


def cmd_simulate(args: argparse.Namespace):
    fps = args.fps or PROFILES[args.profile]["fps"]
    canvas = _canvas_config(args)

    pipeline = OrganismPipeline(target_fps=fps, config=get_preset(args.preset))
    features = pipeline.simulate(args.duration)

    print(f"Simulating {args.duration:.1f}s ({len(features)} frames @ {fps}fps)")
    for _ in pipeline.scenes(features):
        pass

    snapshot = pipeline.freeze()
    print(f"  Growth: {snapshot.growth:.2f}")
    print(f"  Rings alive: {len(pipeline.driver.state.rings)}")

    _save_outputs(pipeline, args, canvas, name=args.name)


def cmd_frozen(args: argparse.Namespace):
    if not args.specimen_file.exists():
        print(f"Error: Specimen file not found: {args.specimen_file}", file=sys.stderr)
        sys.exit(1)

    try:
        specimen = Specimen.load_json(args.specimen_file)
    except (ValueError, json.JSONDecodeError) as e:
        print(f"Error: Invalid specimen file {args.specimen_file}: {e}", file=sys.stderr)
        sys.exit(1)

    preset = args.preset or specimen.preset
    try:
        config = get_preset(preset)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    output = args.output or args.specimen_file.with_suffix(".png")
    canvas = _canvas_config(args)
    scene = synthesize_frozen(specimen, config)
    SceneRasterizer(canvas).save_png(scene, output)

    print(f"Rendered '{specimen.name}' ({specimen.time_label}, preset {preset}) -> {output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="echo-imprint",
        description="Sound organism renderer: grow a breathing shape from audio",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # render
    render = sub.add_parser("render", help="Render an audio file to an organism video")
    render.add_argument("audio", type=Path, help="Input audio file (wav, mp3, flac)")
    render.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output MP4 path (default: <audio>_organism.mp4)",
    )
    render.add_argument("-f", "--fps", type=int, default=None, help="Frames per second (overrides profile)")
    render.add_argument(
        "-q", "--quality", type=str, default=None,
        choices=["high", "medium", "fast"],
        help="Encoding quality (defaults to profile quality)",
    )
    render.add_argument(
        "--max-duration", type=float, default=None,
        help="Limit output to N seconds",
    )
    render.add_argument("--snapshot", type=Path, default=None, help="Write the frozen specimen as PNG")
    render.add_argument("--specimen", type=Path, default=None, help="Write the specimen JSON here")
    _add_canvas_args(render)
    render.set_defaults(func=cmd_render)

    # simulate
    simulate = sub.add_parser("simulate", help="Run a simulated session without audio")
    simulate.add_argument(
        "-d", "--duration", type=float, default=5.0,
        help="Session length in seconds (default: 5.0)",
    )
    simulate.add_argument("-f", "--fps", type=int, default=None, help="Tick rate (overrides profile)")
    simulate.add_argument("--name", type=str, default="Sound Memory", help="Specimen name")
    simulate.add_argument("--snapshot", type=Path, default=None, help="Write the frozen specimen as PNG")
    simulate.add_argument("--specimen", type=Path, default=None, help="Write the specimen JSON here")
    _add_canvas_args(simulate)
    simulate.set_defaults(func=cmd_simulate)

    # frozen
    frozen = sub.add_parser("frozen", help="Render a stored specimen as a still image")
    frozen.add_argument("specimen_file", type=Path, help="Specimen JSON file")
    frozen.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output PNG path (default: <specimen>.png)",
    )
    _add_canvas_args(frozen, preset_default=None)
    frozen.set_defaults(func=cmd_frozen)

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
