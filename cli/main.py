"""Command-line entry points for benchmarking, snapshots and the desktop view."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

# Allow `python cli/main.py ...` execution from IDEs by adding repo root to sys.path.
if __package__ in {None, ""}:
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from configs.loader import DEFAULT_CONFIG_PATH, BackgroundConfig, ConfigLoader
from core.device_capabilities import detect_capabilities, recommend_configuration
from main import run_headless
from streaming.state_serializer import serialize_state, to_jsonable


def _emit(payload: object) -> None:
    print(json.dumps(to_jsonable(payload), indent=2, sort_keys=True))


def _pace(config: BackgroundConfig, paced: bool) -> float | None:
    return 1000.0 / config.host.target_fps if paced else None


def run_cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="constellation")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command", required=False)

    run_cmd = sub.add_parser("run", help="headless benchmark; prints metrics as JSON")
    run_cmd.add_argument("--config", default=str(DEFAULT_CONFIG_PATH))
    run_cmd.add_argument("--frames", type=int, default=300)
    run_cmd.add_argument("--paced", action="store_true", help="sleep to the target frame budget")

    snapshot_cmd = sub.add_parser("snapshot", help="write the frame reached after N frames as JSON")
    snapshot_cmd.add_argument("--config", default=str(DEFAULT_CONFIG_PATH))
    snapshot_cmd.add_argument("--frames", type=int, default=1)
    snapshot_cmd.add_argument("--out", default="artifacts/frame.json")

    recommend_cmd = sub.add_parser("recommend", help="print detected capabilities and recommendation")
    recommend_cmd.add_argument("--screen-width", type=int)
    recommend_cmd.add_argument("--reduced-motion", action="store_true")

    plot_cmd = sub.add_parser("plot", help="plot FPS history of a headless run")
    plot_cmd.add_argument("--config", default=str(DEFAULT_CONFIG_PATH))
    plot_cmd.add_argument("--frames", type=int, default=600)
    plot_cmd.add_argument("--paced", action="store_true")
    plot_cmd.add_argument("--out", default="artifacts/fps.png")

    gui_cmd = sub.add_parser("gui", help="open the desktop background window")
    gui_cmd.add_argument("--config", default=str(DEFAULT_CONFIG_PATH))
    gui_cmd.add_argument("--overlay", action="store_true")
    gui_cmd.add_argument("--reduced-motion", action="store_true")

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "run":
        config = ConfigLoader.load(args.config)
        result = run_headless(config, args.frames, capabilities=detect_capabilities(), pace_ms=_pace(config, args.paced))
        payload = result.snapshot.to_dict()
        payload["frames_rendered"] = result.frames_rendered
        _emit(payload)
        return 0

    if args.command == "snapshot":
        config = ConfigLoader.load(args.config)
        result = run_headless(config, args.frames)
        if result.last_frame is None:
            raise RuntimeError("No frame was rendered.")
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(serialize_state(result.last_frame))
        print(out)
        return 0

    if args.command == "recommend":
        capabilities = detect_capabilities(screen_width=args.screen_width, reduced_motion=args.reduced_motion)
        _emit(
            {
                "capabilities": capabilities.to_dict(),
                "recommendation": recommend_configuration(capabilities).to_dict(),
            }
        )
        return 0

    if args.command == "plot":
        from visualization.plotting import plot_fps_history

        config = ConfigLoader.load(args.config)
        result = run_headless(config, args.frames, capabilities=detect_capabilities(), pace_ms=_pace(config, args.paced))
        path = plot_fps_history(result.snapshot.fps_history, args.out)
        print(path)
        return 0

    if args.command == "gui":
        from ui_desktop.app import main as desktop_main

        forwarded = ["--config", str(args.config)]
        if args.overlay:
            forwarded.append("--overlay")
        if args.reduced_motion:
            forwarded.append("--reduced-motion")
        return int(desktop_main(forwarded))

    return 1


if __name__ == "__main__":
    raise SystemExit(run_cli())
