# formcoach/runtime/cli.py
from __future__ import annotations
import argparse
import logging
import sys
import threading
from typing import List, Optional

from formcoach import config
from formcoach.agent.router import route_and_execute
from formcoach.counter.exercises import EXERCISES
from formcoach.counter.pipeline import PosePipeline
from formcoach.counter.session import ACTIVE_MANAGER, RepSessionManager

logger = logging.getLogger(__name__)


def _run_ticker(manager: RepSessionManager, interval: float, stop_evt: threading.Event):
    while not stop_evt.wait(interval):
        manager.tick()


class _ConsolePrinter:
    """Prints rep events and feedback changes instead of drawing a UI."""

    def __init__(self):
        self._last_feedback: List[str] = []
        self._last_countdown = 0

    def __call__(self, ev: dict):
        kind = ev.get("type")
        if kind == "rep":
            mark = "good" if ev["good"] else "counted"
            print(f"rep {ev['rep_count']} ({mark})", flush=True)
        elif kind == "snapshot":
            if ev["phase"] == "countdown" and ev["countdown"] != self._last_countdown:
                print(f"{ev['countdown']}…", flush=True)
            self._last_countdown = ev["countdown"]
            if ev["feedback"] and ev["feedback"] != self._last_feedback:
                print(" | ".join(ev["feedback"]), flush=True)
            self._last_feedback = ev["feedback"]
        elif kind == "session_started":
            print("go!", flush=True)


def _assistant_loop():
    print("Type a command (e.g. 'let's do squats', 'start', 'how many?'); 'quit' to exit.", flush=True)
    while True:
        try:
            text = input("> ").strip()
        except EOFError:
            return
        if text.lower() in ("quit", "exit", "q"):
            return
        if not text:
            continue
        trace = route_and_execute(text)
        for s in trace["steps"]:
            print(s, flush=True)
        if trace["action"] == "noop" and trace["llm_text"]:
            print(f"assistant: {trace['llm_text']}", flush=True)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Count reps and coach form from a webcam.")
    parser.add_argument("--exercise", choices=sorted(EXERCISES), help="exercise to track")
    parser.add_argument("--camera", type=int, default=config.CAMERA_INDEX, help="webcam index")
    parser.add_argument("--countdown", type=int, default=config.COUNTDOWN_S, help="seconds before tracking")
    parser.add_argument("--show", action="store_true", help="show a preview window (q to quit)")
    parser.add_argument("--assistant", action="store_true", help="control the session with typed commands")
    args = parser.parse_args(argv)

    config.setup_logging()
    if not args.exercise and not args.assistant:
        parser.error("pick an --exercise or use --assistant")

    manager = ACTIVE_MANAGER()
    manager.set_event_sink(_ConsolePrinter())
    if args.exercise:
        manager.select_exercise(args.exercise)

    errors: List[str] = []
    pipe = PosePipeline(manager, camera_index=args.camera, show_window=args.show, on_error=errors.append)
    stop_evt = threading.Event()
    ticker = threading.Thread(target=_run_ticker, args=(manager, config.TICK_S, stop_evt), daemon=True)

    pipe.start()
    ticker.start()
    if args.exercise:
        manager.start(countdown_s=args.countdown)

    try:
        if args.assistant:
            _assistant_loop()
        else:
            print("Tracking… press Ctrl+C to finish.", flush=True)
            while pipe.is_alive():
                pipe.join(timeout=0.5)
    except KeyboardInterrupt:
        print("\nFinishing…", flush=True)
    finally:
        pipe.stop()
        stop_evt.set()
        pipe.join(timeout=1.0)

    s = manager.end()
    print(f"exercise: {s.exercise}", flush=True)
    if s.timed:
        print(f"hold time: {s.hold_seconds}s", flush=True)
    else:
        print(f"reps: {s.total_reps}  good: {s.good_reps}  form accuracy: {s.form_accuracy:.0f}%", flush=True)
    print(f"duration: {s.duration_s:.0f}s", flush=True)
    if errors:
        print(f"Error: {errors[0]}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
