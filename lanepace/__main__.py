"""Allow running LanePace as a module: python -m lanepace."""

import argparse
import logging
import sys
from datetime import datetime

from PyQt6.QtCore import QCoreApplication, QTimer

from .settings import load_settings
from .timer.engine import LaneTimerEngine, StepProgramEngine
from .timer.formatting import format_clock_time, format_elapsed
from .timer.steps import IntervalStep, StepKind


logger = logging.getLogger("lanepace")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="lanepace", description="Run the lane timer in a console.")
    parser.add_argument("--mode", choices=["send_off", "countdown", "count_up", "rest_based"])
    parser.add_argument("--lanes", type=int)
    series = parser.add_mutually_exclusive_group()
    series.add_argument("--simple", nargs=3, type=float, metavar=("REPS", "WORK", "REST"))
    series.add_argument("--pyramid", nargs=2, type=float, metavar=("BASE", "STEPS"))
    series.add_argument("--ladder", nargs=3, type=float, metavar=("START", "INCREMENT", "STEPS"))
    series.add_argument("--program", nargs=3, type=float, metavar=("WORK", "REST", "REPEATS"),
                        help="single-clock work/rest program instead of lanes")
    parser.add_argument("--pace", default="", metavar="M:SS", help="target pace for --simple")
    parser.add_argument("--sound", action="store_true", help="play signals through the speakers")
    parser.add_argument("--quit-after", type=float, default=0, metavar="SECONDS")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _build_lane_engine(args, settings) -> LaneTimerEngine:
    engine = LaneTimerEngine.from_settings(settings)
    if args.simple:
        reps, work, rest = args.simple
        engine.add_simple_interval(int(reps), work, rest, target_pace=args.pace)
    elif args.pyramid:
        base, steps = args.pyramid
        engine.create_pyramid_series(base, int(steps))
    elif args.ladder:
        start, increment, steps = args.ladder
        engine.create_ladder_series(start, increment, int(steps))
    return engine


def _build_step_engine(args, settings) -> StepProgramEngine:
    work, rest, repeats = args.program
    engine = StepProgramEngine.from_settings(settings)
    steps = [IntervalStep(StepKind.WORK, work, "Work")]
    if rest > 0:
        steps.append(IntervalStep(StepKind.REST, rest, "Rest"))
    engine.set_program(steps, int(repeats))
    return engine


def _lane_report(engine: LaneTimerEngine) -> str:
    snap = engine.snapshot
    lanes = "  ".join(
        f"{lane.lane_number}:{lane.display}" for lane in snap.lanes if lane.enabled
    )
    return f"{snap.status.value} set {snap.cursor.set_index + 1}/{snap.set_count}  {lanes}"


def _step_report(engine: StepProgramEngine) -> str:
    snap = engine.snapshot
    return (
        f"{snap.step_label or '-'} {snap.step_index + 1}/{snap.step_count} "
        f"repeat {snap.repeat_index + 1}/{snap.repeat_total}  "
        f"left {snap.display}  total {format_elapsed(snap.total_elapsed)}"
    )


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    settings = load_settings()
    if args.mode:
        settings.timer_mode = args.mode
    if args.lanes is not None:
        settings.default_lanes = args.lanes

    app = QCoreApplication(sys.argv)
    app.setApplicationName("LanePace")
    app.setOrganizationName("LanePace")

    if args.program:
        engine = _build_step_engine(args, settings)
        report = _step_report
    else:
        engine = _build_lane_engine(args, settings)
        report = _lane_report

    if args.sound:
        from .audio.sounds import SignalPlayer
        player = SignalPlayer(parent=engine)
        player.set_volume(settings.sound_volume)
        engine.signal_requested.connect(player.play_signal)

    engine.signal_requested.connect(
        lambda kind, lane, volume: logger.info(
            "signal %s%s", kind.value, "" if lane is None else f" (lane {lane + 1})"
        )
    )

    def _report() -> None:
        clock = format_clock_time(datetime.now(), settings.use_24_hour_format)
        print(f"{clock}  [{report(engine)}]")
        if not engine.snapshot.is_running:
            app.quit()

    report_timer = QTimer(app)
    report_timer.setInterval(1000)
    report_timer.timeout.connect(_report)
    report_timer.start()

    if args.quit_after > 0:
        QTimer.singleShot(int(args.quit_after * 1000), app.quit)

    engine.start()
    logger.info("LanePace running: %s", type(engine).__name__)
    code = app.exec()
    engine.close()
    sys.exit(code)


if __name__ == "__main__":
    main()
