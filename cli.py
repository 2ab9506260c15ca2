import argparse
import logging
import os
import shutil
import sys
from typing import Iterable, Optional

from config import YamlConfig
from db import Database, SubstitutionHistoryRepository, WorkoutHistoryRepository
from program import WORKOUT_PHASES, total_weeks
from trainer_service import TrainerService


def export_history(db_path: str, fmt: str, output_dir: str = ".") -> str:
    history = WorkoutHistoryRepository(db_path)
    if fmt == "csv":
        data = history.export_csv()
    else:
        data = history.export_json()
    out_path = os.path.join(output_dir, f"workouts.{fmt}")
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(data)
    return out_path


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def print_phases() -> None:
    print(f"{len(WORKOUT_PHASES)} phases, {total_weeks()} weeks")
    for i, phase in enumerate(WORKOUT_PHASES):
        print(f"{i}: {phase.name} ({phase.duration_weeks} weeks)")
        print(f"   {phase.sets} x {phase.reps}, rest {phase.rest}, tempo {phase.tempo}")
        for name in phase.exercises:
            print(f"   - {name}")


def print_history(db_path: str) -> None:
    for workout in WorkoutHistoryRepository(db_path).fetch_all_records():
        print(f"{workout.date:%Y-%m-%d %H:%M} {workout.phase}")
        for entry in workout.log:
            print(f"   {entry.exercise}: reps={entry.reps or '-'} weight={entry.weight or '-'}")
    for log in SubstitutionHistoryRepository(db_path).fetch_all_records():
        print(
            f"{log.date:%Y-%m-%d %H:%M} {log.exercise_name} "
            f"(instead of {log.original_machine_name}): "
            f"{log.series} series, {log.repetitions} reps"
        )


def simulate(
    service: TrainerService,
    utterances: Iterable[str],
    phase: Optional[int] = None,
) -> None:
    """Run utterances through a workout as if they had been spoken."""
    service.reconcile_progress()
    chosen = service.start_workout(phase)
    print(f"== {chosen.name}")
    for text in utterances:
        text = text.strip()
        if not text:
            continue
        exercise = service.workout.current_exercise
        intent = service.voice.deliver(text)
        print(f"[{exercise}] {text!r} -> {intent}")
        for notice in service.pop_notices():
            print(f"   ! {notice}")
        if service.workout.phase is None:
            print("== workout saved")
            break


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Voice trainer utilities")
    parser.add_argument("--db", default=None)
    parser.add_argument("--yaml", default="settings.yaml")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("phases")
    sub.add_parser("progress")
    sub.add_parser("history")
    sub.add_parser("vacuum")

    sim = sub.add_parser("simulate")
    sim.add_argument("--phase", type=int, default=None)
    sim.add_argument("utterances", nargs="*")

    exp = sub.add_parser("export")
    exp.add_argument("--fmt", choices=["csv", "json"], default="csv")
    exp.add_argument("--out", default=".")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = YamlConfig(args.yaml).settings()
    db_path = args.db or settings.db_path

    if args.cmd == "phases":
        print_phases()
    elif args.cmd == "progress":
        service = TrainerService(db_path, settings)
        notice = service.reconcile_progress()
        if notice:
            print(notice)
        print(service.tracker.week_info())
        service.close()
    elif args.cmd == "history":
        print_history(db_path)
    elif args.cmd == "simulate":
        settings = settings.model_copy(update={"auto_tick": False})
        service = TrainerService(db_path, settings)
        lines = args.utterances or sys.stdin.read().splitlines()
        try:
            simulate(service, lines, args.phase)
        finally:
            service.close()
    elif args.cmd == "vacuum":
        Database(db_path).vacuum()
    elif args.cmd == "export":
        print(export_history(db_path, args.fmt, args.out))
    elif args.cmd == "backup":
        backup_db(db_path, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, db_path)


if __name__ == "__main__":
    main()
