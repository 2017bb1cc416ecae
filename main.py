#!/usr/bin/env python3
"""
Program engine command line.

Generates a training program from an intake file, adapts upcoming weeks or
today's workout, and logs sets with personal-record detection.
"""

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from program_engine.adaptation import ENERGY_OPTIONS, SLEEP_OPTIONS, AdaptationEngine, iter_weeks
from program_engine.completion import CompletionClient
from program_engine.config import get_api_key, load_config
from program_engine.generation import generate_training_program
from program_engine.guidelines import GuidelineLibrary
from program_engine.personal_records import detect_personal_record
from program_engine.program_store import ProgramStore
from program_engine.units import to_kg


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate and adapt personalized training programs.")
    parser.add_argument("--config", default="config.yaml", help="Path to config.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate a new program from an intake JSON file")
    generate.add_argument("intake", help="JSON file with 'user' and 'onboarding' objects")
    generate.add_argument("--trial", action="store_true", help="Generate a one-week preview (no paid access)")

    week = subparsers.add_parser("adapt-week", help="Adapt the next week from feedback")
    week.add_argument("--user-id", required=True)
    week.add_argument("--feedback", required=True, choices=["easy", "good", "hard"])
    week.add_argument("--current-week", required=True, type=int, help="Week just completed (1-based)")

    day = subparsers.add_parser("adapt-day", help="Adapt one planned day to readiness")
    day.add_argument("--user-id", required=True)
    day.add_argument("--week", required=True, type=int, help="Week position in the program (1-based)")
    day.add_argument("--day", required=True, type=int, help="dayOfWeek (1-7)")
    day.add_argument("--sleep", required=True, choices=SLEEP_OPTIONS)
    day.add_argument("--energy", required=True, choices=ENERGY_OPTIONS)

    log_set = subparsers.add_parser("log-set", help="Log a set and check for a personal record")
    log_set.add_argument("--user-id", required=True)
    log_set.add_argument("--exercise", required=True)
    log_set.add_argument("--weight", required=True, type=float)
    log_set.add_argument("--reps", required=True, type=int)
    log_set.add_argument("--unit", default="kg", choices=["kg", "lbs"])
    log_set.add_argument("--rpe", type=float)

    return parser.parse_args(argv)


def build_completion_client(config):
    api_key = get_api_key(config)
    if not api_key:
        print(f"Error: {config['completion']['api_key_env']} not set. Add it to your .env file.")
        sys.exit(1)
    return CompletionClient(api_key, config)


def open_store(config):
    store = ProgramStore(config["storage"]["db_path"])
    store.init_schema()
    return store


def cmd_generate(args, config, store):
    with open(args.intake, "r") as f:
        intake = json.load(f)
    user = intake.get("user", {})
    user_id = str(user.get("id") or user.get("name") or "default")
    sink = store.raw_response_sink(user_id) if config["storage"].get("save_raw_responses") else None

    result = generate_training_program(
        build_completion_client(config),
        user,
        intake.get("onboarding", {}),
        has_paid_access=not args.trial,
        guideline_source=GuidelineLibrary(config["guidelines"]["file"]),
        config=config,
        response_sink=sink,
    )
    if not result["success"]:
        print(f"Generation failed after {result['attempts']} attempt(s): {result['error']}")
        return 1

    program_id = store.save_program(user_id, result["program"], result["metadata"])
    print(f"✓ Program {program_id} saved ({result['tier']} tier, {result['attempts']} attempt(s))")
    print(json.dumps(result["program"], indent=2))
    return 0


def cmd_adapt_week(args, config, store):
    record = store.get_active_program(args.user_id)
    if not record:
        print(f"No active program for {args.user_id}.")
        return 1

    engine = AdaptationEngine(build_completion_client(config), config)
    result = engine.adapt_next_week(
        record["program"],
        args.feedback,
        args.current_week,
        recent_history=store.get_recent_sets(args.user_id),
    )
    if not result["success"]:
        print(f"Adaptation rejected: {result['error']}")
        for violation in result["violations"]:
            print(f"  - {violation['path']}: {violation['message']}")
        return 1

    store.update_program(record["id"], result["program"])
    print(f"✓ Week {result['week'].get('weekNumber')} adapted")
    return 0


def cmd_adapt_day(args, config, store):
    record = store.get_active_program(args.user_id)
    if not record:
        print(f"No active program for {args.user_id}.")
        return 1

    location = None
    for position, (p_index, w_index, week) in enumerate(iter_weeks(record["program"])):
        if position == args.week - 1:
            location = (p_index, w_index, week)
            break
    if location is None:
        print(f"Week {args.week} not found.")
        return 1
    p_index, w_index, week = location

    days = week.get("days") or []
    d_index = next((i for i, d in enumerate(days) if d.get("dayOfWeek") == args.day), None)
    if d_index is None:
        print(f"Day {args.day} not found in week {args.week}.")
        return 1

    engine = AdaptationEngine(build_completion_client(config), config)
    result = engine.adapt_daily_workout(days[d_index], args.sleep, args.energy)
    if not result["success"]:
        print(f"Adaptation rejected ({result['strategy']}): {result['error']}")
        return 1

    program = record["program"]
    program["phases"][p_index]["weeks"][w_index]["days"][d_index] = result["workout"]
    store.update_program(record["id"], program)
    print(f"✓ Day {args.day} adapted with {result['strategy']}")
    print(json.dumps(result["workout"], indent=2))
    return 0


def cmd_log_set(args, config, store):
    weight_kg = to_kg(args.weight, args.unit)
    history = store.get_exercise_history(args.user_id, args.exercise)
    pb = detect_personal_record(args.exercise, weight_kg, args.reps, history)
    record = store.get_active_program(args.user_id)
    store.log_set(
        args.user_id,
        args.exercise,
        weight_kg,
        args.reps,
        rpe=args.rpe,
        program_id=record["id"] if record else None,
        pb=pb,
    )
    if pb["is_pb"]:
        print(f"🏆 New personal record ({pb['pb_type']}) on {args.exercise}!")
    print(f"✓ Logged {args.exercise}: {weight_kg:g} kg x {args.reps} (e1RM {pb['estimated_1rm']:g} kg)")
    return 0


COMMANDS = {
    "generate": cmd_generate,
    "adapt-week": cmd_adapt_week,
    "adapt-day": cmd_adapt_day,
    "log-set": cmd_log_set,
}


def main(argv=None):
    args = parse_args(argv)
    load_dotenv()
    config = load_config(args.config)

    logging.basicConfig(
        level=getattr(logging, str(config["logging"].get("level", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = open_store(config)
    try:
        return COMMANDS[args.command](args, config, store)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
