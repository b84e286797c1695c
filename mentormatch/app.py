import argparse
import json
from pathlib import Path

from . import __version__
from .config import build_store, load_settings
from .logger import get_logger
from .match_result import MatchResult
from .matching import find_matches, score_one
from .profiles import MenteeProfile, MentorProfile
from .schema import validate_profile
from .service import (
    InvalidTransition,
    ingest_profile,
    load_mentee,
    run_matching,
    update_match_status,
)
from .store import StoreError


def _read_json(path_str: str):
    input_path = Path(path_str)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Invalid JSON in {input_path}: {e}")


def _store(args: argparse.Namespace):
    try:
        settings = load_settings(db_path=Path(args.db) if getattr(args, "db", None) else None)
        return build_store(settings)
    except ValueError as e:
        raise SystemExit(str(e))


def _print_match(rank: int, match: MatchResult) -> None:
    print(f"{rank}. {match.mentor.display_name} ({match.mentor_id}) score={match.score}")
    factors = ", ".join(f"{k}={v:g}" for k, v in match.factors.to_dict().items())
    print(f"   factors: {factors}")
    if match.bonuses:
        bonuses = ", ".join(f"{k}=+{v}" for k, v in match.bonuses.items())
        print(f"   bonuses: {bonuses}")


def cmd_validate(args: argparse.Namespace) -> None:
    data = _read_json(args.input)
    errors = validate_profile(args.role, data)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def cmd_import_mentors(args: argparse.Namespace) -> None:
    data = _read_json(args.input)
    if isinstance(data, dict):
        data = [data]
    store = _store(args)
    saved = rejected = 0
    for record in data:
        try:
            outcome = ingest_profile(record, "mentor", store)
        except StoreError as e:
            raise SystemExit(f"Store error: {e}")
        if outcome["status"] == "validation_error":
            rejected += 1
            name = record.get("first_name") or record.get("firstName") or record.get("id") or "?"
            print(f"[validation_error] {name} - {outcome['errors']}")
            continue
        saved += 1
        print(f"[saved] {outcome['id']}")
    print(f"Done. saved={saved} rejected={rejected}")


def cmd_import_mentee(args: argparse.Namespace) -> None:
    data = _read_json(args.input)
    store = _store(args)
    try:
        outcome = ingest_profile(data, "mentee", store)
    except StoreError as e:
        raise SystemExit(f"Store error: {e}")
    if outcome["status"] == "validation_error":
        print("Invalid:")
        for e in outcome["errors"]:
            print(f" - {e}")
        raise SystemExit(2)
    print(f"Mentee: {outcome['id']}")
    print(f"Status: {outcome['status']}")


def cmd_score(args: argparse.Namespace) -> None:
    mentee = MenteeProfile.from_record(_read_json(args.mentee))
    mentor = MentorProfile.from_record(_read_json(args.mentor))
    result = score_one(mentee, mentor)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return
    _print_match(1, result)


def cmd_match(args: argparse.Namespace) -> None:
    if args.mentors:
        if not args.mentee:
            raise SystemExit("Provide --mentee when scoring against --mentors.")
        mentee = MenteeProfile.from_record(_read_json(args.mentee))
        pool = _read_json(args.mentors)
        mentors = [MentorProfile.from_record(r) for r in (pool if isinstance(pool, list) else [pool])]
        matches = find_matches(mentee, mentors)
        persist_error = None
    else:
        store = _store(args)
        try:
            if args.mentee_id:
                mentee = load_mentee(store, args.mentee_id)
            elif args.mentee:
                mentee = MenteeProfile.from_record(_read_json(args.mentee))
            else:
                raise SystemExit("Provide --mentee or --mentee-id.")
            run = run_matching(mentee, store, persist=not args.no_save)
        except (StoreError, ValueError) as e:
            raise SystemExit(str(e))
        matches = run.matches
        persist_error = run.persist_error

    if args.json:
        print(json.dumps([m.to_dict() for m in matches], indent=2))
    elif not matches:
        print("No matches found.")
    else:
        print(f"Top {len(matches)} mentors:")
        for i, match in enumerate(matches, 1):
            _print_match(i, match)

    if persist_error:
        print(f"[warn] matches not saved: {persist_error}")


def cmd_matches(args: argparse.Namespace) -> None:
    store = _store(args)
    try:
        rows = store.list_matches(args.mentee_id)
    except StoreError as e:
        raise SystemExit(str(e))
    if not rows:
        print("No matches stored.")
        return
    print(f"Found {len(rows)} matches for {args.mentee_id}:\n")
    for row in rows:
        print(f"ID: {row.get('id')}")
        print(f"  Mentor: {row.get('mentor_id')}")
        print(f"  Score: {row.get('match_score')}")
        print(f"  Status: {row.get('status')}")
        print()


def cmd_set_status(args: argparse.Namespace) -> None:
    store = _store(args)
    try:
        row = update_match_status(store, args.match_id, args.status)
    except (InvalidTransition, StoreError) as e:
        raise SystemExit(str(e))
    print(f"Match: {row.get('id')}")
    print(f"Status: {row.get('status')}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mentormatch", description="Match pre-med mentees with physician mentors")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    db_help = "SQLite database path (default: $MENTORMATCH_DB or data/mentormatch.db)"

    val = subparsers.add_parser("validate", help="Validate questionnaire answers (JSON)")
    val.add_argument("--role", required=True, choices=["mentee", "mentor"], help="Which questionnaire the answers are from")
    val.add_argument("--input", required=True, help="Path to profile JSON")
    val.set_defaults(func=cmd_validate)

    imp = subparsers.add_parser("import-mentors", help="Validate and store mentor profiles from a JSON list")
    imp.add_argument("--input", required=True, help="Path to JSON list of mentor profiles")
    imp.add_argument("--db", help=db_help)
    imp.set_defaults(func=cmd_import_mentors)

    ime = subparsers.add_parser("import-mentee", help="Validate and store one mentee profile")
    ime.add_argument("--input", required=True, help="Path to mentee profile JSON")
    ime.add_argument("--db", help=db_help)
    ime.set_defaults(func=cmd_import_mentee)

    sco = subparsers.add_parser("score", help="Score one mentee against one mentor and show the breakdown")
    sco.add_argument("--mentee", required=True, help="Path to mentee profile JSON")
    sco.add_argument("--mentor", required=True, help="Path to mentor profile JSON")
    sco.add_argument("--json", action="store_true", help="Print JSON instead of text")
    sco.set_defaults(func=cmd_score)

    mat = subparsers.add_parser("match", help="Find the top mentors for a mentee")
    mat.add_argument("--mentee", help="Path to mentee profile JSON")
    mat.add_argument("--mentee-id", help="Id of a stored mentee")
    mat.add_argument("--mentors", help="Score against mentors in this JSON file instead of the store (never saves)")
    mat.add_argument("--no-save", action="store_true", help="Do not store the resulting matches")
    mat.add_argument("--json", action="store_true", help="Print JSON instead of text")
    mat.add_argument("--db", help=db_help)
    mat.set_defaults(func=cmd_match)

    lst = subparsers.add_parser("matches", help="List stored matches for a mentee")
    lst.add_argument("--mentee-id", required=True, help="Mentee id")
    lst.add_argument("--db", help=db_help)
    lst.set_defaults(func=cmd_matches)

    sts = subparsers.add_parser("set-status", help="Accept or decline a pending match")
    sts.add_argument("--match-id", required=True, help="Match id")
    sts.add_argument("--status", required=True, choices=["accepted", "declined"], help="New status")
    sts.add_argument("--db", help=db_help)
    sts.set_defaults(func=cmd_set_status)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    try:
        settings = load_settings()
    except ValueError as e:
        raise SystemExit(str(e))
    get_logger().configure(
        level=settings.log_level,
        log_dir=settings.log_dir,
        enable_file=settings.log_dir is not None,
    )

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
