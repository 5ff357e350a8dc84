import argparse
import json
from pathlib import Path

from pydantic import ValidationError

from . import __version__
from .config import Settings
from .database import create_db_engine, get_session_factory, init_database
from .env import load_env
from .errors import JobStoreError
from .logger import get_logger
from .models import JobRequest, new_job_id
from .store import JobStore


def open_store(args: argparse.Namespace) -> JobStore:
    settings = Settings.from_env()
    database_url = args.db or settings.database_url
    engine = create_db_engine(
        database_url,
        echo=settings.echo_sql,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
    )
    init_database(engine)
    # stdout carries command output; logs go to file only
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir, enable_console=False)
    return JobStore(get_session_factory(engine), logger=logger)


def print_response(store: JobStore, record) -> None:
    print(store.to_response(record).model_dump_json(by_alias=True, indent=2))


def print_responses(store: JobStore, records) -> None:
    payload = [store.to_response(r).model_dump(mode="json", by_alias=True) for r in records]
    print(json.dumps(payload, indent=2))


def cmd_init_db(args: argparse.Namespace) -> None:
    open_store(args)
    print("Database ready.")


def cmd_create(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")

    try:
        request = JobRequest.model_validate_json(input_path.read_text(encoding="utf-8"))
    except ValidationError as e:
        print("Invalid request:")
        for err in e.errors():
            loc = ".".join(str(p) for p in err["loc"])
            print(f" - {loc}: {err['msg']}")
        raise SystemExit(2)

    store = open_store(args)
    job_id = args.id or new_job_id(request.job_name)
    record = store.create(request, job_id)
    print_response(store, record)


def cmd_get(args: argparse.Namespace) -> None:
    store = open_store(args)
    record = store.get(args.job_id, include_deleted=args.include_deleted)
    print_response(store, record)


def cmd_list(args: argparse.Namespace) -> None:
    store = open_store(args)
    print_responses(store, store.list_jobs(namespace=args.namespace or ""))


def cmd_active(args: argparse.Namespace) -> None:
    store = open_store(args)
    print_responses(store, store.list_active())


def cmd_update_status(args: argparse.Namespace) -> None:
    store = open_store(args)
    store.update_status(args.job_id, args.status, args.message)
    print(f"Status of {args.job_id} set to {args.status}")


def cmd_delete(args: argparse.Namespace) -> None:
    store = open_store(args)
    store.delete(args.job_id)
    print(f"Deleted {args.job_id}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trainjobs", description="Training job store CLI")
    parser.add_argument("--version", action="store_true", help="Show version")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--db", help="Database URL (default: TRAINJOBS_DATABASE_URL or sqlite:///data/trainjobs.db)")

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init-db", parents=[common], help="Create database tables")
    ini.set_defaults(func=cmd_init_db)

    cre = subparsers.add_parser("create", parents=[common], help="Store a training job request JSON")
    cre.add_argument("--input", required=True, help="Path to request JSON")
    cre.add_argument("--id", help="Job id (default: <jobName>-<8 hex chars>)")
    cre.set_defaults(func=cmd_create)

    get = subparsers.add_parser("get", parents=[common], help="Show one job")
    get.add_argument("job_id", help="Job id")
    get.add_argument("--include-deleted", action="store_true", help="Also show a deleted job")
    get.set_defaults(func=cmd_get)

    lst = subparsers.add_parser("list", parents=[common], help="List jobs, newest first")
    lst.add_argument("--namespace", help="Only jobs in this namespace")
    lst.set_defaults(func=cmd_list)

    act = subparsers.add_parser("active", parents=[common], help="List jobs not yet Succeeded or Failed")
    act.set_defaults(func=cmd_active)

    upd = subparsers.add_parser("update-status", parents=[common], help="Set a job's status and message")
    upd.add_argument("job_id", help="Job id")
    upd.add_argument("--status", required=True, help="New status, e.g. Running")
    upd.add_argument("--message", default="", help="Status detail")
    upd.set_defaults(func=cmd_update_status)

    dlt = subparsers.add_parser("delete", parents=[common], help="Soft-delete a job")
    dlt.add_argument("job_id", help="Job id")
    dlt.set_defaults(func=cmd_delete)

    return parser


def main(argv=None):
    # Load .env if present (TRAINJOBS_DATABASE_URL, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.func(args)
    except JobStoreError as e:
        raise SystemExit(f"Error: {e}")


if __name__ == "__main__":
    main()
