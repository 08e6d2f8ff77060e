import argparse
import os
from typing import Optional

from . import __version__
from .cache import build_cache
from .config import Settings, load_settings
from .gateway import JobGateway
from .logger import get_logger
from .models import Job, UserInfo, is_temporary
from .notify import Notice, Notifier
from .store import JobStore


def build_store(settings: Settings) -> JobStore:
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir, enable_console=False)
    gateway = JobGateway(
        base_url=settings.api_url,
        token_provider=lambda: settings.token,
        timeout=settings.timeout,
        logger=logger,
    )
    cache = build_cache(settings.cache_backend, settings.cache_path, logger=logger)
    notifier = Notifier(sink=_print_notice, logger=logger)
    return JobStore(gateway, cache, notifier=notifier, logger=logger)


def _print_notice(notice: Notice) -> None:
    print(f"[{notice.level}] {notice.title}: {notice.message}")


def _user_from_args(args: argparse.Namespace) -> Optional[UserInfo]:
    user_id = args.user_id or os.getenv("JOBBOARD_USER_ID")
    if not user_id:
        return None
    return UserInfo(
        id=user_id,
        name=args.user_name or os.getenv("JOBBOARD_USER_NAME", ""),
        photo_url=args.user_photo or os.getenv("JOBBOARD_USER_PHOTO", ""),
    )


def _exit_on_error(store: JobStore) -> None:
    last = store.notifier.last
    if last is not None and last.is_error:
        raise SystemExit(1)


def _print_job(job: Job, with_comments: bool = False) -> None:
    print(f"ID: {job.id}")
    print(f"  Title: {job.title}")
    print(f"  Category: {job.category}")
    print(f"  Budget: {job.budget:g}")
    print(f"  Status: {job.status.value}")
    print(f"  Owner: {job.user_id}")
    print(f"  Comments: {len(job.comments)}")
    if with_comments:
        print(f"  Description: {job.description}")
        for c in job.comments:
            mark = " (local only)" if is_temporary(c.id) else ""
            print(f"    - {c.user_name or c.user_id}: {c.text} [{c.id}]{mark}")
            for r in c.replies:
                mark = " (local only)" if is_temporary(r.id) else ""
                print(f"        > {r.user_name or r.user_id}: {r.text} [{r.id}]{mark}")
    print()


def cmd_list(store: JobStore, args: argparse.Namespace) -> None:
    user = _user_from_args(args)
    store.refresh_jobs(user)
    if args.mine:
        if user is None:
            raise SystemExit("--mine needs a user. Pass --user-id or set JOBBOARD_USER_ID.")
        jobs = store.user_jobs
    elif args.popular:
        jobs = store.popular_jobs
    elif args.search:
        jobs = store.search(args.search)
    else:
        jobs = store.jobs
    if not jobs:
        print("No jobs found.")
        return
    print(f"Found {len(jobs)} jobs:\n")
    for job in jobs:
        _print_job(job)


def cmd_show(store: JobStore, args: argparse.Namespace) -> None:
    job = store.fetch_job(args.id)
    if job is None:
        raise SystemExit(f"Job not found: {args.id}")
    _print_job(job, with_comments=True)


def cmd_create(store: JobStore, args: argparse.Namespace) -> None:
    fields = {
        "title": args.title,
        "description": args.description,
        "category": args.category,
        "budget": args.budget,
        "status": args.status,
    }
    job = store.create_job(fields, _user_from_args(args))
    _exit_on_error(store)
    _print_job(job)


def cmd_update(store: JobStore, args: argparse.Namespace) -> None:
    fields = {
        k: v for k, v in {
            "title": args.title,
            "description": args.description,
            "category": args.category,
            "budget": args.budget,
            "status": args.status,
        }.items() if v is not None
    }
    if not fields:
        raise SystemExit("Nothing to update. Pass at least one field.")
    store.refresh_jobs(_user_from_args(args))
    job = store.update_job(args.id, fields)
    _exit_on_error(store)
    _print_job(job)


def cmd_delete(store: JobStore, args: argparse.Namespace) -> None:
    store.delete_job(args.id)
    _exit_on_error(store)


def cmd_comment(store: JobStore, args: argparse.Namespace) -> None:
    user = _user_from_args(args)
    store.refresh_jobs(user)
    store.add_comment(args.job, args.text, user)
    _exit_on_error(store)


def cmd_reply(store: JobStore, args: argparse.Namespace) -> None:
    user = _user_from_args(args)
    store.refresh_jobs(user)
    store.add_reply(args.comment, args.job, args.text, user)
    _exit_on_error(store)


def cmd_delete_comment(store: JobStore, args: argparse.Namespace) -> None:
    store.delete_comment(args.id)
    _exit_on_error(store)


def cmd_cache(store: JobStore, args: argparse.Namespace) -> None:
    jobs = store.cache.load()
    if jobs is None:
        print("No cached jobs.")
        return
    print(f"{len(jobs)} cached jobs:\n")
    for job in jobs:
        _print_job(job)


def _add_user_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--user-id", help="Current user id (or set JOBBOARD_USER_ID)")
    p.add_argument("--user-name", help="Display name for new comments (or set JOBBOARD_USER_NAME)")
    p.add_argument("--user-photo", help="Avatar URL for new comments (or set JOBBOARD_USER_PHOTO)")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="jobboard", description="Job board client")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")

    lst = subparsers.add_parser("list", help="List jobs (all, yours, popular or matching a search)")
    lst.add_argument("--mine", action="store_true", help="Only jobs owned by the current user")
    lst.add_argument("--popular", action="store_true", help="Only popular jobs")
    lst.add_argument("--search", help="Case-insensitive text to look for")
    _add_user_args(lst)
    lst.set_defaults(func=cmd_list)

    shw = subparsers.add_parser("show", help="Show a job with its comments and replies")
    shw.add_argument("id", help="Job id")
    shw.set_defaults(func=cmd_show)

    crt = subparsers.add_parser("create", help="Create a job")
    crt.add_argument("--title", required=True)
    crt.add_argument("--description", required=True)
    crt.add_argument("--category", required=True, help="e.g. web, mobile, design, writing, marketing, other")
    crt.add_argument("--budget", type=float, required=True)
    crt.add_argument("--status", default="open", choices=["open", "in progress", "completed"])
    _add_user_args(crt)
    crt.set_defaults(func=cmd_create)

    upd = subparsers.add_parser("update", help="Update fields of a job")
    upd.add_argument("id", help="Job id")
    upd.add_argument("--title")
    upd.add_argument("--description")
    upd.add_argument("--category")
    upd.add_argument("--budget", type=float)
    upd.add_argument("--status", choices=["open", "in progress", "completed"])
    _add_user_args(upd)
    upd.set_defaults(func=cmd_update)

    dlt = subparsers.add_parser("delete", help="Delete a job")
    dlt.add_argument("id", help="Job id")
    dlt.set_defaults(func=cmd_delete)

    cmt = subparsers.add_parser("comment", help="Comment on a job")
    cmt.add_argument("--job", required=True, help="Job id")
    cmt.add_argument("--text", required=True)
    _add_user_args(cmt)
    cmt.set_defaults(func=cmd_comment)

    rpl = subparsers.add_parser("reply", help="Reply to a comment")
    rpl.add_argument("--job", required=True, help="Job id the comment belongs to")
    rpl.add_argument("--comment", required=True, help="Comment id")
    rpl.add_argument("--text", required=True)
    _add_user_args(rpl)
    rpl.set_defaults(func=cmd_reply)

    dcm = subparsers.add_parser("delete-comment", help="Delete a comment")
    dcm.add_argument("id", help="Comment id")
    dcm.set_defaults(func=cmd_delete_comment)

    cch = subparsers.add_parser("cache", help="Print the cached job snapshot")
    cch.set_defaults(func=cmd_cache)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    store = build_store(load_settings())
    try:
        args.func(store, args)
    finally:
        store.cache.close()


if __name__ == "__main__":
    main()
