import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version

from branch_reviewer.errors import ReviewerError
from branch_reviewer.git import get_changes
from branch_reviewer.llm import review
from branch_reviewer.output import render

logger = logging.getLogger(__name__)


def _version() -> str:
    try:
        return version("branch-reviewer")
    except PackageNotFoundError:
        return "unknown"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="branch-reviewer",
        description="AI-powered code review of the current branch.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show progress on stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")

    review_parser = subparsers.add_parser("review", help="Review code changes.")
    review_parser.add_argument(
        "-p", "--prompt",
        help="Custom system prompt for the AI (replaces the default).",
    )
    review_parser.add_argument(
        "--against",
        help="Git revision to diff against (instead of using merge-base).",
    )

    show_parser = subparsers.add_parser("show-diff", help="Show the diff that would be reviewed.")
    show_parser.add_argument(
        "--against",
        help="Git revision to diff against (instead of using merge-base).",
    )

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "review"
        args.prompt = None
        args.against = None
    return args


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def review_code(prompt: str | None = None, against: str | None = None) -> None:
    logger.info("Fetching changes against default branch...")
    changes = get_changes(against)

    logger.info("Sending changes to AI for review...")
    result, cost = review(changes, prompt=prompt)

    render(result, cost)


def show_diff(against: str | None = None) -> None:
    sys.stdout.write(get_changes(against))


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    _configure_logging(args.verbose)

    try:
        if args.command == "show-diff":
            show_diff(args.against)
        else:
            review_code(args.prompt, args.against)
    except ReviewerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
