"""CLI entry point: ``osintcafe profile|conversation|image|threats|probe``."""

from __future__ import annotations

# Phase 1: logging before any transitive litellm imports
from osintcafe.logging_config import setup_logging

setup_logging()

import argparse  # noqa: E402
import asyncio  # noqa: E402
import json  # noqa: E402
import mimetypes  # noqa: E402
import sys  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Any  # noqa: E402

from osintcafe import __version__  # noqa: E402
from osintcafe.analysis.diagnostics import run_probes  # noqa: E402
from osintcafe.analysis.factory import build_orchestrator  # noqa: E402
from osintcafe.analysis.outcome import Degraded, Outcome  # noqa: E402
from osintcafe.analysis.schemas import (  # noqa: E402
    AnalysisReport,
    ProfileInput,
)
from osintcafe.config import Settings  # noqa: E402
from osintcafe.logging_config import (  # noqa: E402
    cleanup_third_party_handlers,
)

# Phase 2: Clear litellm's duplicate handlers after all imports
cleanup_third_party_handlers()


def main() -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.version:
        print(f"osintcafe {__version__}")
        return

    handlers = {
        "profile": _run_profile,
        "conversation": _run_conversation,
        "image": _run_image,
        "threats": _run_threats,
        "probe": _run_probe,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return
    handler(args)


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="osintcafe",
        description=(
            "Dating-safety analysis over hosted providers, "
            "with graceful degradation when they fail."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    profile = sub.add_parser("profile", help="Analyze a dating profile")
    profile.add_argument("--name", default=None)
    profile.add_argument("--age", type=int, default=None)
    profile.add_argument("--bio", default=None)
    profile.add_argument("--location", default=None)
    profile.add_argument("--occupation", default=None)
    profile.add_argument(
        "--text",
        default=None,
        help="Free-form profile text",
    )

    conversation = sub.add_parser(
        "conversation",
        help="Analyze a conversation for scam patterns",
    )
    conversation.add_argument(
        "messages",
        nargs="*",
        help="Messages in order (or use --file)",
    )
    conversation.add_argument(
        "--file",
        "-f",
        type=str,
        default=None,
        help="Text file with one message per line",
    )

    image = sub.add_parser("image", help="Analyze a profile photo")
    image.add_argument("path", type=str, help="Path to the image file")
    image.add_argument(
        "--mime-type",
        default=None,
        help="MIME type (default: guessed from the file name)",
    )

    threats = sub.add_parser(
        "threats",
        help="Search web intelligence for scam reports",
    )
    threats.add_argument("query", type=str)

    probe = sub.add_parser("probe", help="Check provider connectivity")
    probe.add_argument(
        "providers",
        nargs="*",
        help="Provider names (default: all)",
    )

    return parser


def _print_outcome[R: AnalysisReport](outcome: Outcome[R]) -> None:
    payload: dict[str, Any] = {
        "degraded": outcome.degraded,
        "report": outcome.report.model_dump(mode="json"),
    }
    if isinstance(outcome, Degraded):
        payload["reason"] = str(outcome.reason)
        payload["detail"] = outcome.detail
    print(json.dumps(payload, indent=2))


def _run_profile(args: argparse.Namespace) -> None:
    profile = ProfileInput(
        name=args.name,
        age=args.age,
        bio=args.bio,
        location=args.location,
        occupation=args.occupation,
        profile_text=args.text,
    )
    if not profile.searchable_text():
        print("Error: no profile fields given", file=sys.stderr)
        sys.exit(1)
    orchestrator, _ = build_orchestrator(Settings())
    _print_outcome(asyncio.run(orchestrator.analyze_profile(profile)))


def _run_conversation(args: argparse.Namespace) -> None:
    messages: list[str] = list(args.messages)
    if args.file:
        path = Path(args.file)
        if not path.exists():
            print(f"Error: {path} does not exist", file=sys.stderr)
            sys.exit(1)
        messages.extend(
            line.strip()
            for line in path.read_text(encoding="utf-8").splitlines()
            if line.strip()
        )
    if not messages:
        print("Error: no messages given", file=sys.stderr)
        sys.exit(1)
    orchestrator, _ = build_orchestrator(Settings())
    _print_outcome(asyncio.run(orchestrator.analyze_conversation(messages)))


def _run_image(args: argparse.Namespace) -> None:
    path = Path(args.path)
    if not path.exists():
        print(f"Error: {path} does not exist", file=sys.stderr)
        sys.exit(1)
    mime_type = (
        args.mime_type
        or mimetypes.guess_type(path.name)[0]
        or "image/jpeg"
    )
    orchestrator, _ = build_orchestrator(Settings())
    _print_outcome(
        asyncio.run(
            orchestrator.analyze_image(path.read_bytes(), mime_type)
        )
    )


def _run_threats(args: argparse.Namespace) -> None:
    orchestrator, _ = build_orchestrator(Settings())
    _print_outcome(asyncio.run(orchestrator.search_threats(args.query)))


def _run_probe(args: argparse.Namespace) -> None:
    _, providers = build_orchestrator(Settings())
    names = args.providers or None
    try:
        results = asyncio.run(run_probes(providers, names))
    except KeyError as exc:
        print(
            f"Error: unknown provider {exc}. "
            f"Valid: {', '.join(providers)}",
            file=sys.stderr,
        )
        sys.exit(1)
    print(
        json.dumps(
            [
                {
                    "name": r.name,
                    "capability": str(r.capability),
                    "ok": r.ok,
                    "message": r.message,
                }
                for r in results
            ],
            indent=2,
        )
    )
    if not all(r.ok for r in results):
        sys.exit(2)


if __name__ == "__main__":
    main()
