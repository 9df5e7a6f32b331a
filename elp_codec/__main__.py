"""CLI entry point: ``python -m elp_codec {parse,reply,encode} ...``."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import structlog


def _configure_logging(level: str, fmt: str) -> None:
    """Set up structlog with console or JSON rendering."""
    import logging

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stderr,
    )

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="elp_codec",
        description="Parse and encode esthesis Line Protocol (ELP) messages",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="Parse an ELP file to JSON lines")
    p_parse.add_argument("path", help="ELP file, one telemetry line per row")
    p_parse.add_argument(
        "--keep-comments",
        action="store_true",
        default=False,
        help="Report '#' lines as rejected instead of skipping them",
    )

    p_reply = sub.add_parser("reply", help="Decode a command reply line")
    p_reply.add_argument("body", help="Reply line: correlationId flag payload")
    p_reply.add_argument("--hardware-id", required=True)
    p_reply.add_argument("--topic", required=True)
    p_reply.add_argument(
        "--app-name",
        default=None,
        help="Recorded as seen_by (default: ELP_APP_NAME setting)",
    )

    p_encode = sub.add_parser("encode", help="Encode a command request line")
    p_encode.add_argument("id")
    p_encode.add_argument("command_type", help="Wire letter, e.g. 'e'")
    p_encode.add_argument("execution_type", help="Wire letter, 'a' or 's'")
    p_encode.add_argument("cmd", nargs="?", default=None, metavar="COMMAND")
    p_encode.add_argument("arguments", nargs="?", default=None)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    # Load settings from env / .env file first, then override with CLI flags.
    from elp_codec.config import CodecSettings

    settings = CodecSettings()
    if getattr(args, "keep_comments", False):
        settings.skip_comments = False

    _configure_logging(
        settings.log_level, "json" if settings.is_json_logging else "console"
    )
    logger = structlog.get_logger("elp_codec")

    from elp_codec.errors import ELPError

    if args.command == "parse":
        from elp_codec.ingest import parse_file

        report = parse_file(
            args.path,
            skip_comments=settings.skip_comments,
            skip_blank=settings.skip_blank_lines,
        )
        for record in report.records:
            print(record.model_dump_json())
        return 1 if report.failures else 0

    if args.command == "reply":
        from elp_codec.commands import decode_reply

        try:
            reply = decode_reply(
                args.body,
                args.hardware_id,
                args.app_name or settings.app_name,
                args.topic,
            )
        except ELPError as exc:
            logger.error("elp_reply_rejected", reason=exc.message)
            return 1
        print(reply.model_dump_json())
        return 0

    from pydantic import ValidationError

    from elp_codec.commands import encode_request
    from elp_codec.schemas import CommandRequestRecord

    try:
        request = CommandRequestRecord(
            id=args.id,
            command_type=args.command_type,
            execution_type=args.execution_type,
            command=args.cmd,
            arguments=args.arguments,
        )
    except ValidationError as exc:
        logger.error("elp_request_invalid", errors=exc.errors())
        return 2
    print(encode_request(request))
    return 0


if __name__ == "__main__":
    sys.exit(main())
