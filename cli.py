"""
vc-msg command-line shell.

    vc-msg show FILE LINE          commit that last touched the line
    vc-msg FILE LINE               same as ``show``
    vc-msg commit PATH [LINE]      full commit with diff
    vc-msg copy FILE LINE          print (and optionally copy) id/summary/message
    vc-msg blame FILE              whole-file blame
    vc-msg log FILE                file history
    vc-msg detect PATH             which VCS manages PATH

Output goes to stdout, diagnostics to stderr; the exit code reflects the
error category (see ``errors``).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

import config
import detect
import formatter
import logging_config
import plugins
import runner
import validation as val
from errors import CommandError, ValidationError, VcMsgError, format_error

__version__ = "0.1.0"

logger = logging_config.get_cli_logger()

COMMANDS = ("show", "commit", "copy", "blame", "log", "detect")


def _command_logger(name: str, **params) -> logging_config.ToolLogger:
    # Failures are reported by main() as a single stderr line
    return logging_config.ToolLogger(name, failure_level=logging.INFO, **params)


def _emit(text: str) -> None:
    if text:
        print(text)


def cmd_show(args: argparse.Namespace) -> int:
    with _command_logger("show", file=args.file, line=args.line, revision=args.revision):
        record = plugins.show_line(args.file, args.line, args.revision, args.vcs)
    if args.json:
        _emit(formatter.to_json(record))
        return 0
    _emit(formatter.format_commit(record, template=args.template))
    if args.hint:
        _emit("")
        _emit(formatter.format_actions(record, args.file))
    return 0


def cmd_commit(args: argparse.Namespace) -> int:
    with _command_logger("commit", path=args.path, line=args.line, commit_id=args.id):
        record = plugins.show_commit(args.path, args.id, args.line, args.revision, args.vcs)
    if args.json:
        _emit(formatter.to_json(record))
    elif args.template:
        _emit(formatter.format_commit(record, template=args.template))
    else:
        _emit(formatter.format_detail(record))
    return 0


def _copy_to_clipboard(text: str) -> None:
    argv = config.clipboard_argv()
    if not argv:
        raise ValidationError("No clipboard command configured; set VC_MSG_CLIPBOARD_COMMAND")
    res = runner.run(argv, input_text=text)
    if res.code != 0:
        raise CommandError(
            f"Clipboard command failed: {res.stderr.strip() or res.code}",
            {"command": argv, "exit_code": res.code},
        )


def cmd_copy(args: argparse.Namespace) -> int:
    with _command_logger("copy", file=args.file, line=args.line, field=args.field):
        record = plugins.show_line(args.file, args.line, args.revision, args.vcs)
        text = plugins.copy_text(record, args.field)
        if args.clipboard:
            _copy_to_clipboard(text)
    if args.json:
        _emit(formatter.to_json({"field": args.field, "text": text}))
    else:
        _emit(text)
    return 0


def cmd_blame(args: argparse.Namespace) -> int:
    with _command_logger("blame", file=args.file, revision=args.revision):
        kind, text = plugins.blame(args.file, args.revision, args.vcs)
    if args.json:
        _emit(formatter.to_json({"file": args.file, "vcs": kind, "blame": text}))
    else:
        _emit(text.rstrip("\n"))
    return 0


def cmd_log(args: argparse.Namespace) -> int:
    with _command_logger("log", file=args.file, max_count=args.max_count) as log:
        entries = plugins.log(args.file, args.max_count, args.revision, args.vcs)
        log.set_result_count(len(entries))
    if args.json:
        _emit(formatter.to_json(entries))
    elif args.template:
        _emit("\n".join(formatter.format_commit(e, template=args.template) for e in entries))
    else:
        _emit(formatter.format_log(entries))
    return 0


def cmd_detect(args: argparse.Namespace) -> int:
    path = val.validate_path(args.path)
    vcs = val.validate_vcs_kind(args.vcs)
    found = detect.require_vcs(path, vcs)
    if args.json:
        _emit(formatter.to_json({"path": str(path), "vcs": found.kind, "root": str(found.root)}))
    else:
        _emit(f"{found.kind} {found.root}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--vcs", choices=val.VCS_KINDS, help="skip detection and use this VCS")
    common.add_argument("--json", action="store_true", help="machine-readable output")
    common.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR (default from VC_MSG_LOG_LEVEL)")

    parser = argparse.ArgumentParser(
        prog="vc-msg",
        description="Show the commit that last touched a line of a file.",
    )
    parser.add_argument("--version", action="version", version=f"vc-msg {__version__}")
    sub = parser.add_subparsers(dest="cmd")

    show = sub.add_parser("show", parents=[common], help="commit that last touched a line")
    show.add_argument("file")
    show.add_argument("line", type=int)
    show.add_argument("-r", "--revision", help="blame the file as of this revision")
    show.add_argument("--template", help="str.format template over the commit fields")
    show.add_argument("--hint", action="store_true", help="list follow-up commands")
    show.set_defaults(func=cmd_show)

    commit = sub.add_parser("commit", parents=[common], help="full commit with diff")
    commit.add_argument("path")
    commit.add_argument("line", type=int, nargs="?")
    commit.add_argument("--id", help="commit id; otherwise taken from LINE")
    commit.add_argument("-r", "--revision")
    commit.add_argument("--template")
    commit.set_defaults(func=cmd_commit)

    copy = sub.add_parser("copy", parents=[common], help="print or copy id, summary or message")
    copy.add_argument("file")
    copy.add_argument("line", type=int)
    copy.add_argument("-r", "--revision")
    copy.add_argument("--field", choices=plugins.COPY_FIELDS, default="id")
    copy.add_argument("--clipboard", action="store_true", help="pipe to VC_MSG_CLIPBOARD_COMMAND")
    copy.set_defaults(func=cmd_copy)

    blame = sub.add_parser("blame", parents=[common], help="blame the whole file")
    blame.add_argument("file")
    blame.add_argument("-r", "--revision")
    blame.set_defaults(func=cmd_blame)

    log = sub.add_parser("log", parents=[common], help="history of a file")
    log.add_argument("file")
    log.add_argument("-n", "--max-count", type=int, default=None)
    log.add_argument("-r", "--revision")
    log.add_argument("--template")
    log.set_defaults(func=cmd_log)

    detect_cmd = sub.add_parser("detect", parents=[common], help="which VCS manages a path")
    detect_cmd.add_argument("path", nargs="?", default=".")
    detect_cmd.set_defaults(func=cmd_detect)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    # `vc-msg FILE LINE` is shorthand for `vc-msg show FILE LINE`
    if argv and not argv[0].startswith("-") and argv[0] not in COMMANDS:
        argv.insert(0, "show")

    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    logging_config.setup_logging(level=args.log_level or logging_config.LOG_LEVEL, stream=sys.stderr, force=True)

    try:
        return args.func(args)
    except VcMsgError as exc:
        if args.json:
            print(formatter.to_json(exc.to_dict()))
        else:
            print(f"vc-msg: {exc.message}", file=sys.stderr)
        return exc.exit_code
    except Exception as exc:
        logger.debug("Unexpected error", exc_info=True)
        if args.json:
            print(formatter.to_json(format_error(exc)))
        else:
            print(f"vc-msg: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
