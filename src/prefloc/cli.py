"""CLI entry point for prefloc.

Provides JSON subcommands for inspecting saved preferences alongside the
browser TUI.

All prefloc.* imports are lazy (inside functions) so that ``prefloc
--help`` and argument parsing stay fast.

Workflow:
    prefloc [PATH]           # browse PATH (default: cwd)
    prefloc list             # saved rules as JSON
    prefloc match PATH       # the rule that applies to PATH
    prefloc forget PATH      # drop the saved rule for PATH
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path


def _load_config(args: argparse.Namespace):
    """Load configuration or exit with an error."""
    from prefloc.config import ConfigError, load_config

    try:
        return load_config(Path(args.config) if args.config else None)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1)


def _load_saved(config) -> list:
    from prefloc.store import PreferenceFileError, load_rules

    try:
        return load_rules(config.save_path)
    except PreferenceFileError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1)


_COMMANDS = {"browse", "list", "match", "forget"}
_VALUE_OPTIONS = {"--config", "--log-file"}


def _default_to_browse(argv: list[str]) -> list[str]:
    """Treat `prefloc ~/dir` as `prefloc browse ~/dir`."""
    skip = False
    for idx, token in enumerate(argv):
        if skip:
            skip = False
            continue
        if token in _VALUE_OPTIONS:
            skip = True
            continue
        if token.startswith("-"):
            continue
        if token in _COMMANDS:
            return argv
        return argv[:idx] + ["browse"] + argv[idx:]
    return argv


def _json_out(obj) -> None:
    """Print JSON to stdout."""
    json.dump(obj, sys.stdout, indent=2)
    print()


def _setup_logging(log_file: str | None) -> None:
    # The TUI owns the terminal, so debug output only ever goes to a file.
    if not log_file:
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    logger = logging.getLogger("prefloc")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def cmd_browse(args: argparse.Namespace) -> None:
    """Launch the directory browser."""
    config = _load_config(args)

    from prefloc.app import tui_main

    path = getattr(args, "path", None)
    tui_main(os.path.expanduser(path) if path else None, config)


def cmd_list(args: argparse.Namespace) -> None:
    """Print saved rules, most recent first."""
    from prefloc.store import rules_to_payload

    config = _load_config(args)
    rules = _load_saved(config)
    out = {
        "save_path": str(config.save_path),
        "disabled": config.disabled,
        "rules": rules_to_payload(rules),
    }
    if args.predefined:
        from prefloc.store import rule_to_dict

        out["predefined"] = [rule_to_dict(r) for r in config.prefs]
    _json_out(out)


def cmd_match(args: argparse.Namespace) -> None:
    """Print the rule that applies to a path, or null."""
    from prefloc.matcher import match
    from prefloc.store import rule_to_dict

    config = _load_config(args)
    rules = _load_saved(config) + list(config.prefs)
    path = os.path.abspath(os.path.expanduser(args.path))
    rule = match(rules, path)
    if rule is None:
        _json_out({"path": path, "rule": None})
        return
    _json_out({
        "path": path,
        "rule": rule_to_dict(rule),
        "predefined": rule.is_predefined,
    })


def cmd_forget(args: argparse.Namespace) -> None:
    """Remove the saved rule for a path."""
    from prefloc.matcher import remove_saved
    from prefloc.store import StoreError, save_rules

    config = _load_config(args)
    rules = _load_saved(config)
    path = os.path.abspath(os.path.expanduser(args.path))
    if not remove_saved(rules, path):
        _json_out({"path": path, "removed": False})
        return
    try:
        save_rules(rules, config.save_path)
    except StoreError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1)
    _json_out({"path": path, "removed": True})


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="prefloc",
        description=(
            "Remember sort order, line mode and hidden-file visibility per directory.\n\n"
            "With no subcommand, launches the interactive browser.\n"
            "Use subcommands for JSON output suitable for scripts.\n\n"
            "Typical workflow:\n"
            "  prefloc ~/Downloads     # browse, press S to save the view\n"
            "  prefloc list            # list saved rules\n"
            "  prefloc match <path>    # show which rule applies to a path\n"
            "  prefloc forget <path>   # drop the saved rule for a path"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Config file (default: $XDG_CONFIG_HOME/prefloc/config.json)",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write debug logs to this file",
    )

    sub = parser.add_subparsers(dest="command")

    # browse
    p_browse = sub.add_parser(
        "browse",
        help="Browse a directory (default when no subcommand is given)",
    )
    p_browse.add_argument("path", nargs="?", help="Directory to open (default: cwd)")

    # list
    p_list = sub.add_parser(
        "list",
        help="List saved rules as JSON",
        description="Print the rules saved in the preference file, most recent first.",
    )
    p_list.add_argument(
        "--predefined",
        action="store_true",
        help="Also print the rules predefined in the config file",
    )

    # match
    p_match = sub.add_parser(
        "match",
        help="Show the rule that applies to a path",
        description=(
            "Print the first saved or predefined rule whose location matches "
            "the end of PATH, or null if none does."
        ),
    )
    p_match.add_argument("path", help="Directory path to look up")

    # forget
    p_forget = sub.add_parser(
        "forget",
        help="Remove the saved rule for a path",
        description="Delete the saved rule for exactly PATH. Predefined rules are untouched.",
    )
    p_forget.add_argument("path", help="Directory whose saved rule to remove")

    args = parser.parse_args(_default_to_browse(sys.argv[1:]))
    _setup_logging(args.log_file)

    if args.command is None or args.command == "browse":
        cmd_browse(args)
    elif args.command == "list":
        cmd_list(args)
    elif args.command == "match":
        cmd_match(args)
    elif args.command == "forget":
        cmd_forget(args)


if __name__ == "__main__":
    main()
