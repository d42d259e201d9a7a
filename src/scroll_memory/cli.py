"""CLI for inspecting and maintaining a vault's scroll position database."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from .config import DEFAULT_SETTINGS_FILE, ScrollMemoryConfig, load_settings, save_settings
from .logging_utils import configure_logging
from .state import StateCache
from .store import LocalStorageAdapter, ScrollStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scroll-memory")
    parser.add_argument(
        "--vault",
        type=Path,
        default=Path("."),
        help="Vault root that document paths are relative to (default: current directory).",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help=f"Settings file (default: <vault>/{DEFAULT_SETTINGS_FILE.as_posix()}).",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING).")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Print stored scroll positions as JSON.")

    forget = sub.add_parser("forget", help="Remove stored positions for the given documents.")
    forget.add_argument("paths", nargs="+", help="Vault-relative document paths.")

    prune = sub.add_parser("prune", help="Drop positions of documents that no longer exist.")
    prune.add_argument("--apply", action="store_true", help="Actually write changes (default: dry-run).")

    config = sub.add_parser("config", help="Show settings, updating any that are given.")
    config.add_argument("--db-file-name", default=None, help="Database file, relative to the vault.")
    config.add_argument(
        "--delay-after-file-opening",
        type=int,
        default=None,
        help="Milliseconds to wait before restoring a position (0-300).",
    )
    config.add_argument(
        "--save-timer",
        type=int,
        default=None,
        help="Milliseconds between database flushes (at least 5000).",
    )
    return parser


def _settings_path(args: argparse.Namespace) -> Path:
    if args.settings is not None:
        return Path(args.settings)
    return Path(args.vault) / DEFAULT_SETTINGS_FILE


def _open_store(args: argparse.Namespace) -> tuple[ScrollStore, StateCache]:
    cfg = load_settings(_settings_path(args))
    store = ScrollStore(LocalStorageAdapter(Path(args.vault)), cfg.db_file_name)
    return store, store.load_cache()


def _save(store: ScrollStore, cache: StateCache) -> None:
    if cache.is_dirty():
        store.write(cache.serialize())


def find_missing_documents(vault: Path, cache: StateCache) -> list[str]:
    return sorted(path for path in cache.entries if not (vault / path).exists())


def cmd_show(args: argparse.Namespace) -> int:
    _, cache = _open_store(args)
    payload = {path: state.to_json() for path, state in cache.entries.items()}
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def cmd_forget(args: argparse.Namespace) -> int:
    store, cache = _open_store(args)
    missing = 0
    for path in args.paths:
        if not cache.delete(path):
            logger.warning(f"No stored position for {path}")
            missing += 1
    _save(store, cache)
    print(f"Forgot {len(args.paths) - missing} position(s).")
    return 0


def cmd_prune(args: argparse.Namespace) -> int:
    store, cache = _open_store(args)
    stale = find_missing_documents(Path(args.vault), cache)
    for path in stale:
        print(path)
        cache.delete(path)
    if args.apply:
        _save(store, cache)
        print(f"Removed {len(stale)} stale position(s).")
    else:
        print(f"Would remove {len(stale)} stale position(s) (dry-run; pass --apply).")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    path = _settings_path(args)
    cfg = load_settings(path)
    overrides = {
        "dbFileName": args.db_file_name,
        "delayAfterFileOpening": args.delay_after_file_opening,
        "saveTimer": args.save_timer,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        cfg = ScrollMemoryConfig.model_validate({**cfg.to_json(), **overrides})
        save_settings(path, cfg)
    print(json.dumps(cfg.to_json(), ensure_ascii=False, indent=2))
    return 0


COMMANDS = {
    "show": cmd_show,
    "forget": cmd_forget,
    "prune": cmd_prune,
    "config": cmd_config,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=str(args.log_level))
    try:
        return COMMANDS[args.command](args)
    except OSError as e:
        logger.error(str(e))
        return 1
    except ValidationError as e:
        logger.error(f"Invalid settings: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
