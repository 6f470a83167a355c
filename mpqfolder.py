"""CLI entry point for mpqfolder — browse archives as read-only folders."""

import argparse
import logging
import os
import shutil
import sys

from archive import ArchiveError
from provider import ArchiveProvider
from server import drain, make_server, resolve
from storage import EntryStream, StorageView

LOG_ENV_VAR = "MPQFOLDER_LOG"


def setup_logging(verbose: bool = False):
    """Log to stderr. DEBUG when verbose or MPQFOLDER_LOG=1, WARNING otherwise."""
    enabled = verbose or os.environ.get(LOG_ENV_VAR, "") not in ("", "0")
    logging.basicConfig(
        level=logging.DEBUG if enabled else logging.WARNING,
        format="[mpqfolder] %(levelname)s %(name)s: %(message)s",
    )


def _segments(path: str) -> list[str]:
    return [p for p in path.replace("\\", "/").split("/") if p]


def open_archive(path: str) -> StorageView:
    """Load path into a fresh provider and return its root view."""
    provider = ArchiveProvider()
    provider.initialize_with_path(path)
    return provider.root()


def cmd_ls(root: StorageView, path: str, out=None):
    out = out or sys.stdout
    node = resolve(root, _segments(path))
    if isinstance(node, EntryStream):
        info = node.stat()
        print(f"{info.size:>12}  {info.display_name}", file=out)
        return
    for info in drain(node):
        if info.is_container:
            print(f"{'':>12}  {info.display_name}/", file=out)
        else:
            print(f"{info.size:>12}  {info.display_name}", file=out)


def cmd_cat(root: StorageView, path: str, out=None):
    out = out or sys.stdout.buffer
    node = resolve(root, _segments(path))
    if not isinstance(node, EntryStream):
        raise ArchiveError(f"{path} is a directory")
    with node:
        shutil.copyfileobj(node, out)


def cmd_stat(root: StorageView, path: str, out=None):
    out = out or sys.stdout
    node = resolve(root, _segments(path))
    info = node.stat()
    kind = "directory" if info.is_container else "file"
    print(f"name: {info.display_name}", file=out)
    print(f"size: {info.size}", file=out)
    print(f"type: {kind}", file=out)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="mpqfolder — browse archives as read-only folders"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("serve", help="Serve an archive over WebDAV")
    p.add_argument("file", help="Archive to mount")
    p.add_argument("-p", "--port", type=int, default=8080, help="Port to listen on")
    p.add_argument("--host", default="localhost", help="Host to bind to")

    p = sub.add_parser("ls", help="List a directory inside an archive")
    p.add_argument("file", help="Archive to open")
    p.add_argument("path", nargs="?", default="", help="Directory inside the archive")

    p = sub.add_parser("cat", help="Write an archive entry to stdout")
    p.add_argument("file", help="Archive to open")
    p.add_argument("path", help="Entry inside the archive")

    p = sub.add_parser("stat", help="Show name, size and kind of a path")
    p.add_argument("file", help="Archive to open")
    p.add_argument("path", nargs="?", default="", help="Path inside the archive")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)

    if not os.path.exists(args.file):
        print(f"Error: {args.file} not found", file=sys.stderr)
        sys.exit(1)

    root = open_archive(args.file)

    if args.command == "serve":
        server = make_server(root, args.host, args.port)
        print(f"Serving {args.file} on http://{args.host}:{args.port}/")
        print("Press Ctrl+C to stop.")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nShutting down.")
            server.shutdown()
        return

    commands = {"ls": cmd_ls, "cat": cmd_cat, "stat": cmd_stat}
    try:
        commands[args.command](root, args.path)
    except ArchiveError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
