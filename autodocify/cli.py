"""CLI entrypoints for autodocify commands."""

from __future__ import annotations

import argparse
import base64
import sys
from pathlib import Path
from typing import Dict

from .config import load_config
from .errors import AutoDocifyError, ConfigurationError
from .export.archive import ExportPackager
from .export.remote import RemoteSpacePublisher
from .logging import configure_logging
from .models import DocumentSet, SubmissionForm, UploadedArchive
from .prompting.constants import EXPORT_FILENAMES, SECTIONS, TONES
from .session import DocumentSession


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_source_options(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("source")
    group.add_argument("--url", help="GitHub repository URL to document.")
    group.add_argument("--zip", type=Path, help="Path to a .zip archive of the codebase.")
    group.add_argument("--text-file", type=Path, help="File containing pasted source code.")
    group.add_argument("--ui", help="Free-form UI description or design-tool link.")
    group.add_argument(
        "--ui-only",
        action="store_true",
        help="Document the UI description only; other source options are ignored.",
    )


def _add_out_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--out",
        type=Path,
        default=Path("docs"),
        help="Directory holding the generated markdown files (defaults to ./docs).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autodocify",
        description="Generate README, API docs, user manual and FAQ from code or a UI description.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .autodocify.yml or the directory containing it.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate all four documentation files.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_source_options(generate_parser)
    _add_out_option(generate_parser)
    generate_parser.add_argument(
        "--archive",
        type=Path,
        help="Also write a zip archive of the generated files to this path.",
    )

    regenerate_parser = subparsers.add_parser(
        "regenerate",
        help="Rewrite one documentation file in a different tone.",
    )
    _add_verbose_option(regenerate_parser, suppress_default=True)
    _add_source_options(regenerate_parser)
    _add_out_option(regenerate_parser)
    regenerate_parser.add_argument("--section", required=True, choices=SECTIONS)
    regenerate_parser.add_argument("--tone", required=True, choices=TONES)
    regenerate_parser.add_argument("--prompt", help="Extra instructions for the rewrite.")

    export_parser = subparsers.add_parser(
        "export",
        help="Package or push the markdown files found in a directory.",
    )
    _add_verbose_option(export_parser, suppress_default=True)
    export_parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=Path("docs"),
        help="Directory holding the markdown files (defaults to ./docs).",
    )
    target = export_parser.add_mutually_exclusive_group()
    target.add_argument("--archive", type=Path, help="Write the zip archive to this path.")
    target.add_argument(
        "--push",
        action="store_true",
        help="Upsert each file into the configured remote documentation space.",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for autodocify commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        config = load_config(args.config)
    except ConfigurationError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "serve":  # pragma: no cover - integration path
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    try:
        if args.command == "generate":
            _run_generate(args, DocumentSession.from_config(config))
        elif args.command == "regenerate":
            _run_regenerate(args, DocumentSession.from_config(config))
        elif args.command == "export":
            _run_export(args, config)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except OSError as exc:
        parser.exit(1, f"{exc}\n")
    except AutoDocifyError as exc:
        parser.exit(1, f"autodocify {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _run_generate(args: argparse.Namespace, session: DocumentSession) -> None:
    documents = session.generate(_form_from_args(args))
    if documents is None:  # pragma: no cover - single submission per CLI run
        return
    written = _write_documents(args.out, documents)
    print(f"Wrote {len(written)} files to {_relativize(args.out)}")
    if args.archive:
        archive = session.export_archive()
        _write_archive(args.archive, archive.content)
        print(f"Archive written to {_relativize(args.archive)}")


def _run_regenerate(args: argparse.Namespace, session: DocumentSession) -> None:
    # Context is rebuilt from the original source, never from files on disk.
    session.restore(_form_from_args(args), read_documents(args.out))
    content = session.regenerate(args.section, args.tone, args.prompt)
    if content is None:  # pragma: no cover - single submission per CLI run
        return
    target = args.out / EXPORT_FILENAMES[args.section]
    args.out.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    print(f"Regenerated {_relativize(target)} ({args.tone})")


def _run_export(args: argparse.Namespace, config) -> None:
    documents = read_documents(args.path)
    if documents.is_empty():
        raise FileNotFoundError(f"No documentation files found in {args.path}")
    if args.push:
        report = RemoteSpacePublisher.from_config(config.export).push(documents)
        for outcome in report.outcomes:
            suffix = f" ({outcome.error})" if outcome.error else ""
            print(f"{outcome.path}: {outcome.status}{suffix}")
        if not report.success:
            sys.exit(1)
        return
    archive = ExportPackager(config.export.archive_name).pack(documents)
    target = args.archive or Path(archive.file_name)
    _write_archive(target, archive.content)
    print(f"Archive written to {_relativize(target)} ({len(archive.entries)} files)")


def _form_from_args(args: argparse.Namespace) -> SubmissionForm:
    archive = None
    if args.zip is not None and not args.ui_only:
        archive = UploadedArchive(
            filename=args.zip.name,
            content_type="application/zip" if args.zip.suffix.lower() == ".zip" else "application/octet-stream",
            data=args.zip.read_bytes(),
        )
    text = None
    if args.text_file is not None and not args.ui_only:
        text = args.text_file.read_text(encoding="utf-8")
    return SubmissionForm(
        github_url=args.url,
        zip_file=archive,
        codebase_text=text,
        ui_description=args.ui,
        ui_only_mode=bool(args.ui_only),
    )


def _write_documents(directory: Path, documents: DocumentSet) -> list[Path]:
    directory.mkdir(parents=True, exist_ok=True)
    written = []
    for section in documents.present_sections():
        target = directory / EXPORT_FILENAMES[section]
        target.write_text(documents.get(section) or "", encoding="utf-8")
        written.append(target)
    return written


def read_documents(directory: Path) -> DocumentSet:
    """Load the canonical markdown files of a directory into a DocumentSet."""
    sections: Dict[str, str] = {}
    for section, filename in EXPORT_FILENAMES.items():
        path = directory / filename
        if path.is_file():
            sections[section] = path.read_text(encoding="utf-8")
    return DocumentSet.from_mapping(sections)


def _write_archive(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(base64.b64decode(content))


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
