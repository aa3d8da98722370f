#!/usr/bin/env python3
"""CLI entrypoint for the assessment report parser."""
from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Iterable
from dataclasses import replace
from pathlib import Path
from typing import Any

from assessment_reports.report_parser import config, loader, normalize, parser, renderer

DEFAULT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_TARGET = DEFAULT_ROOT / "assessment_reports" / "reports"
DEFAULT_INDEX = DEFAULT_ROOT / "assessment_reports" / "_index"


class ReportPaths:
    def __init__(self, target: Path, index_dir: Path | None = None) -> None:
        self.target = target
        self.index_dir = (index_dir or DEFAULT_INDEX).resolve()
        self.extracted_path = self.index_dir / "extracted.jsonl"
        self.scan_report_path = self.index_dir / "scan_report.json"
        self.summary_path = self.index_dir / "SUMMARY.md"


logger = logging.getLogger("assessment_reports.report_parser.cli")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def resolve_target(target: str | None) -> Path:
    resolved = Path(target).expanduser().resolve() if target else DEFAULT_TARGET
    if not resolved.exists():
        raise SystemExit(f"Target directory not found: {resolved}")
    return resolved


def resolve_index_dir(index_dir: str | None) -> Path | None:
    return Path(index_dir).expanduser() if index_dir else None


def build_settings(args: argparse.Namespace) -> config.ParserSettings:
    settings = config.load_settings()
    max_chars = getattr(args, "max_chars", None)
    if max_chars is not None:
        settings = replace(settings, max_input_chars=config.resolve_max_chars(max_chars))
    return settings


def parse_name_list(value: str | None) -> list[str] | None:
    if not value:
        return None
    parts = [entry.strip() for entry in value.split(",") if entry.strip()]
    return parts or None


def command_parse(args: argparse.Namespace) -> None:
    path = Path(args.file).expanduser()
    if not path.is_file():
        raise SystemExit(f"Report file not found: {path}")
    try:
        text = loader.load_report_text(path)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    record = parser.parse_report(
        text,
        parse_name_list(args.documents),
        args.student_name,
        args.author,
        settings=build_settings(args),
    )
    payload = json.dumps(record.to_dict(), ensure_ascii=False, indent=2)
    if args.output:
        output_path = Path(args.output).expanduser()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(payload + "\n", encoding="utf-8")
        logger.info("Record written to %s", output_path)
    else:
        print(payload)


def command_scan(args: argparse.Namespace) -> None:
    target = resolve_target(args.target)
    paths = ReportPaths(target, resolve_index_dir(args.index_dir))
    logger.info("Scanning %s", target)
    paths.index_dir.mkdir(parents=True, exist_ok=True)
    reports, files = loader.scan_directory(target, target, settings=build_settings(args))
    timestamp = normalize.now_iso()
    write_jsonl(paths.extracted_path, [report.to_dict() for report in reports])
    write_scan_report(paths, files, timestamp)
    logger.info("Parsed %d reports from %d files", len(reports), len(files))


def command_render(args: argparse.Namespace) -> None:
    paths = ReportPaths(DEFAULT_TARGET, resolve_index_dir(args.index_dir))
    if not paths.extracted_path.exists():
        raise SystemExit("No extraction output found. Run 'scan' first.")
    reports = list(read_jsonl(paths.extracted_path))
    content = renderer.render_summary(reports, paths.summary_path)
    logger.info("Summary written to %s (%d characters)", paths.summary_path, len(content))


def write_jsonl(path: Path, items: Iterable[dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        for item in items:
            fh.write(json.dumps(item, ensure_ascii=False))
            fh.write("\n")


def read_jsonl(path: Path) -> Iterable[dict[str, Any]]:
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            if line.strip():
                yield json.loads(line)


def write_scan_report(
    paths: ReportPaths, files: dict[str, loader.FileScanResult], timestamp: str
) -> None:
    report = {
        "timestamp": timestamp,
        "target": str(paths.target),
        "files": {file: data.to_dict() for file, data in files.items()},
        "counts": {
            "files": len(files),
            "parsed": sum(1 for result in files.values() if result.status == "ok"),
            "errors": sum(1 for result in files.values() if result.status == "error"),
        },
    }
    paths.scan_report_path.parent.mkdir(parents=True, exist_ok=True)
    with paths.scan_report_path.open("w", encoding="utf-8") as fh:
        json.dump(report, fh, indent=2)


def build_parser() -> argparse.ArgumentParser:
    parser_obj = argparse.ArgumentParser(description="Parse assessment reports")
    parser_obj.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser_obj.add_argument(
        "--max-chars",
        type=int,
        help=f"Maximum input characters per report (overrides {config.MAX_CHARS_ENV})",
    )
    subparsers = parser_obj.add_subparsers(dest="command")

    parse_parser = subparsers.add_parser("parse", help="Parse a single report file")
    parse_parser.add_argument("file", help="Report file (.md, .txt, .html, .docx)")
    parse_parser.add_argument("--documents", help="Comma-separated reviewed document names")
    parse_parser.add_argument("--student-name", help="Student name override")
    parse_parser.add_argument("--author", help="Report author override")
    parse_parser.add_argument("--output", help="Write the record JSON to this path")
    parse_parser.set_defaults(func=command_parse)

    scan_parser = subparsers.add_parser("scan", help="Parse every report in a directory")
    scan_parser.add_argument("--target", help="Directory holding report files")
    scan_parser.add_argument("--index-dir", help="Directory for scan output")
    scan_parser.set_defaults(func=command_scan)

    render_parser = subparsers.add_parser("render", help="Render Markdown summary")
    render_parser.add_argument("--index-dir", help="Directory holding scan output")
    render_parser.set_defaults(func=command_render)

    return parser_obj


def main(argv: list[str] | None = None) -> None:
    parser_obj = build_parser()
    args = parser_obj.parse_args(argv)
    if not getattr(args, "command", None):
        parser_obj.print_help()
        return
    configure_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
