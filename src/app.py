from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from src.core.app_logging import configure_logging
from src.core.config import OUTPUT_FORMATS, AppConfig, ConfigStore
from src.core.engine import EvaluationFailure, evaluate
from src.core.input_files import InputFileError, read_text_file
from src.core.render import result_filename, to_html, to_plain_text
from src.core.segments import EvaluationResult


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="text-multi-search",
        description="Apply a list of search/replace rules to a text file in one pass.",
    )
    parser.add_argument("source", type=Path, help="text file to search")
    parser.add_argument("rules", type=Path, help="rule file, one rule per line")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default=None)
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument(
        "--save-dir",
        type=Path,
        default=None,
        help="also write the rewritten text into this directory",
    )
    parser.add_argument("--verbose", action="store_true", help="log debug details")
    return parser


def _format_result(result: EvaluationResult, output_format: str) -> str:
    if output_format == "html":
        return to_html(result.segments)
    if output_format == "segments":
        return "\n".join(
            json.dumps({"kind": segment.kind.value, "text": segment.text}, ensure_ascii=False)
            for segment in result.segments
        )
    return to_plain_text(result.segments)


def _load_inputs(args: argparse.Namespace, cfg: AppConfig) -> tuple[str, str]:
    source_text = read_text_file(
        args.source,
        max_bytes=cfg.max_source_bytes,
        encoding=cfg.encoding,
        check_extension=cfg.check_extensions,
    )
    rule_text = read_text_file(
        args.rules,
        max_bytes=cfg.max_rules_bytes,
        encoding=cfg.encoding,
        check_extension=cfg.check_extensions,
    )
    return source_text, rule_text


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    log_file = configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)
    logger = logging.getLogger("tms.app")
    logger.info("Run started. Log file: %s", log_file)

    store = ConfigStore(args.config) if args.config else ConfigStore.default()
    cfg = store.load()
    output_format = args.format or cfg.output_format

    try:
        source_text, rule_text = _load_inputs(args, cfg)
        result = evaluate(source_text, rule_text)
    except (InputFileError, EvaluationFailure) as exc:
        logger.error("Run failed: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for warning in result.warnings:
        print(
            f"warning: rule on line {warning.line_number} skipped: {warning.message}",
            file=sys.stderr,
        )

    sys.stdout.write(_format_result(result, output_format))
    if output_format != "text":
        sys.stdout.write("\n")
    print(
        f"matches={result.match_count} replacements={result.replace_count}",
        file=sys.stderr,
    )

    if args.save_dir is not None:
        target = args.save_dir / result_filename(args.source.name)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(result.text, encoding=cfg.encoding)
        except (OSError, UnicodeError) as exc:
            logger.error("Saving result failed: %s", exc)
            print(f"error: could not save {target}: {exc}", file=sys.stderr)
            return 1
        logger.info("Result saved. path=%s", target)
        print(f"saved: {target}", file=sys.stderr)

    logger.info(
        "Run finished. matches=%s replacements=%s",
        result.match_count,
        result.replace_count,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
