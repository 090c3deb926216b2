# SPDX-License-Identifier: MIT
"""
Cipher Sentinel - Command Line Interface

This CLI provides:
- cipher-sentinel version
- cipher-sentinel scan <paths...> --format {text,json,sarif} --config <path>
- cipher-sentinel rules --config <path>
- cipher-sentinel init-config [path]
- cipher-sentinel serve --host --port --data-dir
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from . import __version__
from .config.settings import (
    build_rule_set,
    create_default_config_template,
    file_size_limit_bytes,
    load_settings,
)
from .core.exceptions import SentinelConfigError
from .core.findings import Severity
from .core.redaction import redact_findings_list
from .risk.score import risk_summary
from .scanner.engine import scan

logger = logging.getLogger("cipher_sentinel.cli")

SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".tox",
    "build",
    "dist",
}

STDIN_PATH = "-"


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    p = argparse.ArgumentParser(prog="cipher-sentinel", description="Cipher Sentinel secret scanner")
    p.add_argument("-v", "--version", action="store_true", help="print version and exit")
    p.add_argument("--verbose", action="store_true", help="enable debug logging")

    sub = p.add_subparsers(dest="cmd")
    sub.add_parser("version", help="print version")

    sp = sub.add_parser("scan", help="scan files, directories or stdin")
    sp.add_argument("paths", nargs="*", default=["."], help="files or directories to scan ('-' for stdin)")
    sp.add_argument("--config", help="path to .cipher-sentinel.yml")
    sp.add_argument(
        "--format",
        choices=["text", "json", "sarif"],
        default="text",
        help="output format (default: text)",
    )
    sp.add_argument("--json-out", dest="json_out", help="write JSON results to file")
    sp.add_argument("--sarif-out", dest="sarif_out", help="write SARIF results to file")
    sp.add_argument(
        "--fail-on",
        dest="fail_on",
        choices=["low", "medium", "critical"],
        help="exit 1 when any finding is at or above this severity",
    )
    sp.add_argument("--no-mask", dest="no_mask", action="store_true", help="print matched secrets unmasked")

    rp = sub.add_parser("rules", help="list the rules a scan would run")
    rp.add_argument("--config", help="path to .cipher-sentinel.yml")

    ip = sub.add_parser("init-config", help="write a starter .cipher-sentinel.yml")
    ip.add_argument("path", nargs="?", default=".cipher-sentinel.yml", help="destination file")
    ip.add_argument("--force", action="store_true", help="overwrite an existing file")

    vp = sub.add_parser("serve", help="run the HTTP API")
    vp.add_argument("--host", help="bind address (default: $HOST or 127.0.0.1)")
    vp.add_argument("--port", type=int, help="port (default: $PORT or 5000)")
    vp.add_argument("--data-dir", dest="data_dir", help="directory for scans.json and settings.json")

    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.version or args.cmd == "version":
        print(__version__)
        return 0

    try:
        if args.cmd == "scan":
            return handle_scan_command(args)
        if args.cmd == "rules":
            return handle_rules_command(args)
        if args.cmd == "init-config":
            return handle_init_config_command(args)
        if args.cmd == "serve":
            from .api.app import serve

            serve(host=args.host, port=args.port, data_dir=args.data_dir)
            return 0
    except SentinelConfigError as e:
        print(f"CONFIG ERROR: {e}", file=sys.stderr)
        return 1

    p.print_help()
    return 0


def iter_scan_targets(paths):
    """Yield files to scan, walking directories and skipping tool/VCS dirs."""
    for raw in paths:
        if raw == STDIN_PATH:
            yield STDIN_PATH
            continue
        path = Path(raw)
        if path.is_file():
            yield path
        elif path.is_dir():
            for dirpath, dirnames, filenames in os.walk(path):
                dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
                for name in sorted(filenames):
                    yield Path(dirpath) / name
        else:
            logger.warning("Skipping %s: no such file or directory", raw)


def read_target(target, limit):
    """Return the decoded text of *target*, or None when it must be skipped."""
    try:
        if target == STDIN_PATH:
            # Read one byte past the limit so oversize input is never fully buffered.
            blob = sys.stdin.buffer.read(limit + 1)
        else:
            if target.stat().st_size > limit:
                logger.warning("Skipping %s: larger than the configured size limit", target)
                return None
            blob = target.read_bytes()
        if len(blob) > limit:
            logger.warning("Skipping %s: larger than the configured size limit", target)
            return None
        return blob.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Skipping %s: not UTF-8 text", target)
    except OSError as e:
        logger.warning("Skipping %s: %s", target, e)
    return None


def handle_scan_command(args):
    """Handle the scan subcommand."""
    settings = load_settings(args.config)
    rule_set = build_rule_set(settings)
    limit = file_size_limit_bytes(settings)
    mask = settings["security"]["mask_secrets"] and not args.no_mask

    scanned_files = []
    all_findings = []
    for target in iter_scan_targets(args.paths):
        text = read_target(target, limit)
        if text is None:
            continue
        outcome = scan(text, rule_set)
        findings = [f.to_dict() for f in outcome.findings]
        all_findings.extend(findings)
        scanned_files.append(
            {
                "path": "<stdin>" if target == STDIN_PATH else str(target),
                "findings": redact_findings_list(findings) if mask else findings,
                "risk_score": outcome.risk_score,
                "severity": outcome.overall_severity.value,
            }
        )

    summary = risk_summary(all_findings)
    report = {
        "root": str(Path.cwd()),
        "files": scanned_files,
        "total": summary["total"],
        "risk_score": summary["score"],
        "severity": summary["severity"],
        "counts": summary["counts"],
    }

    if args.format == "json" or args.json_out:
        json_output = json.dumps(report, indent=2)
        if args.json_out:
            Path(args.json_out).write_text(json_output, encoding="utf-8")
            if args.format == "text":
                print(f"JSON output written to {args.json_out}")
        if args.format == "json":
            print(json_output)

    if args.format == "sarif" or args.sarif_out:
        from .sarif.export import build_sarif

        sarif_json = json.dumps(build_sarif(report), indent=2)
        if args.sarif_out:
            Path(args.sarif_out).write_text(sarif_json, encoding="utf-8")
            if args.format == "text":
                print(f"SARIF output written to {args.sarif_out}")
        if args.format == "sarif":
            print(sarif_json)

    if args.format == "text":
        print_text_summary(report)

    if args.fail_on and all_findings:
        threshold = Severity.parse(args.fail_on).rank
        if any(Severity.parse(f["severity"]).rank >= threshold for f in all_findings):
            return 1
    return 0


def print_text_summary(report):
    """Print a text summary of scan results."""
    files = report.get("files", [])

    print("\n🔍 Cipher Sentinel Scan Results")
    print("=" * 50)
    print(f"Files scanned: {len(files)}")
    print(f"Total findings: {report.get('total', 0)}")
    print(f"Risk score: {report.get('risk_score', 0)}/100 ({report.get('severity', 'Low')})")

    counts = report.get("counts", {})
    if report.get("total"):
        print("\nFindings by severity:")
        for severity in (Severity.CRITICAL, Severity.MEDIUM, Severity.LOW):
            print(f"  {severity.value}: {counts.get(severity.value, 0)}")

        print("\nFindings:")
        for scanned in files:
            for f in scanned["findings"]:
                print(
                    f"  {scanned['path']}:{f['line_number']}  {f['rule_name']}  "
                    f"[{f['severity']}]  {f['matched_text']}"
                )


def handle_rules_command(args):
    """Print the rules a scan would run with the current settings."""
    settings = load_settings(args.config)
    rule_set = build_rule_set(settings)
    print(f"Sensitivity: {settings['scanner']['sensitivity']}")
    for rule in rule_set:
        print(f"  {rule.name:<20} {rule.severity.value:<9} {rule.category:<13} {rule.description}")
    return 0


def handle_init_config_command(args):
    target = Path(args.path)
    if target.exists() and not args.force:
        print(f"{target} already exists (use --force to overwrite)", file=sys.stderr)
        return 1
    target.write_text(create_default_config_template(), encoding="utf-8")
    print(f"Wrote {target}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
