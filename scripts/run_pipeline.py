#!/usr/bin/env python3
"""Generate a YAML citation for a saved web page."""

import argparse
import logging
import sys
import time
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from bibkit.core.config import load_config
from bibkit.exporters.yaml_export import export_citation
from bibkit.pipeline import classify_and_build

logger = logging.getLogger("pipeline")


# ── Pipeline ─────────────────────────────────────────────────────────


def run_pipeline(
    html_path: str | None,
    url: str,
    config_path: str | None = None,
    output_path: str | None = None,
) -> int:
    """Run classify-and-build on one page. Returns a process exit code."""
    t_start = time.time()

    config = load_config(config_path)
    if config_path:
        logger.info("Loaded config: %s", config_path)

    if html_path and html_path != "-":
        dom = Path(html_path).read_text(encoding="utf-8", errors="replace")
        logger.info("Read %d characters from %s", len(dom), html_path)
    else:
        dom = sys.stdin.read()
        logger.info("Read %d characters from stdin", len(dom))

    result = classify_and_build(dom, url, config)
    elapsed = time.time() - t_start

    if not result.ok:
        logger.error("No citation for %s (%s): %s", url, type(result.error).__name__, result.error)
        return 1

    if output_path:
        export_citation(result.citation, output_path)
    else:
        sys.stdout.write(result.yaml)

    logger.info("Citation for %s generated in %.2fs", url, elapsed)
    return 0


# ── CLI ──────────────────────────────────────────────────────────────


def main():
    parser = argparse.ArgumentParser(description="Generate a citation from a saved web page")
    parser.add_argument("html", nargs="?", default="-", help="Path to saved HTML ('-' for stdin)")
    parser.add_argument("--url", required=True, help="Absolute URL the page was captured from")
    parser.add_argument("--config", default=None, help="Path to pipeline config YAML file")
    parser.add_argument("--output", default=None, help="Write YAML here instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log per-signal detail")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    sys.exit(run_pipeline(args.html, args.url, args.config, args.output))


if __name__ == "__main__":
    main()
