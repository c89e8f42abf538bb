"""Export convenience function."""

import logging
from pathlib import Path

from bibkit.citation.models import Citation
from bibkit.exporters.yaml_export import export_citation, to_yaml_str

logger = logging.getLogger(__name__)


def export_all(citations: list[Citation], output_dir: str) -> dict:
    """Write one YAML file per citation plus a combined bibliography.

    Returns dict of file paths created, keyed by citation key.
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    paths = {}

    for citation in citations:
        entry_path = str(out / f"{citation.key}.yaml")
        export_citation(citation, entry_path)
        paths[citation.key] = entry_path

    bibliography_path = str(out / "bibliography.yaml")
    Path(bibliography_path).write_text(to_yaml_str(*citations), encoding="utf-8")
    paths["bibliography"] = bibliography_path

    logger.info("All exports written to %s", output_dir)
    return paths
