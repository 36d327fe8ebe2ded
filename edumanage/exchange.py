"""
Import / export files.

Export writes the repository's export document (dataset + exportDate + version)
as indented JSON. Import reads a document either from a local file or from an
http(s) URL; parsing and validation happen in Repository.import_text().
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path

import requests

from edumanage.errors import ImportSourceError
from edumanage.repository import Repository

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


def default_export_name() -> str:
    return f"edumanage_ai_export_{date.today().isoformat()}.json"


def export_to_file(repository: Repository, out_path: str | Path) -> Path:
    """
    Write the export document to `out_path`. Returns the written path.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    doc = repository.export_document()
    out.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Exported data to %s", out)
    return out


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def read_import_source(source: str | Path) -> str:
    """
    Return the raw text of an import document.

    Raises ImportSourceError if the file or URL cannot be read.
    """
    src = str(source).strip()
    if not src:
        raise ImportSourceError("Please provide a file path or URL to import")

    if _is_url(src):
        try:
            resp = requests.get(src, timeout=REQUEST_TIMEOUT)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise ImportSourceError(f"Could not fetch {src}: {e}") from e
        return resp.text

    path = Path(src)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ImportSourceError(f"File not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ImportSourceError(f"Could not read {path}: {e}") from e
