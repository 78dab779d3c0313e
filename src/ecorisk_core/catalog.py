from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

import requests

from .config import Settings
from .logging_utils import get_logger

logger = get_logger(__name__)

NOTES_MAX_CHARS = 150


class CatalogError(RuntimeError):
    """Raised when the dataset catalog cannot be reached or answers with an error."""


@dataclass(frozen=True)
class DatasetInfo:
    package_id: str
    title: str
    notes: str
    last_updated: Optional[date]
    url: str


def truncate_notes(notes: Optional[str], limit: int = NOTES_MAX_CHARS) -> str:
    text = (notes or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def _parse_modified(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw).replace("Z", "+00:00")).date()
    except ValueError:
        logger.warning("Unparseable metadata_modified=%r", raw)
        return None


def package_show_url(base_url: str, package_id: str) -> str:
    return f"{base_url.rstrip('/')}/api/3/action/package_show?id={package_id}"


def fetch_dataset_info(
    package_id: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> DatasetInfo:
    """Summary of a CKAN dataset (title, shortened description, last update)."""
    settings = Settings.from_env()
    package_id = package_id or settings.catalog_package
    base_url = base_url or settings.catalog_url
    timeout = timeout if timeout is not None else settings.http_timeout

    url = package_show_url(base_url, package_id)
    logger.info("Fetching catalog entry %s", url)
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
        payload: Any = r.json()
    except requests.RequestException as exc:
        raise CatalogError(f"Could not fetch {url}: {exc}") from exc
    except ValueError as exc:
        raise CatalogError(f"Catalog answered with invalid JSON: {exc}") from exc

    result = payload.get("result") if isinstance(payload, dict) else None
    if not isinstance(payload, dict) or not payload.get("success") or not isinstance(result, dict):
        raise CatalogError(f"Catalog could not resolve dataset {package_id!r}")

    return DatasetInfo(
        package_id=package_id,
        title=str(result.get("title") or package_id),
        notes=truncate_notes(result.get("notes")),
        last_updated=_parse_modified(result.get("metadata_modified")),
        url=url,
    )
