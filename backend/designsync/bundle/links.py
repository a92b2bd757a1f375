"""Bundle link canonicalization and folder-name derivation."""

from __future__ import annotations

import re
from collections.abc import Iterable
from urllib.parse import unquote, urlsplit, urlunsplit

from designsync.errors import InvalidLinkError

_PREVIEW_SUFFIX_RE = re.compile(r"-p(?=\.\w+$)")
_EXTENSION_RE = re.compile(r"\.\w+$")
_UNSAFE_NAME_RE = re.compile(r"[^a-zA-Z0-9_-]")

DEFAULT_FOLDER_NAME = "design"
MAX_FOLDER_NAME = 20


def canonicalize_link(
    url: str,
    canonical_host: str,
    legacy_hosts: Iterable[str] = (),
    extension: str = ".CRDesign",
) -> str:
    """Map a preview/asset link to the downloadable bundle link.

    ``https://host/cards/design-p.jpg`` → ``https://host/cards/design.CRDesign``.
    Already-canonical links come back unchanged.
    """
    parts = urlsplit((url or "").strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidLinkError(f"Not an absolute http(s) URL: {url!r}")
    if not parts.path or parts.path.endswith("/"):
        raise InvalidLinkError(f"URL has no file name: {url!r}")

    origin = f"{parts.scheme}://{parts.netloc}"
    for legacy in legacy_hosts:
        if origin.lower() == legacy.rstrip("/").lower():
            parts = urlsplit(canonical_host.rstrip("/") + urlunsplit(("", "", *parts[2:])))
            break

    path = parts.path
    if not path.lower().endswith(extension.lower()):
        path = _PREVIEW_SUFFIX_RE.sub("", path)
    path = _EXTENSION_RE.sub("", path) + extension

    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))


def bundle_file_name(url: str) -> str:
    """Basename of the URL path, e.g. ``design.CRDesign``."""
    name = unquote(urlsplit(url).path).replace("\\", "/").rsplit("/", 1)[-1]
    if name in ("", ".", ".."):
        raise InvalidLinkError(f"URL has no file name: {url!r}")
    return name


def sanitize_name(name: object) -> str:
    """Keep ``[A-Za-z0-9_-]``, last 20 characters, ``design`` when empty."""
    text = "" if name is None else str(name)
    cleaned = _UNSAFE_NAME_RE.sub("", text)[-MAX_FOLDER_NAME:]
    return cleaned or DEFAULT_FOLDER_NAME
