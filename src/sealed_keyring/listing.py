"""Listing options and normalization shared by every store.

Backends enumerate their ids in whatever order and shape the native store
offers. ``normalize_ids`` is always the last step, so listings come back
prefix-filtered and in ascending order regardless of backend.
"""

from __future__ import annotations

import dataclasses
from typing import Callable, Iterable


@dataclasses.dataclass(frozen=True)
class ListOptions:
    """Options for ``ids`` and ``documents`` listings.

    Attributes:
        prefix: Only include ids starting with this string ("" means all).
        no_data: Omit document payloads (skips reads and decryption).
    """

    prefix: str = ""
    no_data: bool = False


@dataclasses.dataclass(frozen=True)
class Document:
    """A listing entry: the item id as ``path`` plus optional payload."""

    path: str
    data: bytes | None = None


def normalize_ids(ids: Iterable[str], prefix: str = "") -> list[str]:
    """Filter *ids* by *prefix* and return them sorted ascending, de-duplicated."""
    return sorted({i for i in ids if i.startswith(prefix)})


def collect_documents(
    ids: Iterable[str],
    fetch: Callable[[str], bytes | None],
    options: ListOptions | None = None,
) -> list[Document]:
    """Build documents for *ids* in path order.

    Parameters
    ----------
    ids:
        Raw ids from a backend enumeration.
    fetch:
        Resolves an id to its payload. Only called when ``options.no_data``
        is false.
    options:
        Prefix filter and data flag; defaults to ``ListOptions()``.
    """
    opts = options or ListOptions()
    out: list[Document] = []
    for path in normalize_ids(ids, opts.prefix):
        if opts.no_data:
            out.append(Document(path=path))
        else:
            out.append(Document(path=path, data=fetch(path)))
    return out
