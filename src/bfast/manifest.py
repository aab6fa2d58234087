"""Pack manifest loading (JSON/YAML).

A manifest lists the buffers to pack, in order:

    buffers:
      - name: positions
        path: data/positions.bin
      - name: title
        data: "hello"
      - name: magic
        data_hex: "a5bf"

Paths are relative to the manifest's directory and may not leave it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List

import yaml

from .buffers import NamedBuffer
from .packing.constants import MAX_FILE_SIZE
from .utils.io import DataError, read_data_from_entry

__all__ = ["PackManifest", "load_manifest", "parse_manifest"]


@dataclass(slots=True)
class PackManifest:
    base_dir: Path
    entries: List[dict[str, Any]] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [e["name"] for e in self.entries]

    def load_buffers(self, max_size: int = MAX_FILE_SIZE) -> List[NamedBuffer]:
        out: List[NamedBuffer] = []
        for i, entry in enumerate(self.entries):
            try:
                data = read_data_from_entry(entry, self.base_dir, max_size)
            except DataError as e:
                raise DataError(f"buffers[{i}] ({entry['name']!r}): {e}") from e
            out.append(NamedBuffer(entry["name"], data))
        return out


def parse_manifest(data: Any, base_dir: Path) -> PackManifest:
    if not isinstance(data, dict):
        raise ValueError("Root of manifest must be an object")
    buffers = data.get("buffers", [])
    if not isinstance(buffers, list):
        raise ValueError("'buffers' must be a list")
    entries: List[dict[str, Any]] = []
    for i, e in enumerate(buffers):
        if not isinstance(e, dict):
            raise ValueError(f"buffers[{i}]: entry must be an object")
        name = e.get("name")
        if not isinstance(name, str):
            raise ValueError(f"buffers[{i}]: missing or invalid name")
        if "\x00" in name:
            raise ValueError(f"buffers[{i}]: name must not contain NUL")
        entries.append(e)
    return PackManifest(base_dir=base_dir, entries=entries)


def load_manifest(path: str | Path) -> PackManifest:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)
    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data: Any = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise DataError(f"Cannot parse manifest {p.name}: {e}") from e
    return parse_manifest(data, p.parent)
