"""Typed views over the raw records returned by the Proxmox API.

Each ``from_raw`` constructor spells out how every label is derived and what
it defaults to. Metric values are read through ``value()`` which applies the
numeric coercion rule: booleans become 0/1, numbers pass through, anything
else (absent, null, strings, containers) becomes 0.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


def to_number(raw):
    if isinstance(raw, bool):
        return 1 if raw else 0
    if isinstance(raw, (int, float)):
        return raw
    return 0


def to_label(raw):
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "1" if raw else "0"
    return str(raw)


def is_truthy(raw):
    if isinstance(raw, str):
        return raw not in ("", "0")
    return bool(raw)


def _frozen(raw):
    return MappingProxyType(dict(raw))


@dataclass(frozen=True)
class _Record:
    fields: Mapping[str, Any] = field(repr=False, compare=False)

    def value(self, source_field):
        return to_number(self.fields.get(source_field))


@dataclass(frozen=True)
class ClusterStatusRecord(_Record):
    name: str = ""

    @classmethod
    def from_raw(cls, raw):
        return cls(fields=_frozen(raw), name=to_label(raw.get("name")))

    def labels(self):
        return {"name": self.name}


@dataclass(frozen=True)
class NodeRecord(_Record):
    id: str = ""
    name: str = ""
    status: str = ""

    @classmethod
    def from_raw(cls, raw):
        return cls(
            fields=_frozen(raw),
            id=to_label(raw.get("id")),
            name=to_label(raw.get("node")),
            status=to_label(raw.get("status")),
        )

    def labels(self):
        return {"id": self.id, "name": self.name, "status": self.status}


@dataclass(frozen=True)
class VmRecord(_Record):
    id: str = ""
    name: str = ""
    vmid: str = ""
    node: str = ""
    status: str = ""

    @classmethod
    def from_raw(cls, raw):
        return cls(
            fields=_frozen(raw),
            id=to_label(raw.get("id")),
            name=to_label(raw.get("name")),
            vmid=to_label(raw.get("vmid")),
            node=to_label(raw.get("node")),
            status=to_label(raw.get("status")),
        )

    def labels(self):
        return {
            "id": self.id,
            "name": self.name,
            "vmid": self.vmid,
            "node": self.node,
            "status": self.status,
        }


@dataclass(frozen=True)
class StorageRecord(_Record):
    id: str = ""
    storage: str = ""
    node: str = ""
    status: str = ""
    shared: bool = False
    content: str = ""

    @classmethod
    def from_raw(cls, raw):
        return cls(
            fields=_frozen(raw),
            id=to_label(raw.get("id")),
            storage=to_label(raw.get("storage")),
            node=to_label(raw.get("node")),
            status=to_label(raw.get("status")),
            shared=is_truthy(raw.get("shared")),
            content=to_label(raw.get("content")),
        )

    @property
    def identity_key(self):
        # one logical volume per name when shared, one per node mount otherwise
        if self.shared:
            return ("storage", self.storage)
        return ("id", self.id)

    def labels(self):
        return {
            "name": self.storage,
            "node": self.node,
            "status": self.status,
            "id": self.id,
            "shared": "1" if self.shared else "0",
            "content": self.content,
        }


@dataclass(frozen=True)
class VersionRecord(_Record):
    version: str = ""
    release: str = ""
    repoid: str = ""

    @classmethod
    def from_raw(cls, raw):
        return cls(
            fields=_frozen(raw),
            version=to_label(raw.get("version")),
            release=to_label(raw.get("release")),
            repoid=to_label(raw.get("repoid")),
        )

    def value(self, source_field):
        return 1

    def labels(self):
        return {"version": self.version, "release": self.release, "repoid": self.repoid}
