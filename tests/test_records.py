import pytest

from pve_cluster_exporter.records import NodeRecord, StorageRecord, VersionRecord, VmRecord, to_label, to_number


@pytest.mark.parametrize("raw, expected", [
    (True, 1),
    (False, 0),
    (3, 3),
    (0.75, 0.75),
    (None, 0),
    ("12", 0),
    ("", 0),
    ([1], 0),
    ({"a": 1}, 0),
])
def test_to_number(raw, expected):
    assert to_number(raw) == expected


def test_to_label():
    assert to_label(None) == ""
    assert to_label(100) == "100"
    assert to_label(True) == "1"
    assert to_label("running") == "running"


def test_node_record_defaults():
    record = NodeRecord.from_raw({})

    assert record.labels() == {"id": "", "name": "", "status": ""}
    assert record.value("maxmem") == 0


def test_vm_record_labels():
    record = VmRecord.from_raw({"id": "lxc/200", "name": "ct", "vmid": 200, "node": "n1", "status": "running"})

    assert record.labels() == {"id": "lxc/200", "name": "ct", "vmid": "200", "node": "n1", "status": "running"}


def test_record_does_not_alias_raw_mapping():
    raw = {"id": "node/n1", "node": "n1", "mem": 5}
    record = NodeRecord.from_raw(raw)
    raw["mem"] = 7

    assert record.value("mem") == 5


@pytest.mark.parametrize("shared, expected", [(1, True), (0, False), (None, False), ("1", True), ("0", False), (True, True)])
def test_storage_shared_flag(shared, expected):
    record = StorageRecord.from_raw({"id": "storage/n1/s", "storage": "s", "shared": shared})

    assert record.shared is expected
    assert record.labels()["shared"] == ("1" if expected else "0")


def test_storage_identity_key():
    shared = StorageRecord.from_raw({"id": "storage/n1/nfs", "storage": "nfs", "shared": 1})
    local = StorageRecord.from_raw({"id": "storage/n1/local", "storage": "local", "shared": 0})

    assert shared.identity_key == ("storage", "nfs")
    assert local.identity_key == ("id", "storage/n1/local")


def test_version_record_is_constant_one():
    record = VersionRecord.from_raw({"version": "8.1.4", "release": "8.1", "repoid": "abc"})

    assert record.value(None) == 1
    assert record.labels() == {"version": "8.1.4", "release": "8.1", "repoid": "abc"}
