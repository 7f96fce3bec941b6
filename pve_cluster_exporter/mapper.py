"""Project fetched Proxmox records into labeled points.

Everything here is pure: the same fetched collection always maps to the same
points, and nothing is fetched or mutated.
"""

from collections import namedtuple

from pve_cluster_exporter import catalog
from pve_cluster_exporter.errors import MissingClusterRecord
from pve_cluster_exporter.records import (
    ClusterStatusRecord,
    NodeRecord,
    StorageRecord,
    VersionRecord,
    VmRecord,
)


LabeledPoint = namedtuple("LabeledPoint", ["labels", "value"])


def make_point(definition, record):
    labels = record.labels()
    if tuple(labels) != tuple(definition.label_names):
        raise ValueError(f"{definition.metric_name}: labels {sorted(labels)} "
                         f"do not match {sorted(definition.label_names)}")
    return LabeledPoint(labels, record.value(definition.source_field))


def select_cluster_entry(statuses):
    """Return the cluster-level entry of a cluster status listing, or None."""
    for status in statuses:
        if status.get("type") == "cluster":
            return ClusterStatusRecord.from_raw(status)
    return None


def deduplicate_storage(records):
    """Collapse per-node reports of shared storage into a single record.

    Shared volumes are keyed by storage name, local ones by record id. A later
    record replaces an earlier one with the same key, so the last listed mount
    represents a shared volume. Keys keep the position of their first
    appearance.
    """
    by_key = {}
    for record in records:
        by_key[record.identity_key] = record
    return list(by_key.values())


def map_cluster(definition, statuses):
    record = select_cluster_entry(statuses)
    if record is None:
        raise MissingClusterRecord(definition.metric_name)
    return [make_point(definition, record)]


def map_nodes(definition, nodes):
    return [make_point(definition, NodeRecord.from_raw(node)) for node in nodes]


def map_vms(definition, vms):
    return [make_point(definition, VmRecord.from_raw(vm)) for vm in vms]


def map_storage(definition, storages):
    records = deduplicate_storage(StorageRecord.from_raw(s) for s in storages)
    return [make_point(definition, record) for record in records]


def map_version(definition, version):
    return [make_point(definition, VersionRecord.from_raw(version))]


MAPPERS = {
    catalog.CLUSTER: map_cluster,
    catalog.NODE: map_nodes,
    catalog.VM: map_vms,
    catalog.STORAGE: map_storage,
    catalog.VERSION: map_version,
}


def map_family(definition, fetched):
    return MAPPERS[definition.family](definition, fetched)
