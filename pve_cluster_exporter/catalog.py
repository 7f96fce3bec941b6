"""Measurement definitions exported for a Proxmox VE cluster."""

from collections import namedtuple


CLUSTER = "cluster"
NODE = "node"
VM = "vm"
STORAGE = "storage"
VERSION = "version"

FAMILIES = (CLUSTER, NODE, VM, STORAGE, VERSION)

FAMILY_LABELS = {
    CLUSTER: ("name",),
    NODE: ("id", "name", "status"),
    VM: ("id", "name", "vmid", "node", "status"),
    STORAGE: ("name", "node", "status", "id", "shared", "content"),
    VERSION: ("version", "release", "repoid"),
}

MeasurementDefinition = namedtuple("MeasurementDefinition", [
    "metric_name",
    "help",
    "label_names",
    "source_field",
    "family",
])


CLUSTER_METRICS = [
    ("pve_cluster_quorate", "cluster has quorate", "quorate"),
    ("pve_cluster_nodes", "number of nodes in the cluster", "nodes"),
    ("pve_cluster_version", "corosync config version", "version"),
]

NODE_METRICS = [
    ("pve_node_disk_size_bytes", "Size of storage device", "maxdisk"),
    ("pve_node_disk_usage_bytes", "Disk usage in bytes", "disk"),
    ("pve_node_memory_size_bytes", "Size of memory", "maxmem"),
    ("pve_node_memory_usage_bytes", "Memory usage in bytes", "mem"),
    ("pve_node_cpu_usage_ratio", "CPU usage (value between 0.0 and pve_cpu_usage_limit)", "cpu"),
    ("pve_node_cpu_usage_limit", "Maximum allowed CPU usage", "maxcpu"),
    ("pve_node_uptime_seconds", "Number of seconds since the last boot", "uptime"),
]

VM_METRICS = [
    ("pve_vm_disk_size_bytes", "Size of storage device", "maxdisk"),
    ("pve_vm_disk_usage_bytes", "Disk usage in bytes", "disk"),
    ("pve_vm_memory_size_bytes", "Size of memory", "maxmem"),
    ("pve_vm_memory_usage_bytes", "Memory usage in bytes", "mem"),
    ("pve_vm_network_transmit_bytes", "Number of bytes transmitted over the network", "netout"),
    ("pve_vm_network_receive_bytes", "Number of bytes received over the network", "netin"),
    ("pve_vm_disk_write_bytes", "Number of bytes written to storage", "diskwrite"),
    ("pve_vm_disk_read_bytes", "Number of bytes read from storage", "diskread"),
    ("pve_vm_cpu_usage_ratio", "CPU usage (value between 0.0 and pve_cpu_usage_limit)", "cpu"),
    ("pve_vm_cpu_usage_limit", "Maximum allowed CPU usage", "maxcpu"),
    ("pve_vm_uptime_seconds", "Number of seconds since the last boot", "uptime"),
]

STORAGE_METRICS = [
    ("pve_storage_size_bytes", "Size of storage device", "maxdisk"),
    ("pve_storage_usage_bytes", "Disk usage in bytes", "disk"),
]

# label-only, constant value 1
VERSION_METRICS = [
    ("pve_version_info", "Proxmox VE version info", None),
]


class Catalog:
    """Read-only, ordered set of measurement definitions.

    Iteration order is registration order; it decides the order of metric
    families in every snapshot.
    """

    def __init__(self, definitions):
        definitions = tuple(definitions)
        seen = set()
        for definition in definitions:
            if definition.metric_name in seen:
                raise ValueError(f"duplicate metric name {definition.metric_name}")
            seen.add(definition.metric_name)
        self._definitions = definitions

    def __iter__(self):
        return iter(self._definitions)

    def __len__(self):
        return len(self._definitions)

    def __getitem__(self, metric_name):
        for definition in self._definitions:
            if definition.metric_name == metric_name:
                return definition
        raise KeyError(metric_name)

    def family(self, family):
        return [d for d in self._definitions if d.family == family]


def build_catalog():
    groups = [
        (CLUSTER, CLUSTER_METRICS),
        (NODE, NODE_METRICS),
        (VM, VM_METRICS),
        (STORAGE, STORAGE_METRICS),
        (VERSION, VERSION_METRICS),
    ]
    definitions = []
    for family, metrics in groups:
        for metric_name, help_text, source_field in metrics:
            definitions.append(MeasurementDefinition(
                metric_name=metric_name,
                help=help_text,
                label_names=FAMILY_LABELS[family],
                source_field=source_field,
                family=family,
            ))
    return Catalog(definitions)
