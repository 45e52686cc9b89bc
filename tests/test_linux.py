"""Tests for the Linux-specific checks."""

import pytest

from oci_validate.linux import check_linux, device_valid
from oci_validate.namespaces import new_namespaces
from oci_validate.oci import OCIDevice, OCINamespace
from oci_validate.report import ViolationKind


def _mappings(count):
    return [{"hostID": 1000 + i, "containerID": i, "size": 1} for i in range(count)]


class TestIDMappings:
    """Test UID/GID mapping limits."""

    @pytest.mark.parametrize("key", ["uidMappings", "gidMappings"])
    def test_five_mappings_allowed(self, config_data, make_ctx, key):
        config_data["linux"][key] = _mappings(5)

        assert check_linux(make_ctx(config_data)) is None

    @pytest.mark.parametrize("key, label", [("uidMappings", "UID"), ("gidMappings", "GID")])
    def test_six_mappings_rejected(self, config_data, make_ctx, key, label):
        config_data["linux"][key] = _mappings(6)

        violation = check_linux(make_ctx(config_data))

        assert violation.kind is ViolationKind.LINUX
        assert violation.message.startswith(f"Only 5 {label} mappings are allowed")


class TestNamespaces:
    """Test namespace rules."""

    def test_unknown_namespace(self, config_data, make_ctx):
        config_data["linux"]["namespaces"].append({"type": "time"})

        violation = check_linux(make_ctx(config_data))

        assert violation.message == "namespace 'time' is invalid."

    def test_new_namespaces_ignore_joined(self):
        namespaces = [
            OCINamespace("uts"),
            OCINamespace("network", "/var/run/netns/blue"),
        ]

        assert new_namespaces(namespaces) == {"uts"}

    def test_duplicate_kind_counts_as_new(self):
        namespaces = [
            OCINamespace("network", "/var/run/netns/blue"),
            OCINamespace("network"),
        ]

        assert new_namespaces(namespaces) == {"network"}

    def test_net_sysctl_requires_network_namespace(self, config_data, make_ctx):
        config_data["linux"]["namespaces"] = [{"type": "pid"}]
        config_data["hostname"] = ""
        config_data["linux"]["sysctl"] = {"net.ipv4.ip_forward": "1"}

        violation = check_linux(make_ctx(config_data))

        assert violation.message == (
            "Sysctl net.ipv4.ip_forward requires a new Network namespace "
            "to be specified as well"
        )

        config_data["linux"]["namespaces"].append({"type": "network"})
        assert check_linux(make_ctx(config_data)) is None

    def test_joined_network_namespace_is_not_enough(self, config_data, make_ctx):
        config_data["linux"]["namespaces"] = [
            {"type": "uts"},
            {"type": "network", "path": "/var/run/netns/blue"},
        ]
        config_data["linux"]["sysctl"] = {"net.core.somaxconn": "1024"}

        assert check_linux(make_ctx(config_data)) is not None

    @pytest.mark.parametrize("missing", ["ipc", "mount"])
    def test_mqueue_sysctl_requires_ipc_and_mount(self, config_data, make_ctx, missing):
        config_data["linux"]["namespaces"] = [
            ns for ns in config_data["linux"]["namespaces"] if ns["type"] != missing
        ]
        config_data["linux"]["sysctl"] = {"fs.mqueue.msg_max": "10"}

        violation = check_linux(make_ctx(config_data))

        assert violation.message == (
            "Sysctl fs.mqueue.msg_max requires a new IPC namespace and "
            "Mount namespace to be specified as well"
        )

    def test_other_sysctl_needs_nothing(self, config_data, make_ctx):
        config_data["linux"]["namespaces"] = [{"type": "uts"}]
        config_data["linux"]["sysctl"] = {"kernel.shmmax": "1024"}

        assert check_linux(make_ctx(config_data)) is None

    def test_hostname_requires_uts_namespace(self, config_data, make_ctx):
        config_data["linux"]["namespaces"] = [{"type": "pid"}]
        config_data["hostname"] = "myhost"

        violation = check_linux(make_ctx(config_data))

        assert violation.message == (
            "On Linux, hostname requires a new UTS namespace to be specified as well"
        )

        config_data["linux"]["namespaces"].append({"type": "uts"})
        assert check_linux(make_ctx(config_data)) is None

    def test_hostname_without_uts_on_other_os(self, config_data, make_ctx):
        config_data["platform"] = {"os": "solaris", "arch": "amd64"}
        config_data["linux"]["namespaces"] = []

        assert check_linux(make_ctx(config_data)) is None


class TestDevices:
    """Test device rules."""

    @pytest.mark.parametrize(
        "kind, major, minor, valid",
        [
            ("p", 0, 0, True),
            ("p", 1, 0, False),
            ("p", 0, 1, False),
            ("c", 0, 0, True),
            ("c", 1, 3, True),
            ("b", 0, 0, True),
            ("b", 8, 0, True),
            ("u", 1, 3, True),
            ("u", 0, 3, False),
            ("u", 1, 0, False),
            ("x", 1, 3, False),
            ("", 0, 0, False),
        ],
    )
    def test_device_valid(self, kind, major, minor, valid):
        device = OCIDevice(path="/dev/x", type=kind, major=major, minor=minor)

        assert device_valid(device) is valid

    def test_invalid_device_fails_check(self, config_data, make_ctx):
        config_data["linux"]["devices"] = [
            {"path": "/dev/fifo", "type": "p", "major": 1, "minor": 0}
        ]

        violation = check_linux(make_ctx(config_data))

        assert violation.kind is ViolationKind.LINUX
        assert "/dev/fifo" in violation.message


class TestLinuxMisc:
    """Test propagation and seccomp dispatch."""

    def test_invalid_propagation(self, config_data, make_ctx):
        config_data["linux"]["rootfsPropagation"] = "unbindable"

        violation = check_linux(make_ctx(config_data))

        assert violation.message == (
            'rootfsPropagation must be empty or one of '
            '"private|rprivate|slave|rslave|shared|rshared"'
        )

    def test_seccomp_is_checked(self, config_data, make_ctx):
        config_data["linux"]["seccomp"] = {
            "defaultAction": "SCMP_ACT_NOPE",
            "architectures": ["SCMP_ARCH_X86_64"],
        }

        violation = check_linux(make_ctx(config_data))

        assert violation.kind is ViolationKind.SECCOMP
