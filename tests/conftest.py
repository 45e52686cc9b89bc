"""Shared fixtures for oci-validate tests."""

import copy
import json
import os

import pytest

from oci_validate.oci import parse_oci_config
from oci_validate.report import CheckContext

VALID_CONFIG = {
    "ociVersion": "1.0.0",
    "platform": {"os": "linux", "arch": "amd64"},
    "process": {
        "terminal": True,
        "user": {"uid": 0, "gid": 0},
        "args": ["sh"],
        "env": [
            "PATH=/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin",
            "TERM=xterm",
        ],
        "cwd": "/",
        "capabilities": ["CAP_AUDIT_WRITE", "CAP_KILL", "CAP_NET_BIND_SERVICE"],
        "rlimits": [{"type": "RLIMIT_NOFILE", "hard": 1024, "soft": 1024}],
        "noNewPrivileges": True,
    },
    "root": {"path": "rootfs", "readonly": True},
    "hostname": "myhost",
    "mounts": [
        {"destination": "/proc", "type": "proc", "source": "proc"},
        {
            "destination": "/dev",
            "type": "tmpfs",
            "source": "tmpfs",
            "options": ["nosuid", "strictatime", "mode=755", "size=65536k"],
        },
    ],
    "hooks": {},
    "linux": {
        "namespaces": [
            {"type": "pid"},
            {"type": "network"},
            {"type": "ipc"},
            {"type": "uts"},
            {"type": "mount"},
        ],
        "rootfsPropagation": "rprivate",
        "maskedPaths": ["/proc/kcore"],
        "readonlyPaths": ["/proc/sys"],
    },
}


@pytest.fixture
def config_data():
    """A fresh, valid config.json document."""
    return copy.deepcopy(VALID_CONFIG)


@pytest.fixture
def rootfs(tmp_path):
    """An empty root filesystem directory."""
    path = tmp_path / "bundle" / "rootfs"
    path.mkdir(parents=True)
    return str(path)


@pytest.fixture
def make_ctx(rootfs):
    """Build a CheckContext from a config.json document."""

    def _make(data, host_specific=False):
        return CheckContext(
            config=parse_oci_config(data),
            rootfs=rootfs,
            host_specific=host_specific,
        )

    return _make


@pytest.fixture
def write_bundle(tmp_path):
    """Write a bundle directory and return its path."""

    def _write(data, name="bundle"):
        bundle = tmp_path / name
        bundle.mkdir(exist_ok=True)
        root_path = data.get("root", {}).get("path", "")
        if root_path:
            (bundle / root_path.lstrip("/")).mkdir(parents=True, exist_ok=True)
        with open(os.path.join(str(bundle), "config.json"), "w") as f:
            json.dump(data, f)
        return str(bundle)

    return _write


@pytest.fixture
def proc_filesystems(tmp_path, monkeypatch):
    """Point the host filesystem registry at a temporary file."""
    path = tmp_path / "filesystems"
    path.write_text("nodev\tsysfs\nnodev\tproc\nnodev\ttmpfs\n\text4\n")
    monkeypatch.setattr("oci_validate.utils.PROC_FILESYSTEMS", str(path))
    return str(path)
