#!/usr/bin/env python3
"""
OCI Runtime Configuration model and bundle loader.

An OCI bundle contains:
    bundle/
    ├── config.json    # OCI runtime configuration
    └── rootfs/        # Container root filesystem

The config.json handled here follows the 1.0.0 runtime configuration layout:
{
    "ociVersion": "1.0.0",
    "platform": {"os": "linux", "arch": "amd64"},
    "process": { ... },
    "root": { ... },
    "mounts": [ ... ],
    "hooks": { ... },
    "linux": { ... }
}

Records are frozen dataclasses whose attribute names match the JSON keys.
Each record also declares its FIELDS schema (see schema.py), which drives
the mandatory-field check.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from oci_validate.schema import LIST, MAP, RECORD, REFERENCE, SCALAR, STRING, Field

CONFIG_FILE = "config.json"


class OCIError(Exception):
    """Exception raised when a bundle cannot be loaded or decoded."""

    pass


@dataclass(frozen=True)
class OCIPlatform:
    """Target platform of the container."""

    os: str = ""
    arch: str = ""

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("os", STRING),
        Field("arch", STRING),
    )


@dataclass(frozen=True)
class OCIUser:
    """User the container process runs as."""

    uid: int = 0
    gid: int = 0
    additionalGids: List[int] = field(default_factory=list)
    username: str = ""

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("uid", SCALAR),
        Field("gid", SCALAR),
        Field("additionalGids", LIST, omitempty=True),
        Field("username", STRING, omitempty=True),
    )


@dataclass(frozen=True)
class OCIRlimit:
    """POSIX resource limit for the container process."""

    type: str = ""
    hard: int = 0
    soft: int = 0

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("type", STRING),
        Field("hard", SCALAR),
        Field("soft", SCALAR),
    )


@dataclass(frozen=True)
class OCIProcess:
    """OCI Process configuration."""

    terminal: bool = False
    user: OCIUser = field(default_factory=OCIUser)
    args: List[str] = field(default_factory=list)
    env: List[str] = field(default_factory=list)
    cwd: str = ""
    capabilities: List[str] = field(default_factory=list)
    rlimits: List[OCIRlimit] = field(default_factory=list)
    noNewPrivileges: bool = False
    apparmorProfile: str = ""
    selinuxLabel: str = ""

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("terminal", SCALAR),
        Field("user", RECORD, schema=OCIUser),
        Field("args", LIST),
        Field("env", LIST, omitempty=True),
        Field("cwd", STRING),
        Field("capabilities", LIST, omitempty=True),
        Field("rlimits", LIST, omitempty=True, schema=OCIRlimit),
        Field("noNewPrivileges", SCALAR, omitempty=True),
        Field("apparmorProfile", STRING, omitempty=True),
        Field("selinuxLabel", STRING, omitempty=True),
    )


@dataclass(frozen=True)
class OCIRoot:
    """OCI Root filesystem configuration."""

    path: str = ""
    readonly: bool = False

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("path", STRING),
        Field("readonly", SCALAR, omitempty=True),
    )


@dataclass(frozen=True)
class OCIMount:
    """OCI Mount configuration."""

    destination: str = ""
    type: str = ""
    source: str = ""
    options: List[str] = field(default_factory=list)

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("destination", STRING),
        Field("type", STRING),
        Field("source", STRING),
        Field("options", LIST, omitempty=True),
    )


@dataclass(frozen=True)
class OCIHook:
    """A single lifecycle hook."""

    path: str = ""
    args: List[str] = field(default_factory=list)
    env: List[str] = field(default_factory=list)
    timeout: Optional[int] = None

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("path", STRING),
        Field("args", LIST, omitempty=True),
        Field("env", LIST, omitempty=True),
        Field("timeout", SCALAR, omitempty=True),
    )


@dataclass(frozen=True)
class OCIHooks:
    """Hooks run around the container lifecycle."""

    prestart: List[OCIHook] = field(default_factory=list)
    poststart: List[OCIHook] = field(default_factory=list)
    poststop: List[OCIHook] = field(default_factory=list)

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("prestart", LIST, omitempty=True, schema=OCIHook),
        Field("poststart", LIST, omitempty=True, schema=OCIHook),
        Field("poststop", LIST, omitempty=True, schema=OCIHook),
    )


@dataclass(frozen=True)
class OCIIDMapping:
    """User namespace UID/GID mapping."""

    hostID: int = 0
    containerID: int = 0
    size: int = 0

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("hostID", SCALAR),
        Field("containerID", SCALAR),
        Field("size", SCALAR),
    )


@dataclass(frozen=True)
class OCINamespace:
    """OCI Linux namespace configuration."""

    type: str = ""
    path: str = ""

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("type", STRING),
        Field("path", STRING, omitempty=True),
    )


@dataclass(frozen=True)
class OCIDevice:
    """Device node created inside the container."""

    path: str = ""
    type: str = ""
    major: int = 0
    minor: int = 0
    fileMode: Optional[int] = None
    uid: Optional[int] = None
    gid: Optional[int] = None

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("path", STRING),
        Field("type", STRING),
        Field("major", SCALAR),
        Field("minor", SCALAR),
        Field("fileMode", SCALAR, omitempty=True),
        Field("uid", SCALAR, omitempty=True),
        Field("gid", SCALAR, omitempty=True),
    )


@dataclass(frozen=True)
class OCIDeviceCgroup:
    """Device cgroup allow/deny rule."""

    allow: bool = False
    type: str = ""
    major: Optional[int] = None
    minor: Optional[int] = None
    access: str = ""

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("allow", SCALAR),
        Field("type", STRING, omitempty=True),
        Field("major", SCALAR, omitempty=True),
        Field("minor", SCALAR, omitempty=True),
        Field("access", STRING, omitempty=True),
    )


@dataclass(frozen=True)
class OCILinuxResources:
    """OCI Linux cgroup resource limits."""

    devices: List[OCIDeviceCgroup] = field(default_factory=list)
    disableOOMKiller: Optional[bool] = None
    oomScoreAdj: Optional[int] = None
    memory: Dict[str, Any] = field(default_factory=dict)
    cpu: Dict[str, Any] = field(default_factory=dict)
    pids: Dict[str, Any] = field(default_factory=dict)
    blockIO: Dict[str, Any] = field(default_factory=dict)
    hugepageLimits: List[Dict[str, Any]] = field(default_factory=list)
    network: Dict[str, Any] = field(default_factory=dict)

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("devices", LIST, omitempty=True, schema=OCIDeviceCgroup),
        Field("disableOOMKiller", SCALAR, omitempty=True),
        Field("oomScoreAdj", SCALAR, omitempty=True),
        Field("memory", MAP, omitempty=True),
        Field("cpu", MAP, omitempty=True),
        Field("pids", MAP, omitempty=True),
        Field("blockIO", MAP, omitempty=True),
        Field("hugepageLimits", LIST, omitempty=True),
        Field("network", MAP, omitempty=True),
    )


@dataclass(frozen=True)
class OCISyscallArg:
    """Argument comparison of a seccomp rule."""

    index: int = 0
    value: int = 0
    valueTwo: int = 0
    op: str = ""

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("index", SCALAR),
        Field("value", SCALAR),
        Field("valueTwo", SCALAR),
        Field("op", STRING),
    )


@dataclass(frozen=True)
class OCISyscall:
    """Per-syscall seccomp rule."""

    name: str = ""
    action: str = ""
    args: List[OCISyscallArg] = field(default_factory=list)

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("name", STRING),
        Field("action", STRING),
        Field("args", LIST, omitempty=True, schema=OCISyscallArg),
    )


@dataclass(frozen=True)
class OCISeccomp:
    """Seccomp policy: default action plus syscall overrides."""

    defaultAction: str = ""
    architectures: List[str] = field(default_factory=list)
    syscalls: List[OCISyscall] = field(default_factory=list)

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("defaultAction", STRING),
        Field("architectures", LIST),
        Field("syscalls", LIST, omitempty=True, schema=OCISyscall),
    )


@dataclass(frozen=True)
class OCILinux:
    """OCI Linux-specific configuration."""

    uidMappings: List[OCIIDMapping] = field(default_factory=list)
    gidMappings: List[OCIIDMapping] = field(default_factory=list)
    sysctl: Dict[str, str] = field(default_factory=dict)
    resources: Optional[OCILinuxResources] = None
    cgroupsPath: str = ""
    namespaces: List[OCINamespace] = field(default_factory=list)
    devices: List[OCIDevice] = field(default_factory=list)
    seccomp: Optional[OCISeccomp] = None
    rootfsPropagation: str = ""
    maskedPaths: List[str] = field(default_factory=list)
    readonlyPaths: List[str] = field(default_factory=list)
    mountLabel: str = ""

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("uidMappings", LIST, omitempty=True, schema=OCIIDMapping),
        Field("gidMappings", LIST, omitempty=True, schema=OCIIDMapping),
        Field("sysctl", MAP, omitempty=True),
        Field("resources", REFERENCE, omitempty=True, schema=OCILinuxResources),
        Field("cgroupsPath", STRING, omitempty=True),
        Field("namespaces", LIST, omitempty=True, schema=OCINamespace),
        Field("devices", LIST, omitempty=True, schema=OCIDevice),
        Field("seccomp", REFERENCE, omitempty=True, schema=OCISeccomp),
        Field("rootfsPropagation", STRING, omitempty=True),
        Field("maskedPaths", LIST, omitempty=True),
        Field("readonlyPaths", LIST, omitempty=True),
        Field("mountLabel", STRING, omitempty=True),
    )


@dataclass(frozen=True)
class OCIConfig:
    """Complete OCI runtime configuration."""

    ociVersion: str = ""
    platform: OCIPlatform = field(default_factory=OCIPlatform)
    process: OCIProcess = field(default_factory=OCIProcess)
    root: OCIRoot = field(default_factory=OCIRoot)
    hostname: str = ""
    mounts: List[OCIMount] = field(default_factory=list)
    hooks: OCIHooks = field(default_factory=OCIHooks)
    annotations: Dict[str, str] = field(default_factory=dict)
    linux: OCILinux = field(default_factory=OCILinux)

    FIELDS: ClassVar[Tuple[Field, ...]] = (
        Field("ociVersion", STRING),
        Field("platform", RECORD, schema=OCIPlatform),
        Field("process", RECORD, schema=OCIProcess),
        Field("root", RECORD, schema=OCIRoot),
        Field("hostname", STRING, omitempty=True),
        Field("mounts", LIST, omitempty=True, schema=OCIMount),
        Field("hooks", RECORD, schema=OCIHooks),
        Field("annotations", MAP, omitempty=True),
        Field("linux", RECORD, schema=OCILinux),
    )


@dataclass(frozen=True)
class Bundle:
    """A loaded bundle: its directory, parsed config and rootfs path."""

    path: str
    config: OCIConfig
    rootfs: str


# =============================================================================
# Decoding
# =============================================================================

_TYPE_NAMES = {
    str: "string",
    bool: "boolean",
    int: "integer",
    list: "array",
    dict: "object",
}


def _check_type(value: Any, expected: type, label: str) -> Any:
    """Enforce the JSON type of a value. null passes through as None."""
    if value is None:
        return None
    # bool is a subclass of int; JSON keeps them apart
    mismatch = not isinstance(value, expected) or (
        expected is int and isinstance(value, bool)
    )
    if mismatch:
        raise OCIError(
            f"{label}: expected {_TYPE_NAMES[expected]}, "
            f"got {type(value).__name__}"
        )
    return value


def _typed(data: Dict, key: str, expected: type, where: str) -> Any:
    """Fetch data[key], enforcing its JSON type. Missing or null gives None."""
    return _check_type(data.get(key), expected, f"{where}.{key}")


def _string(data: Dict, key: str, where: str) -> str:
    return _typed(data, key, str, where) or ""


def _bool(data: Dict, key: str, where: str) -> bool:
    return bool(_typed(data, key, bool, where))


def _int(data: Dict, key: str, where: str, default: Optional[int] = 0) -> Optional[int]:
    value = _typed(data, key, int, where)
    return default if value is None else value


def _object(data: Dict, key: str, where: str) -> Optional[Dict]:
    return _typed(data, key, dict, where)


def _list_of(data: Dict, key: str, expected: type, where: str) -> List:
    """Fetch a JSON array whose null elements decode to their zero value."""
    items = _typed(data, key, list, where) or []
    label = f"{where}.{key}"
    result = []
    for index, item in enumerate(items):
        item = _check_type(item, expected, f"{label}[{index}]")
        result.append(expected() if item is None else item)
    return result


def _string_map(data: Dict, key: str, where: str) -> Dict[str, str]:
    mapping = _typed(data, key, dict, where) or {}
    label = f"{where}.{key}"
    result = {}
    for name, value in mapping.items():
        result[name] = _check_type(value, str, f"{label}[{name}]") or ""
    return result


def _parse_process(proc: Dict, where: str) -> OCIProcess:
    user = _object(proc, "user", where) or {}
    user_where = f"{where}.user"
    rlimits = []
    for index, rlimit in enumerate(_list_of(proc, "rlimits", dict, where)):
        rl_where = f"{where}.rlimits[{index}]"
        rlimits.append(
            OCIRlimit(
                type=_string(rlimit, "type", rl_where),
                hard=_int(rlimit, "hard", rl_where),
                soft=_int(rlimit, "soft", rl_where),
            )
        )

    return OCIProcess(
        terminal=_bool(proc, "terminal", where),
        user=OCIUser(
            uid=_int(user, "uid", user_where),
            gid=_int(user, "gid", user_where),
            additionalGids=_list_of(user, "additionalGids", int, user_where),
            username=_string(user, "username", user_where),
        ),
        args=_list_of(proc, "args", str, where),
        env=_list_of(proc, "env", str, where),
        cwd=_string(proc, "cwd", where),
        capabilities=_list_of(proc, "capabilities", str, where),
        rlimits=rlimits,
        noNewPrivileges=_bool(proc, "noNewPrivileges", where),
        apparmorProfile=_string(proc, "apparmorProfile", where),
        selinuxLabel=_string(proc, "selinuxLabel", where),
    )


def _parse_hooks(hooks: Dict, where: str) -> OCIHooks:
    phases = {}
    for phase in ("prestart", "poststart", "poststop"):
        parsed = []
        for index, hook in enumerate(_list_of(hooks, phase, dict, where)):
            hook_where = f"{where}.{phase}[{index}]"
            parsed.append(
                OCIHook(
                    path=_string(hook, "path", hook_where),
                    args=_list_of(hook, "args", str, hook_where),
                    env=_list_of(hook, "env", str, hook_where),
                    timeout=_int(hook, "timeout", hook_where, default=None),
                )
            )
        phases[phase] = parsed
    return OCIHooks(**phases)


def _parse_id_mappings(linux: Dict, key: str, where: str) -> List[OCIIDMapping]:
    mappings = []
    for index, mapping in enumerate(_list_of(linux, key, dict, where)):
        map_where = f"{where}.{key}[{index}]"
        mappings.append(
            OCIIDMapping(
                hostID=_int(mapping, "hostID", map_where),
                containerID=_int(mapping, "containerID", map_where),
                size=_int(mapping, "size", map_where),
            )
        )
    return mappings


def _parse_resources(res: Dict, where: str) -> OCILinuxResources:
    devices = []
    for index, dev in enumerate(_list_of(res, "devices", dict, where)):
        dev_where = f"{where}.devices[{index}]"
        devices.append(
            OCIDeviceCgroup(
                allow=_bool(dev, "allow", dev_where),
                type=_string(dev, "type", dev_where),
                major=_int(dev, "major", dev_where, default=None),
                minor=_int(dev, "minor", dev_where, default=None),
                access=_string(dev, "access", dev_where),
            )
        )

    oom_killer = _typed(res, "disableOOMKiller", bool, where)
    return OCILinuxResources(
        devices=devices,
        disableOOMKiller=oom_killer,
        oomScoreAdj=_int(res, "oomScoreAdj", where, default=None),
        memory=_object(res, "memory", where) or {},
        cpu=_object(res, "cpu", where) or {},
        pids=_object(res, "pids", where) or {},
        blockIO=_object(res, "blockIO", where) or {},
        hugepageLimits=_list_of(res, "hugepageLimits", dict, where),
        network=_object(res, "network", where) or {},
    )


def _parse_seccomp(sec: Dict, where: str) -> OCISeccomp:
    syscalls = []
    for index, syscall in enumerate(_list_of(sec, "syscalls", dict, where)):
        sc_where = f"{where}.syscalls[{index}]"
        args = []
        for arg_index, arg in enumerate(_list_of(syscall, "args", dict, sc_where)):
            arg_where = f"{sc_where}.args[{arg_index}]"
            args.append(
                OCISyscallArg(
                    index=_int(arg, "index", arg_where),
                    value=_int(arg, "value", arg_where),
                    valueTwo=_int(arg, "valueTwo", arg_where),
                    op=_string(arg, "op", arg_where),
                )
            )
        syscalls.append(
            OCISyscall(
                name=_string(syscall, "name", sc_where),
                action=_string(syscall, "action", sc_where),
                args=args,
            )
        )

    return OCISeccomp(
        defaultAction=_string(sec, "defaultAction", where),
        architectures=_list_of(sec, "architectures", str, where),
        syscalls=syscalls,
    )


def _parse_linux(linux: Dict, where: str) -> OCILinux:
    namespaces = []
    for index, ns in enumerate(_list_of(linux, "namespaces", dict, where)):
        ns_where = f"{where}.namespaces[{index}]"
        namespaces.append(
            OCINamespace(
                type=_string(ns, "type", ns_where),
                path=_string(ns, "path", ns_where),
            )
        )

    devices = []
    for index, dev in enumerate(_list_of(linux, "devices", dict, where)):
        dev_where = f"{where}.devices[{index}]"
        devices.append(
            OCIDevice(
                path=_string(dev, "path", dev_where),
                type=_string(dev, "type", dev_where),
                major=_int(dev, "major", dev_where),
                minor=_int(dev, "minor", dev_where),
                fileMode=_int(dev, "fileMode", dev_where, default=None),
                uid=_int(dev, "uid", dev_where, default=None),
                gid=_int(dev, "gid", dev_where, default=None),
            )
        )

    resources = _object(linux, "resources", where)
    seccomp = _object(linux, "seccomp", where)

    return OCILinux(
        uidMappings=_parse_id_mappings(linux, "uidMappings", where),
        gidMappings=_parse_id_mappings(linux, "gidMappings", where),
        sysctl=_string_map(linux, "sysctl", where),
        resources=(
            _parse_resources(resources, f"{where}.resources")
            if resources is not None
            else None
        ),
        cgroupsPath=_string(linux, "cgroupsPath", where),
        namespaces=namespaces,
        devices=devices,
        seccomp=(
            _parse_seccomp(seccomp, f"{where}.seccomp") if seccomp is not None else None
        ),
        rootfsPropagation=_string(linux, "rootfsPropagation", where),
        maskedPaths=_list_of(linux, "maskedPaths", str, where),
        readonlyPaths=_list_of(linux, "readonlyPaths", str, where),
        mountLabel=_string(linux, "mountLabel", where),
    )


def parse_oci_config(data: Dict) -> OCIConfig:
    """
    Parse OCI config dictionary into OCIConfig dataclass.

    Missing keys take their zero value, so that absent mandatory fields are
    left for the presence check to report. A key holding the wrong JSON type
    is a decode error.

    Args:
        data: Dictionary from config.json

    Returns:
        OCIConfig instance

    Raises:
        OCIError: If a field has the wrong JSON type
    """
    if not isinstance(data, dict):
        raise OCIError("config.json must contain a JSON object")

    where = "config"
    platform = _object(data, "platform", where) or {}
    root = _object(data, "root", where) or {}

    mounts = []
    for index, mount in enumerate(_list_of(data, "mounts", dict, where)):
        mount_where = f"{where}.mounts[{index}]"
        mounts.append(
            OCIMount(
                destination=_string(mount, "destination", mount_where),
                type=_string(mount, "type", mount_where),
                source=_string(mount, "source", mount_where),
                options=_list_of(mount, "options", str, mount_where),
            )
        )

    return OCIConfig(
        ociVersion=_string(data, "ociVersion", where),
        platform=OCIPlatform(
            os=_string(platform, "os", f"{where}.platform"),
            arch=_string(platform, "arch", f"{where}.platform"),
        ),
        process=_parse_process(
            _object(data, "process", where) or {}, f"{where}.process"
        ),
        root=OCIRoot(
            path=_string(root, "path", f"{where}.root"),
            readonly=_bool(root, "readonly", f"{where}.root"),
        ),
        hostname=_string(data, "hostname", where),
        mounts=mounts,
        hooks=_parse_hooks(_object(data, "hooks", where) or {}, f"{where}.hooks"),
        annotations=_string_map(data, "annotations", where),
        linux=_parse_linux(_object(data, "linux", where) or {}, f"{where}.linux"),
    )


def load_oci_config(bundle_path: str) -> OCIConfig:
    """
    Load OCI config.json from a bundle.

    Args:
        bundle_path: Path to OCI bundle directory

    Returns:
        OCIConfig instance

    Raises:
        OCIError: If config is missing, unreadable, not UTF-8 or invalid
    """
    config_path = os.path.join(bundle_path, CONFIG_FILE)

    if not os.path.exists(config_path):
        raise OCIError(f"config.json not found in bundle: {bundle_path}")

    try:
        with open(config_path, "rb") as f:
            content = f.read()
    except OSError as e:
        raise OCIError(f"Cannot read {config_path}: {e}") from e

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise OCIError(f"{config_path!r} is not encoded in UTF-8") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise OCIError(f"Invalid JSON in config.json: {e}") from e

    return parse_oci_config(data)


def load_bundle(bundle_path: str) -> Bundle:
    """
    Load a bundle and resolve its root filesystem.

    Args:
        bundle_path: Path to OCI bundle directory

    Returns:
        Bundle instance

    Raises:
        OCIError: If the bundle, its config or its rootfs is unusable
    """
    if not bundle_path:
        raise OCIError("Bundle path shouldn't be empty")

    if not os.path.exists(bundle_path):
        raise OCIError(f"Bundle path does not exist: {bundle_path}")

    config = load_oci_config(bundle_path)

    # root.path always resolves inside the bundle, even when written absolute
    rootfs = os.path.join(bundle_path, config.root.path.lstrip("/"))
    if not os.path.exists(rootfs):
        raise OCIError(f"Cannot find the root path {rootfs!r}")
    if not os.path.isdir(rootfs):
        raise OCIError(f"The root path {rootfs!r} is not a directory.")

    return Bundle(path=bundle_path, config=config, rootfs=rootfs)
