"""Tests for config.json decoding and bundle loading."""

import json
import os

import pytest

from oci_validate.oci import (
    OCIConfig,
    OCIError,
    load_bundle,
    load_oci_config,
    parse_oci_config,
)


class TestParse:
    """Test parse_oci_config."""

    def test_parse_valid(self, config_data):
        config = parse_oci_config(config_data)

        assert isinstance(config, OCIConfig)
        assert config.ociVersion == "1.0.0"
        assert config.platform.os == "linux"
        assert config.process.args == ["sh"]
        assert config.process.rlimits[0].type == "RLIMIT_NOFILE"
        assert config.mounts[1].options[0] == "nosuid"
        assert [ns.type for ns in config.linux.namespaces][:2] == ["pid", "network"]
        assert config.linux.seccomp is None
        assert config.linux.resources is None

    def test_missing_keys_take_zero_values(self):
        config = parse_oci_config({})

        assert config.ociVersion == ""
        assert config.process.cwd == ""
        assert config.mounts == []
        assert config.linux.sysctl == {}

    def test_seccomp_and_resources(self, config_data):
        config_data["linux"]["seccomp"] = {
            "defaultAction": "SCMP_ACT_ERRNO",
            "architectures": ["SCMP_ARCH_X86_64"],
            "syscalls": [
                {
                    "name": "personality",
                    "action": "SCMP_ACT_ALLOW",
                    "args": [{"index": 0, "value": 8, "op": "SCMP_CMP_EQ"}],
                }
            ],
        }
        config_data["linux"]["resources"] = {
            "devices": [{"allow": False, "access": "rwm"}],
            "memory": {"limit": 1048576},
        }

        config = parse_oci_config(config_data)

        assert config.linux.seccomp.syscalls[0].args[0].op == "SCMP_CMP_EQ"
        assert config.linux.resources.devices[0].access == "rwm"
        assert config.linux.resources.memory == {"limit": 1048576}

    def test_null_list_elements_decode_to_zero_value(self, config_data):
        config_data["process"]["env"] = ["A=1", None]

        config = parse_oci_config(config_data)

        assert config.process.env == ["A=1", ""]

    @pytest.mark.parametrize(
        "mutate, where",
        [
            (lambda d: d.update(ociVersion=1), "config.ociVersion"),
            (lambda d: d["process"].update(args="sh"), "config.process.args"),
            (lambda d: d["process"].update(env=[1]), "config.process.env[0]"),
            (lambda d: d["process"]["user"].update(uid=True), "config.process.user.uid"),
            (lambda d: d["linux"].update(sysctl={"a": 1}), "config.linux.sysctl[a]"),
            (lambda d: d.update(mounts={}), "config.mounts"),
        ],
    )
    def test_wrong_json_type(self, config_data, mutate, where):
        mutate(config_data)

        with pytest.raises(OCIError, match=r"^" + where.replace("[", r"\[")):
            parse_oci_config(config_data)

    def test_not_an_object(self):
        with pytest.raises(OCIError):
            parse_oci_config([])

    def test_config_is_immutable(self, config_data):
        config = parse_oci_config(config_data)

        with pytest.raises(AttributeError):
            config.hostname = "other"


class TestLoad:
    """Test load_oci_config and load_bundle."""

    def test_load_bundle(self, config_data, write_bundle):
        path = write_bundle(config_data)

        bundle = load_bundle(path)

        assert bundle.path == path
        assert bundle.rootfs == os.path.join(path, "rootfs")
        assert bundle.config.hostname == "myhost"

    def test_absolute_root_path_stays_in_bundle(self, config_data, tmp_path):
        bundle = tmp_path / "bundle"
        (bundle / "srv" / "rootfs").mkdir(parents=True)
        config_data["root"]["path"] = "/srv/rootfs"
        (bundle / "config.json").write_text(json.dumps(config_data))

        loaded = load_bundle(str(bundle))

        assert loaded.rootfs == os.path.join(str(bundle), "srv/rootfs")
        assert loaded.rootfs.startswith(str(bundle))

    def test_absolute_root_path_ignores_host(self, config_data, tmp_path):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        bundle = tmp_path / "bundle"
        bundle.mkdir()
        config_data["root"]["path"] = str(elsewhere)
        (bundle / "config.json").write_text(json.dumps(config_data))

        with pytest.raises(OCIError, match="Cannot find the root path"):
            load_bundle(str(bundle))

    def test_empty_path(self):
        with pytest.raises(OCIError, match="shouldn't be empty"):
            load_bundle("")

    def test_missing_bundle(self, tmp_path):
        with pytest.raises(OCIError, match="does not exist"):
            load_bundle(str(tmp_path / "nope"))

    def test_missing_config(self, tmp_path):
        with pytest.raises(OCIError, match="config.json not found"):
            load_oci_config(str(tmp_path))

    def test_invalid_json(self, tmp_path):
        (tmp_path / "config.json").write_text("{not json")

        with pytest.raises(OCIError, match="Invalid JSON"):
            load_oci_config(str(tmp_path))

    def test_not_utf8(self, tmp_path):
        (tmp_path / "config.json").write_bytes(b'{"hostname": "\xff\xfe"}')

        with pytest.raises(OCIError, match="not encoded in UTF-8"):
            load_oci_config(str(tmp_path))

    def test_missing_rootfs(self, config_data, write_bundle):
        path = write_bundle(config_data)
        os.rmdir(os.path.join(path, "rootfs"))

        with pytest.raises(OCIError, match="Cannot find the root path"):
            load_bundle(path)

    def test_rootfs_not_a_directory(self, config_data, write_bundle):
        config_data["root"]["path"] = "rootfs.img"
        path = write_bundle(config_data)
        os.rmdir(os.path.join(path, "rootfs.img"))
        with open(os.path.join(path, "rootfs.img"), "w") as f:
            f.write("")

        with pytest.raises(OCIError, match="is not a directory"):
            load_bundle(path)
