"""Tests for k3sconvert project conversion."""

import io
import json

import pytest
import yaml

from k3sconvert.converter import (
    convert_project,
    emitted_kinds,
    link_targets,
    validate_options,
)
from k3sconvert.errors import ConfigurationConflict, InvalidPort, UnknownRestartPolicy
from k3sconvert.types import ComposeProject, ConvertOptions, ResourceKind


@pytest.fixture
def web_project():
    """Project with a single nginx service."""
    return ComposeProject.from_dict("demo", "/tmp/demo", {
        "services": {
            "web": {"image": "nginx", "ports": ["80"]},
        },
    })


@pytest.fixture
def linked_project():
    """Project where 'a' links to 'b', which is not defined, and to 'c'."""
    return ComposeProject.from_dict("demo", "/tmp/demo", {
        "services": {
            "a": {"image": "alpine", "links": ["b", "c:cache"]},
            "c": {"image": "redis", "links": ["b"]},
        },
    })


class TestValidateOptions:
    def test_defaults_are_valid(self):
        validate_options(ConvertOptions())

    def test_out_and_stdout(self):
        with pytest.raises(ConfigurationConflict, match="--out and --stdout"):
            validate_options(ConvertOptions(out_file="all.json", to_stdout=True))

    def test_chart_and_stdout(self):
        with pytest.raises(ConfigurationConflict, match="chart"):
            validate_options(ConvertOptions(create_chart=True, to_stdout=True))

    def test_single_output_with_two_controllers(self):
        options = ConvertOptions(
            out_file="all.json", create_deployment=True, create_daemonset=True
        )
        with pytest.raises(ConfigurationConflict, match="only one type"):
            validate_options(options)

    def test_stdout_with_two_controllers(self):
        options = ConvertOptions(
            to_stdout=True, create_daemonset=True, create_replicaset=True
        )
        with pytest.raises(ConfigurationConflict):
            validate_options(options)

    def test_files_with_all_controllers(self):
        validate_options(ConvertOptions(
            create_deployment=True, create_daemonset=True, create_replicaset=True
        ))


class TestEmittedKinds:
    def test_default(self):
        assert emitted_kinds(ConvertOptions()) == [
            ResourceKind.SERVICE,
            ResourceKind.REPLICATION_CONTROLLER,
        ]

    def test_files_keep_replication_controller(self):
        options = ConvertOptions(create_deployment=True, create_replicaset=True)
        assert emitted_kinds(options) == [
            ResourceKind.SERVICE,
            ResourceKind.DEPLOYMENT,
            ResourceKind.REPLICA_SET,
            ResourceKind.REPLICATION_CONTROLLER,
        ]

    def test_single_output_drops_replication_controller(self):
        options = ConvertOptions(to_stdout=True, create_daemonset=True)
        assert emitted_kinds(options) == [
            ResourceKind.SERVICE,
            ResourceKind.DAEMON_SET,
        ]

    def test_single_output_without_controllers(self):
        options = ConvertOptions(out_file="all.json")
        assert emitted_kinds(options) == [
            ResourceKind.SERVICE,
            ResourceKind.REPLICATION_CONTROLLER,
        ]


class TestLinkTargets:
    def test_deduplicated_in_first_seen_order(self, linked_project):
        assert link_targets(linked_project) == ["b", "c"]


class TestConvertProject:
    def test_web_end_to_end(self, web_project, tmp_path):
        emitted = convert_project(web_project, ConvertOptions(), output_dir=str(tmp_path))

        assert emitted == [
            ("web", ResourceKind.SERVICE),
            ("web", ResourceKind.REPLICATION_CONTROLLER),
        ]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["web-rc.json", "web-svc.json"]

        rc = json.loads((tmp_path / "web-rc.json").read_text())
        containers = rc["spec"]["template"]["spec"]["containers"]
        assert len(containers) == 1
        assert containers[0]["name"] == "web"
        assert containers[0]["image"] == "nginx"
        assert containers[0]["ports"] == [{"containerPort": 80}]
        assert rc["spec"]["template"]["spec"]["restartPolicy"] == "Always"

        svc = json.loads((tmp_path / "web-svc.json").read_text())
        assert svc["kind"] == "Service"
        assert svc["spec"]["ports"][0]["port"] == 80

    def test_yaml_files(self, web_project, tmp_path):
        convert_project(
            web_project, ConvertOptions(generate_yaml=True), output_dir=str(tmp_path)
        )
        assert sorted(p.name for p in tmp_path.iterdir()) == ["web-rc.yaml", "web-svc.yaml"]
        rc = yaml.safe_load((tmp_path / "web-rc.yaml").read_text())
        assert rc["kind"] == "ReplicationController"

    def test_undefined_link_produces_no_file(self, linked_project, tmp_path):
        emitted = convert_project(linked_project, ConvertOptions(), output_dir=str(tmp_path))

        assert ("b", ResourceKind.SERVICE) not in emitted
        assert ("a", ResourceKind.SERVICE) in emitted
        # A linked service that is defined keeps its manifest
        assert ("c", ResourceKind.SERVICE) in emitted
        assert not any(p.name.startswith("b-") for p in tmp_path.iterdir())

    def test_emission_order(self, linked_project, tmp_path):
        options = ConvertOptions(create_deployment=True, create_replicaset=True)
        emitted = convert_project(linked_project, options, output_dir=str(tmp_path))

        assert emitted == [
            ("a", ResourceKind.SERVICE),
            ("c", ResourceKind.SERVICE),
            ("a", ResourceKind.DEPLOYMENT),
            ("c", ResourceKind.DEPLOYMENT),
            ("a", ResourceKind.REPLICA_SET),
            ("c", ResourceKind.REPLICA_SET),
            ("a", ResourceKind.REPLICATION_CONTROLLER),
            ("c", ResourceKind.REPLICATION_CONTROLLER),
        ]
        assert len(list(tmp_path.iterdir())) == 8

    def test_stdout(self, linked_project, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        stream = io.StringIO()
        options = ConvertOptions(to_stdout=True, generate_yaml=True, create_daemonset=True)

        convert_project(linked_project, options, stream=stream)

        docs = [d for d in yaml.safe_load_all(stream.getvalue()) if d]
        assert [(d["kind"], d["metadata"]["name"]) for d in docs] == [
            ("Service", "a"),
            ("Service", "c"),
            ("DaemonSet", "a"),
            ("DaemonSet", "c"),
        ]
        assert list(tmp_path.iterdir()) == []

    def test_aggregate_file(self, web_project, tmp_path, capsys):
        out = tmp_path / "all.yaml"
        options = ConvertOptions(out_file=str(out), generate_yaml=True)

        convert_project(web_project, options, output_dir=str(tmp_path))

        assert [p.name for p in tmp_path.iterdir()] == ["all.yaml"]
        docs = [d for d in yaml.safe_load_all(out.read_text()) if d]
        assert [d["kind"] for d in docs] == ["Service", "ReplicationController"]
        assert f'file "{out}" created' in capsys.readouterr().out

    def test_conflict_writes_nothing(self, web_project, tmp_path):
        out = tmp_path / "all.json"
        options = ConvertOptions(
            out_file=str(out), create_deployment=True, create_daemonset=True
        )

        with pytest.raises(ConfigurationConflict):
            convert_project(web_project, options, output_dir=str(tmp_path))

        assert list(tmp_path.iterdir()) == []

    def test_invalid_port_aborts(self, tmp_path):
        project = ComposeProject.from_dict("demo", "/tmp/demo", {
            "services": {"web": {"image": "nginx", "ports": ["eighty"]}},
        })
        with pytest.raises(InvalidPort, match="for service web"):
            convert_project(project, ConvertOptions(), output_dir=str(tmp_path))

    def test_unknown_restart_policy_aborts(self, tmp_path):
        project = ComposeProject.from_dict("demo", "/tmp/demo", {
            "services": {"web": {"image": "nginx", "restart": "unless-stopped"}},
        })
        with pytest.raises(UnknownRestartPolicy):
            convert_project(project, ConvertOptions(), output_dir=str(tmp_path))

    def test_chart_is_ignored(self, web_project, tmp_path, caplog):
        convert_project(
            web_project, ConvertOptions(create_chart=True), output_dir=str(tmp_path)
        )
        assert "chart generation is not supported" in caplog.text
        assert len(list(tmp_path.iterdir())) == 2
