"""Tests for k3sconvert parser."""

import pytest
import yaml

from k3sconvert.errors import ComposeParseError
from k3sconvert.parser import (
    find_compose_file,
    load_docker_compose,
    parse_compose_project,
)


@pytest.fixture
def docker_compose_content():
    """Sample docker-compose.yml content."""
    return {
        "version": "2",
        "services": {
            "web": {
                "image": "nginx:alpine",
                "ports": ["80:80"],
                "links": ["db"],
            },
            "db": {
                "image": "postgres:15",
                "volumes": ["/srv/db:/var/lib/postgresql/data"],
                "environment": {"POSTGRES_PASSWORD": "secret"},
                "restart": "always",
            },
        },
    }


@pytest.fixture
def compose_file(docker_compose_content, tmp_path):
    """Create a temporary docker-compose.yml."""
    project_dir = tmp_path / "shop"
    project_dir.mkdir()
    path = project_dir / "docker-compose.yml"
    path.write_text(yaml.dump(docker_compose_content, sort_keys=False))
    return path


class TestFindComposeFile:
    def test_existing(self, compose_file):
        assert find_compose_file(str(compose_file)) == compose_file

    def test_alternative_name(self, tmp_path):
        alt = tmp_path / "compose.yaml"
        alt.write_text("services: {}\n")
        assert find_compose_file(str(tmp_path / "docker-compose.yml")) == alt

    def test_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            find_compose_file(str(tmp_path / "docker-compose.yml"))


class TestLoadDockerCompose:
    def test_load(self, compose_file, docker_compose_content):
        assert load_docker_compose(str(compose_file)) == docker_compose_content

    def test_empty_file(self, tmp_path):
        path = tmp_path / "docker-compose.yml"
        path.write_text("")
        assert load_docker_compose(str(path)) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "docker-compose.yml"
        path.write_text("services: [unclosed\n")
        with pytest.raises(ComposeParseError):
            load_docker_compose(str(path))

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "docker-compose.yml"
        path.write_text("- web\n- db\n")
        with pytest.raises(ComposeParseError, match="expected a mapping"):
            load_docker_compose(str(path))


class TestParseComposeProject:
    def test_parse(self, compose_file):
        project = parse_compose_project(str(compose_file))

        assert project.name == "shop"
        assert project.path == str(compose_file.parent.resolve())
        assert project.service_names == ["web", "db"]

        web, db = project.services
        assert web.links == ["db"]
        assert db.environment == ["POSTGRES_PASSWORD=secret"]
        assert db.restart == "always"

    def test_explicit_name(self, compose_file):
        assert parse_compose_project(str(compose_file), name="kube").name == "kube"

    def test_unquoted_no_restart(self, tmp_path):
        path = tmp_path / "docker-compose.yml"
        path.write_text("services:\n  job:\n    image: busybox\n    restart: no\n")
        project = parse_compose_project(str(path))
        assert project.services[0].restart == "no"

    def test_unquoted_colon_ports_stay_strings(self, tmp_path):
        path = tmp_path / "docker-compose.yml"
        path.write_text(
            "services:\n"
            "  ssh:\n"
            "    image: sshd\n"
            "    ports:\n"
            "      - 22:22\n"
            "      - 53:53\n"
            "      - 8080\n"
        )
        project = parse_compose_project(str(path))
        assert project.services[0].ports == ["22:22", "53:53", "8080"]


class TestComposeLoader:
    def test_plain_numbers_still_resolve(self, tmp_path):
        path = tmp_path / "docker-compose.yml"
        path.write_text("version: 2\nratio: 0.5\nport: 22:22\n")
        assert load_docker_compose(str(path)) == {
            "version": 2,
            "ratio": 0.5,
            "port": "22:22",
        }
