"""Tests for provisioning projects from templates."""
import logging

import pytest

from glfast.models.config import TemplateSettings
from glfast.models.template import NO_PORT
from glfast.scaffold import ExtractionError
from glfast.services.gitlab import GitLabError
from glfast.services.host import RepositoryHost
from glfast.services.provisioner import ProjectExistsError, ProjectProvisioner


class FakeHost(RepositoryHost):
    """In-memory repository host recording every call."""

    def __init__(self, archive, existing=(), fail_on=None):
        self.archive = archive
        self.projects = set(existing)
        self.fail_on = fail_on
        self.calls = []
        self.commits = {}

    def _call(self, name, *args):
        self.calls.append(name)
        if name == self.fail_on:
            raise GitLabError(f"{name} failed", 500)

    def list_group_projects(self, group):
        self._call("list_group_projects", group)
        return {"backend-go": "Go service"}

    def project_exists(self, project_path):
        self._call("project_exists", project_path)
        return project_path in self.projects

    def get_project_archive(self, project_path):
        self._call("get_project_archive", project_path)
        return self.archive

    def create_project(self, name, group, description):
        self._call("create_project", name, group, description)
        self.projects.add(f"{group}/{name}")
        self.description = description

    def copy_project_variables(self, source, target):
        self._call("copy_project_variables", source, target)
        return 2

    def enable_runners(self, source, target):
        self._call("enable_runners", source, target)
        return 1

    def create_commit(self, project_path, manifest, branch, message):
        self._call("create_commit", project_path, manifest, branch, message)
        self.commits[branch] = (manifest, message)

    def create_branch(self, project_path, branch, ref):
        self._call("create_branch", project_path, branch, ref)

    def set_default_branch(self, project_path, branch):
        self._call("set_default_branch", project_path, branch)
        self.default_branch = branch

    def delete_project(self, project_path):
        self._call("delete_project", project_path)
        self.projects.discard(project_path)


@pytest.fixture
def archive(make_archive):
    return make_archive({
        "backend-go-master/": None,
        "backend-go-master/README.md": b"# {{ToPascalCase .Name}} on {{.Port}}\n",
        "backend-go-master/cmd/{{Name}}/main.go": b"package main\n",
    })


class TestProvision:
    """Happy paths."""

    def test_full_run(self, archive):
        host = FakeHost(archive)

        result = ProjectProvisioner(host).provision("backend-go", "billing-svc", "team1/backend", port=8080)

        assert result.project_path == "team1/backend/billing-svc"
        assert result.template_path == "template/backend-go"
        assert (result.files, result.variables, result.runners) == (2, 2, 1)
        assert result.default_branch == "dev"
        manifest, message = host.commits["master"]
        assert manifest["README.md"].content == "# BillingSvc on 8080\n"
        assert "cmd/billing-svc/main.go" in manifest
        assert message == "init project [skip ci]"
        assert host.description == "billing-svc"
        assert host.default_branch == "dev"

    def test_without_dev_branch(self, archive):
        host = FakeHost(archive)
        settings = TemplateSettings(namespace="scaffolds", branch="main", dev_branch=None)

        result = ProjectProvisioner(host, settings).provision("backend-go", "web", "team1", description="Web")

        assert result.template_path == "scaffolds/backend-go"
        assert result.default_branch == "main"
        assert "create_branch" not in host.calls
        assert host.description == "Web"

    @pytest.mark.parametrize("port,message", [
        (8080, "on port 8080"),
        (NO_PORT, "without a port"),
    ])
    def test_logs_port(self, archive, caplog, port, message):
        caplog.set_level(logging.INFO, logger="glfast")

        ProjectProvisioner(FakeHost(archive)).provision("backend-go", "billing-svc", "team1", port=port)

        assert f"Rendering template/backend-go for billing-svc {message}" in caplog.text

    def test_list_templates_uses_namespace(self, archive):
        assert ProjectProvisioner(FakeHost(archive)).list_templates() == {"backend-go": "Go service"}


class TestProvisionFailures:
    """Failures after creation delete the new project."""

    def test_existing_project(self, archive):
        host = FakeHost(archive, existing={"team1/billing-svc"})

        with pytest.raises(ProjectExistsError, match="already exists"):
            ProjectProvisioner(host).provision("backend-go", "billing-svc", "team1")

        assert "create_project" not in host.calls
        assert "delete_project" not in host.calls

    def test_bad_archive_deletes_project(self):
        host = FakeHost(b"not an archive")

        with pytest.raises(ExtractionError):
            ProjectProvisioner(host).provision("backend-go", "billing-svc", "team1")

        assert host.calls[-1] == "delete_project"
        assert "create_commit" not in host.calls
        assert "team1/billing-svc" not in host.projects

    @pytest.mark.parametrize("step", ["copy_project_variables", "create_commit", "set_default_branch"])
    def test_host_failure_deletes_project(self, archive, step):
        host = FakeHost(archive, fail_on=step)

        with pytest.raises(GitLabError, match=step):
            ProjectProvisioner(host).provision("backend-go", "billing-svc", "team1", port=8080)

        assert host.calls[-1] == "delete_project"
        assert "team1/billing-svc" not in host.projects

    def test_failed_cleanup_keeps_original_error(self, archive):
        host = FakeHost(b"garbage", fail_on="delete_project")

        with pytest.raises(ExtractionError):
            ProjectProvisioner(host).provision("backend-go", "billing-svc", "team1")

    @pytest.mark.parametrize("name", ["", "../escape", ".."])
    def test_invalid_parameters_fail_before_creation(self, archive, name):
        host = FakeHost(archive)

        with pytest.raises(ValueError):
            ProjectProvisioner(host).provision("backend-go", name, "team1")

        assert host.calls == []
