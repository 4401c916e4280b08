"""Create a GitLab project from a template project."""
from dataclasses import dataclass
from typing import Optional

from glfast.core.logger import get_logger
from glfast.models.config import TemplateSettings
from glfast.models.template import NO_PORT, TemplateParameters
from glfast.scaffold.core import Materializer
from glfast.services.host import RepositoryHost

logger = get_logger(__name__)


class ProjectExistsError(Exception):
    """Raised when the target project is already present on the host."""
    pass


@dataclass
class ProvisionResult:
    """Outcome of a successful provisioning run."""
    project_path: str
    template_path: str
    files: int
    variables: int
    runners: int
    default_branch: str


class ProjectProvisioner:
    """Provisions new projects from template projects on a repository host.

    Example:
        provisioner = ProjectProvisioner(GitLabClient(token), settings.template)
        provisioner.provision("backend-java-service", "billing-svc", "team1/backend", port=8080)
    """

    def __init__(
        self,
        host: RepositoryHost,
        settings: Optional[TemplateSettings] = None,
        materializer: Optional[Materializer] = None,
    ):
        self.host = host
        self.settings = settings or TemplateSettings()
        self.materializer = materializer or Materializer(self.settings)

    def template_path(self, template: str) -> str:
        return f"{self.settings.namespace}/{template}"

    def list_templates(self):
        """Return ``{template name: description}`` from the template group."""
        return self.host.list_group_projects(self.settings.namespace)

    def provision(
        self,
        template: str,
        name: str,
        group: str,
        port: int = NO_PORT,
        description: Optional[str] = None,
    ) -> ProvisionResult:
        """Create ``group/name`` and fill it from ``template``.

        Once the project exists every failure deletes it again before the
        original error is re-raised.

        Raises:
            ProjectExistsError: ``group/name`` already exists
            ScaffoldError: The template could not be materialized
            GitLabError: A host operation failed
        """
        parameters = TemplateParameters(name=name, port=port)
        project_path = f"{group}/{name}"
        source = self.template_path(template)

        if self.host.project_exists(project_path):
            raise ProjectExistsError(
                f"{project_path} already exists, please use a different project name."
            )

        self.host.create_project(name, group, description or name)
        try:
            return self._populate(source, project_path, parameters)
        except Exception:
            logger.error(f"Provisioning {project_path} failed, deleting the project")
            self._compensate(project_path)
            raise

    def _populate(self, source: str, project_path: str, parameters: TemplateParameters) -> ProvisionResult:
        variables = self.host.copy_project_variables(source, project_path)
        runners = self.host.enable_runners(source, project_path)

        archive = self.host.get_project_archive(source)
        if parameters.has_port:
            logger.info(f"Rendering {source} for {parameters.name} on port {parameters.port}")
        else:
            logger.info(f"Rendering {source} for {parameters.name} without a port")
        manifest = self.materializer.materialize_archive(archive, parameters)

        branch = self.settings.branch
        self.host.create_commit(project_path, manifest, branch, self.settings.commit_message)

        default_branch = branch
        if self.settings.dev_branch and self.settings.dev_branch != branch:
            self.host.create_branch(project_path, self.settings.dev_branch, branch)
            self.host.set_default_branch(project_path, self.settings.dev_branch)
            default_branch = self.settings.dev_branch

        return ProvisionResult(
            project_path=project_path,
            template_path=source,
            files=len(manifest),
            variables=variables,
            runners=runners,
            default_branch=default_branch,
        )

    def _compensate(self, project_path: str) -> None:
        try:
            self.host.delete_project(project_path)
        except Exception as exc:
            logger.error(f"Could not delete {project_path}: {exc}")
        else:
            logger.info(f"Project {project_path} deleted")
