"""Materialization of an unpacked template tree into a commit manifest."""
import base64
import tempfile
from pathlib import Path
from typing import Optional, Union

from glfast.core.logger import get_logger
from glfast.models.config import TemplateSettings
from glfast.models.template import TemplateParameters
from glfast.scaffold.archive import extract_archive
from glfast.scaffold.classifier import Classification, EncodingClassifier
from glfast.scaffold.errors import FileReadError
from glfast.scaffold.manifest import FileEncoding, Manifest, ManifestBuilder, MaterializedFile
from glfast.scaffold.paths import rename_path
from glfast.scaffold.renderer import TemplateRenderer

logger = get_logger(__name__)


class Materializer:
    """Turns a template tree into the files of a new project.

    Args:
        settings: Template settings (extension sets, collision policy).
            Defaults are used when omitted.
        renderer: Renderer for template files, mainly for injecting extra
            template functions
    """

    def __init__(
        self,
        settings: Optional[TemplateSettings] = None,
        renderer: Optional[TemplateRenderer] = None,
    ):
        self.settings = settings or TemplateSettings()
        self.classifier = EncodingClassifier.from_settings(self.settings)
        self.renderer = renderer or TemplateRenderer()

    def materialize(self, root_path: Union[str, Path], parameters: TemplateParameters) -> Manifest:
        """Walk ``root_path`` and build the manifest for ``parameters``.

        Every descendant is visited once, in sorted order. Directories add
        nothing to the manifest; each regular file is renamed, classified
        and encoded.

        Raises:
            FileReadError: A file could not be read or is not valid UTF-8
            TemplateError: A template file failed to render
            PathCollisionError: Two files renamed onto the same path and
                collisions are not allowed
        """
        root = Path(root_path)
        builder = ManifestBuilder(allow_collisions=self.settings.allow_path_collisions)
        counts = {classification: 0 for classification in Classification}

        for path in sorted(root.rglob("*")):
            if path.is_dir():
                continue

            relative = path.relative_to(root).as_posix()
            repository_path = rename_path(parameters, relative)
            classification = self.classifier.classify(repository_path)
            builder.add(self._materialize_file(path, repository_path, classification, parameters))
            counts[classification] += 1

        manifest = builder.build()
        logger.info(
            f"Materialized {len(manifest)} files for {parameters.name} "
            f"({counts[Classification.TEMPLATE]} rendered, "
            f"{counts[Classification.TEXT]} copied, "
            f"{counts[Classification.BASE64]} binary)"
        )
        return manifest

    def _materialize_file(
        self,
        path: Path,
        repository_path: str,
        classification: Classification,
        parameters: TemplateParameters,
    ) -> MaterializedFile:
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise FileReadError(path, exc.strerror or str(exc)) from exc

        if classification is Classification.BASE64:
            return MaterializedFile(
                repository_path=repository_path,
                content=base64.b64encode(raw).decode("ascii"),
                encoding=FileEncoding.BASE64,
                source_path=str(path),
            )

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FileReadError(
                path,
                f"not valid UTF-8 ({exc.reason} at byte {exc.start}); "
                f"add its extension to base64_extensions",
            ) from exc

        if classification is Classification.TEMPLATE:
            logger.debug(f"Rendering {repository_path}")
            text = self.renderer.render(parameters, text, source=repository_path)

        return MaterializedFile(
            repository_path=repository_path,
            content=text,
            encoding=FileEncoding.TEXT,
            source_path=str(path),
        )

    def materialize_archive(
        self,
        data: bytes,
        parameters: TemplateParameters,
        workdir: Optional[Union[str, Path]] = None,
    ) -> Manifest:
        """Extract a tar.gz template archive and materialize it.

        Args:
            data: gzip-compressed tar archive of the template repository
            parameters: Project parameters
            workdir: Directory to unpack into; a temporary directory that is
                removed afterwards is used when omitted
        """
        if workdir is not None:
            root = extract_archive(data, Path(workdir))
            return self.materialize(root, parameters)

        with tempfile.TemporaryDirectory(prefix="glfast-template-") as tmp:
            root = extract_archive(data, Path(tmp))
            return self.materialize(root, parameters)


def materialize_archive(
    data: bytes,
    parameters: TemplateParameters,
    settings: Optional[TemplateSettings] = None,
    workdir: Optional[Union[str, Path]] = None,
) -> Manifest:
    """Extract ``data`` and build its manifest with a one-off ``Materializer``."""
    return Materializer(settings).materialize_archive(data, parameters, workdir=workdir)
