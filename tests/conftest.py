"""Shared test fixtures for glfast tests."""
import io
import tarfile
from typing import Dict, Iterable, Optional

import pytest

from glfast.models.template import TemplateParameters


def build_archive(
    entries: Dict[str, Optional[bytes]],
    pax_headers: Optional[Dict[str, str]] = None,
    extra_members: Iterable[tarfile.TarInfo] = (),
) -> bytes:
    """Build a tar.gz archive in memory.

    ``entries`` maps member names to file content; ``None`` marks a
    directory. Members are written in the given order.
    """
    buffer = io.BytesIO()
    kwargs = {"format": tarfile.PAX_FORMAT}
    if pax_headers:
        kwargs["pax_headers"] = pax_headers
    with tarfile.open(fileobj=buffer, mode="w:gz", **kwargs) as tar:
        for name, content in entries.items():
            info = tarfile.TarInfo(name)
            if content is None:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            else:
                info.size = len(content)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(content))
        for member in extra_members:
            tar.addfile(member)
    return buffer.getvalue()


@pytest.fixture
def make_archive():
    """Factory fixture returning ``build_archive``."""
    return build_archive


@pytest.fixture
def billing_params():
    """Parameters for a backend service."""
    return TemplateParameters(name="billing-svc", port=8080)


@pytest.fixture
def frontend_params():
    """Parameters for a frontend without a port."""
    return TemplateParameters(name="hello-world-web")


@pytest.fixture
def template_tree(tmp_path):
    """Unpacked template root with a typical backend layout."""
    root = tmp_path / "backend-go-master-abc123"
    (root / "cmd" / "{{Name}}").mkdir(parents=True)
    (root / "assets").mkdir()
    (root / "cmd" / "{{Name}}" / "main.go").write_text(
        'package main\n\nconst service = "{{.Name}}"\nconst port = {{.Port}}\n'
    )
    (root / "Dockerfile").write_text("FROM golang:1.21\nEXPOSE {{.Port}}\n")
    (root / "README.md").write_text("# {{ToPascalCase .Name}}\n")
    (root / "LICENSE").write_text("MIT {{.Name}} stays literal\n")
    (root / "assets" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00{{.Name}}")
    return root
