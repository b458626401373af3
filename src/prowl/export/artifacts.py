"""Artifact store — prerendered page documents and data payloads on disk.

Layout under the artifacts root (``<output>/pages``)::

    index.html   index.json      # route "/"
    about.html   about.json      # route "/about"
    blog/1.html  blog/1.json     # route "/blog/:id", params {"id": "1"}

The ``.json`` payload is ``{"pageProps": {...}, "query": {...}}``.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from prowl._errors import RenderError

type ArtifactKind = Literal["html", "json"]


@dataclass(frozen=True, slots=True)
class ExportedFile:
    """Record of a single file written during the build.

    Attributes:
        artifact_path: Artifact address (e.g., ``"/blog/1"``).
        output_path: Absolute filesystem path to the written file.
        kind: ``"html"`` document or ``"json"`` data payload.
        size_bytes: Size of the written file in bytes.

    """

    artifact_path: str
    output_path: Path
    kind: ArtifactKind
    size_bytes: int


class ArtifactStore:
    """Reads and writes artifact pairs below one root directory.

    Args:
        root: Artifacts directory (``ProwlConfig.artifacts_path``).

    """

    __slots__ = ("_root",)

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()

    @property
    def root(self) -> Path:
        return self._root

    def file_for(self, artifact_path: str, kind: ArtifactKind) -> Path:
        """Map an artifact address to its file, refusing paths outside the root.

        Raises:
            RenderError: If the address escapes the artifacts root.

        """
        relative = artifact_path.lstrip("/")
        target = (self._root / f"{relative}.{kind}").resolve()
        if not target.is_relative_to(self._root):
            msg = f"Artifact path {artifact_path!r} escapes {self._root}"
            raise RenderError(msg)
        return target

    def write_page(
        self,
        artifact_path: str,
        html: str,
        page_props: dict[str, Any],
        query: dict[str, str],
    ) -> tuple[ExportedFile, ExportedFile]:
        """Write the document and data payload for one artifact address."""
        payload = json.dumps({"pageProps": page_props, "query": query}, ensure_ascii=False)
        return (
            self._write(artifact_path, "html", html),
            self._write(artifact_path, "json", payload),
        )

    def read(self, artifact_path: str, kind: ArtifactKind) -> str:
        """Read a previously written artifact.

        Raises:
            RenderError: If the artifact does not exist or cannot be read.

        """
        target = self.file_for(artifact_path, kind)
        try:
            return target.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Missing prerendered artifact {artifact_path}.{kind}: {exc}"
            raise RenderError(msg) from exc

    def _write(self, artifact_path: str, kind: ArtifactKind, text: str) -> ExportedFile:
        target = self.file_for(artifact_path, kind)
        target.parent.mkdir(parents=True, exist_ok=True)
        data = text.encode("utf-8")
        target.write_bytes(data)
        return ExportedFile(
            artifact_path=artifact_path,
            output_path=target,
            kind=kind,
            size_bytes=len(data),
        )
