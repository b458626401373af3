"""Export layer — render-mode resolution and static artifacts.

Settles every route as SSG or SSR at build time and writes the
prerendered document/data pairs for the SSG ones.
"""

from prowl.export.artifacts import ArtifactStore, ExportedFile
from prowl.export.static import BuildResult, Disposition, StaticExporter

__all__ = ["ArtifactStore", "BuildResult", "Disposition", "ExportedFile", "StaticExporter"]
