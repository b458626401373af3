"""Prowl configuration.

ProwlConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path

# Names inside the output directory
ARTIFACTS_DIR = "pages"
MANIFEST_FILE = "manifest.json"


@dataclass(frozen=True, slots=True)
class ProwlConfig:
    """Configuration for a prowl project.

    Attributes:
        root: Path to the project root (contains pages/, templates/, public/).
              Always resolved to an absolute path on construction.
        host: Bind address for serve mode.
        port: Bind port for serve mode.
        workers: Number of Pounce workers (0 = auto-detect).
        pages_dir: Directory containing page modules.
        templates_dir: Directory containing Kida templates.
        public_dir: Directory of files served as-is at ``/``.
        output: Build output directory (artifacts and manifest).
        lang: ``lang`` attribute of rendered documents.
        title: Default document title.

    """

    root: Path = field(default_factory=Path.cwd)
    host: str = "127.0.0.1"
    port: int = 3000
    workers: int = 0
    pages_dir: str = "pages"
    templates_dir: str = "templates"
    public_dir: str = "public"
    output: Path = field(default_factory=lambda: Path(".prowl"))
    lang: str = "en"
    title: str = "prowl"

    def __post_init__(self) -> None:
        # Page paths from the scanner are resolved; root must match them
        # so client component paths can be taken relative to it.
        object.__setattr__(self, "root", Path(self.root).resolve())

    @property
    def pages_path(self) -> Path:
        """Absolute path to the pages directory."""
        return self.root / self.pages_dir

    @property
    def templates_path(self) -> Path:
        """Absolute path to templates directory."""
        return self.root / self.templates_dir

    @property
    def public_path(self) -> Path:
        """Absolute path to public assets directory."""
        return self.root / self.public_dir

    @property
    def output_path(self) -> Path:
        """Absolute path to output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

    @property
    def artifacts_path(self) -> Path:
        """Where prerendered ``.html``/``.json`` pairs are written."""
        return self.output_path / ARTIFACTS_DIR

    @property
    def manifest_path(self) -> Path:
        """Where the route manifest is persisted."""
        return self.output_path / MANIFEST_FILE
