"""Template materialization.

A template is a directory tree. Files ending in ``.tmpl`` are rendered with
Jinja2 (the suffix is dropped) from a flat substitution context; every other
file is copied as-is. Path segments are rendered too, e.g.
``src/{{ package_directory }}/README.md``.

Templates come either from a local directory or from the latest release of a
GitHub repository.
"""

import logging
import os
import shutil
import ssl
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx
import jinja2
import truststore

from .errors import TemplateError

TEMPLATE_SUFFIX = ".tmpl"

ssl_context = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

_environment = jinja2.Environment(undefined=jinja2.StrictUndefined, keep_trailing_newline=True)


def _github_token(cli_token: str | None = None) -> str | None:
    """Return sanitized GitHub token (cli arg takes precedence) or None."""
    return ((cli_token or os.getenv("GH_TOKEN") or os.getenv("GITHUB_TOKEN") or "").strip()) or None


def _github_auth_headers(cli_token: str | None = None) -> dict:
    """Return Authorization header dict only when a non-empty token exists."""
    token = _github_token(cli_token)
    return {"Authorization": f"Bearer {token}"} if token else {}


@dataclass(frozen=True)
class TemplateSource:
    path: Optional[Path] = None
    repo: Optional[str] = None  # "owner/name"
    github_token: Optional[str] = None
    verify_tls: bool = True

    def __post_init__(self):
        if (self.path is None) == (self.repo is None):
            raise TemplateError("A template source needs exactly one of path or repo")
        if self.repo is not None and self.repo.count("/") != 1:
            raise TemplateError(f"Template repo must look like 'owner/name', got '{self.repo}'")

    def describe(self) -> str:
        return str(self.path) if self.path is not None else f"github:{self.repo}"


def render_text(text: str, context: Mapping[str, Any]) -> str:
    """Render ``text`` as a Jinja2 template. Undefined names are errors."""
    try:
        return _environment.from_string(text).render(**context)
    except jinja2.UndefinedError as e:
        raise TemplateError(f"Template variable is not defined: {e.message}")
    except jinja2.TemplateSyntaxError as e:
        raise TemplateError(f"Template syntax error on line {e.lineno}: {e.message}")


class TemplateMaterializer:
    def __init__(self, client: httpx.Client | None = None, logger: logging.Logger | None = None):
        self._client = client
        self.logger = logger or logging.getLogger(__name__)

    def materialize(self, source: TemplateSource, destination: Path, context: Mapping[str, Any]) -> list[Path]:
        """Render ``source`` into ``destination``. Returns the files written.

        Nothing is written if any target file already exists.
        """
        if source.path is not None:
            return self._render_tree(Path(source.path), Path(destination), context)
        with tempfile.TemporaryDirectory() as temp_dir:
            root = self.fetch_release(source, Path(temp_dir))
            return self._render_tree(root, Path(destination), context)

    def render_file(self, source_file: Path, target_file: Path, context: Mapping[str, Any]) -> Path:
        try:
            text = Path(source_file).read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateError(f"Could not read template {source_file}: {e}")
        target_file = Path(target_file)
        target_file.parent.mkdir(parents=True, exist_ok=True)
        target_file.write_text(render_text(text, context), encoding="utf-8")
        self.logger.debug("rendered %s -> %s", source_file, target_file)
        return target_file

    def _render_tree(self, root: Path, destination: Path, context: Mapping[str, Any]) -> list[Path]:
        if not root.is_dir():
            raise TemplateError(f"Template directory does not exist: {root}")

        plan: list[tuple[Path, Path]] = []
        for item in sorted(root.rglob("*")):
            if not item.is_file():
                continue
            rel_parts = [render_text(part, context) for part in item.relative_to(root).parts]
            if rel_parts[-1].endswith(TEMPLATE_SUFFIX):
                rel_parts[-1] = rel_parts[-1][: -len(TEMPLATE_SUFFIX)]
            plan.append((item, destination.joinpath(*rel_parts)))

        conflicts = [str(target) for _, target in plan if target.exists()]
        if conflicts:
            raise TemplateError(
                f"Refusing to overwrite {len(conflicts)} existing file(s), first: {conflicts[0]}",
                title="Destination Conflict",
            )

        written = []
        for item, target in plan:
            if item.name.endswith(TEMPLATE_SUFFIX):
                self.render_file(item, target, context)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(item, target)
            written.append(target)
        self.logger.debug("materialized %d file(s) from %s into %s", len(written), root, destination)
        return written

    def fetch_release(self, source: TemplateSource, download_dir: Path) -> Path:
        """Download the latest release zipball of ``source.repo`` and extract it.

        Returns the extracted template root (GitHub's single top-level folder
        is flattened away).
        """
        client = self._client or httpx.Client(verify=ssl_context if source.verify_tls else False)
        api_url = f"https://api.github.com/repos/{source.repo}/releases/latest"
        headers = _github_auth_headers(source.github_token)
        self.logger.debug("fetching release information from %s", api_url)
        try:
            response = client.get(api_url, timeout=30, follow_redirects=True, headers=headers)
            if response.status_code != 200:
                raise TemplateError(f"GitHub API returned {response.status_code} for {api_url}")
            try:
                release_data = response.json()
            except ValueError as je:
                raise TemplateError(f"Failed to parse release JSON: {je}")
            zip_url = release_data.get("zipball_url")
            if not zip_url:
                raise TemplateError(f"Release {release_data.get('tag_name', '?')} has no zipball")

            zip_path = download_dir / f"{source.repo.replace('/', '-')}.zip"
            with client.stream("GET", zip_url, timeout=60, follow_redirects=True, headers=headers) as stream:
                if stream.status_code != 200:
                    raise TemplateError(f"Download failed with {stream.status_code}")
                with open(zip_path, "wb") as f:
                    for chunk in stream.iter_bytes(chunk_size=8192):
                        f.write(chunk)
        except httpx.HTTPError as e:
            raise TemplateError(f"Error downloading template from {source.repo}: {e}")
        self.logger.debug("downloaded %s (release %s)", zip_path.name, release_data.get("tag_name"))

        extract_dir = download_dir / "template"
        try:
            with zipfile.ZipFile(zip_path, "r") as zip_ref:
                zip_ref.extractall(extract_dir)
        except zipfile.BadZipFile as e:
            raise TemplateError(f"Downloaded template is not a valid archive: {e}")
        finally:
            zip_path.unlink(missing_ok=True)

        # Handle GitHub-style ZIP with a single root directory
        extracted_items = list(extract_dir.iterdir())
        if len(extracted_items) == 1 and extracted_items[0].is_dir():
            return extracted_items[0]
        return extract_dir
