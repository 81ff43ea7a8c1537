"""Template library - curated reference scripts loaded once at startup."""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from ..models.template import Template, TemplateSource

logger = logging.getLogger(__name__)


class TemplateLibraryError(ValueError):
    """Raised when the library config is malformed."""


class TemplateLibrary:
    """Read-only collection of reference templates."""

    def __init__(self, templates: Iterable[Template] = ()):
        items = tuple(templates)
        by_id: dict[str, Template] = {}
        for template in items:
            if template.id in by_id:
                raise TemplateLibraryError(f"Duplicate template id: {template.id}")
            by_id[template.id] = template

        self._templates = items
        self._by_id = MappingProxyType(by_id)

    @classmethod
    def load(
        cls,
        templates_path: str | Path,
        config_path: str | Path = "templates_config.json",
    ) -> "TemplateLibrary":
        """Load templates from a JSON config and per-template script files.

        Args:
            templates_path: Directory holding the script files.
            config_path: JSON config; relative paths resolve against templates_path.

        Returns:
            Loaded library (empty if the config is missing).
        """
        templates_dir = Path(templates_path)
        config_file = Path(config_path)
        if not config_file.is_absolute():
            config_file = templates_dir / config_file

        if not config_file.exists():
            logger.warning(f"Templates config not found: {config_file}")
            return cls()

        with open(config_file, "r", encoding="utf-8") as f:
            try:
                config = json.load(f)
            except json.JSONDecodeError as e:
                raise TemplateLibraryError(f"Invalid templates config {config_file}: {e}") from e

        templates = [
            cls._parse_entry(item, templates_dir)
            for item in config.get("templates", [])
        ]
        library = cls(templates)
        logger.info(f"Loaded {len(library)} templates from {config_file}")
        return library

    @staticmethod
    def _parse_entry(item: dict, templates_dir: Path) -> Template:
        try:
            template_id = item["id"]
            source = TemplateSource(item["source"])
        except KeyError as e:
            raise TemplateLibraryError(f"Template entry missing field {e}: {item}") from e
        except ValueError as e:
            raise TemplateLibraryError(f"Template '{item.get('id')}': {e}") from e

        if "code" in item:
            code = item["code"]
        else:
            code_file = templates_dir / item.get("file", f"{template_id}.pine")
            if not code_file.exists():
                raise TemplateLibraryError(
                    f"Template '{template_id}': script file not found: {code_file}"
                )
            code = code_file.read_text(encoding="utf-8")

        return Template(
            id=template_id,
            name=item.get("name", template_id),
            author=item.get("author", ""),
            source=source,
            keywords=tuple(item.get("keywords", [])),
            categories=tuple(item.get("categories", [])),
            code=code,
            description=item.get("description", ""),
            url=item.get("url", ""),
        )

    @property
    def templates(self) -> tuple[Template, ...]:
        return self._templates

    def get(self, template_id: str) -> Optional[Template]:
        return self._by_id.get(template_id)

    def __iter__(self) -> Iterator[Template]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._by_id
