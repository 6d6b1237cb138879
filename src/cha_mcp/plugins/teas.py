"""Tea catalog plugin.

Serves a static catalog of Chinese teas as resources (the whole catalog and
one resource per tea) and provides lookup tools by type and by region.
"""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

from cha_mcp.plugins.base import (
    PluginBase,
    ResourceDefinition,
    ResourceResult,
    ToolDefinition,
    ToolResult,
    json_content,
)

CATALOG_URI = "tea://teas"
MIME_TYPE = "application/json"


class CatalogLoadError(Exception):
    """Raised when the tea catalog cannot be loaded."""

    pass


@dataclass(frozen=True)
class Tea:
    """A single catalog entry."""

    name: str
    simplified: str
    traditional: str
    description: str
    type: str
    origin: str
    brewingTemp: str  # noqa: N815 - matches the wire format
    steepTime: str  # noqa: N815

    @property
    def slug(self) -> str:
        return re.sub(r"\s+", "-", self.name.lower())

    @property
    def uri(self) -> str:
        return f"{CATALOG_URI}/{self.slug}"


def load_catalog(path: Path | None = None) -> list[Tea]:
    """Load the tea catalog.

    Args:
        path: JSON file holding a list of teas. Defaults to the catalog
            shipped with the package.

    Returns:
        List of Tea entries in file order.

    Raises:
        CatalogLoadError: If the file is missing or malformed.
    """
    try:
        if path is None:
            raw = (
                importlib_resources.files("cha_mcp.plugins")
                .joinpath("data/teas.json")
                .read_text(encoding="utf-8")
            )
        else:
            raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogLoadError(f"Cannot load tea catalog: {e}") from e

    if not isinstance(data, list):
        raise CatalogLoadError("Tea catalog must be a list")

    try:
        return [Tea(**item) for item in data]
    except TypeError as e:
        raise CatalogLoadError(f"Invalid tea entry: {e}") from e


class TeaCatalogPlugin(PluginBase):
    """Plugin exposing the tea catalog.

    Tools:
        - getTeasByType: Teas whose type contains the given text
        - getTeasByRegion: Teas whose origin contains the given text

    Resources:
        - tea://teas: Summary of every tea
        - tea://teas/{slug}: Full record of one tea
    """

    def __init__(self, teas: list[Tea] | None = None) -> None:
        """Initialize the plugin.

        Args:
            teas: Catalog entries (defaults to the packaged catalog).
        """
        self._teas = list(teas) if teas is not None else load_catalog()

    @property
    def name(self) -> str:
        """Return plugin identifier."""
        return "teas"

    @property
    def version(self) -> str:
        """Return plugin version."""
        return "0.1.0"

    @property
    def teas(self) -> list[Tea]:
        return list(self._teas)

    def get_tools(self) -> list[ToolDefinition]:
        """Return available tools."""
        return [
            ToolDefinition(
                name="getTeasByType",
                description="Get all teas of a specific type",
                input_schema={
                    "type": "object",
                    "properties": {
                        "type": {
                            "type": "string",
                            "description": "Tea type to search for",
                        },
                    },
                    "required": ["type"],
                },
            ),
            ToolDefinition(
                name="getTeasByRegion",
                description="Get all teas from a specific province or region",
                input_schema={
                    "type": "object",
                    "properties": {
                        "region": {
                            "type": "string",
                            "description": "Province or region name to search for",
                        },
                    },
                    "required": ["region"],
                },
            ),
        ]

    def get_resources(self) -> list[ResourceDefinition]:
        """Return the catalog resource followed by one resource per tea."""
        definitions = [
            ResourceDefinition(
                uri=CATALOG_URI,
                name="All Teas",
                description="List of all available teas",
                mime_type=MIME_TYPE,
            )
        ]
        for tea in self._teas:
            definitions.append(
                ResourceDefinition(
                    uri=tea.uri,
                    name=f"{tea.name} ({tea.traditional})",
                    description=f"Details of {tea.name}",
                    mime_type=MIME_TYPE,
                )
            )
        return definitions

    def execute(self, tool_name: str, arguments: dict[str, Any]) -> ToolResult:
        """Execute a tool.

        Args:
            tool_name: Name of the tool to execute.
            arguments: Tool arguments.

        Returns:
            ToolResult with a JSON payload.
        """
        if tool_name == "getTeasByType":
            return self._teas_by_type(arguments.get("type"))
        elif tool_name == "getTeasByRegion":
            return self._teas_by_region(arguments.get("region"))
        else:
            raise ValueError(f"Unknown tool: {tool_name}")

    def read_resource(self, uri: str) -> ResourceResult:
        """Read the catalog summary or a single tea."""
        if uri == CATALOG_URI:
            payload: Any = {
                "totalTeas": len(self._teas),
                "teas": [
                    {
                        "name": tea.name,
                        "simplified": tea.simplified,
                        "traditional": tea.traditional,
                        "type": tea.type,
                        "origin": tea.origin,
                    }
                    for tea in self._teas
                ],
            }
        else:
            tea = next((t for t in self._teas if t.uri == uri), None)
            if tea is None:
                raise KeyError(uri)
            payload = asdict(tea)

        return ResourceResult(
            contents=[
                {
                    "uri": uri,
                    "mimeType": MIME_TYPE,
                    "text": json.dumps(payload, ensure_ascii=False),
                }
            ]
        )

    def _teas_by_type(self, value: Any) -> ToolResult:
        if not isinstance(value, str) or not value.strip():
            return ToolResult(content=[json_content({"error": "Type parameter cannot be empty"})])

        tea_type = value.strip()
        matches = [t for t in self._teas if tea_type.lower() in t.type.lower()]
        if not matches:
            return ToolResult(
                content=[
                    json_content(
                        {
                            "matches": 0,
                            "message": f"Teas of type {tea_type} not found",
                            "availableTypes": sorted({t.type for t in self._teas}),
                        }
                    )
                ]
            )

        return ToolResult(
            content=[
                json_content(
                    {
                        "matches": len(matches),
                        "type": matches[0].type,
                        "teas": [
                            {
                                "name": t.name,
                                "simplified": t.simplified,
                                "traditional": t.traditional,
                                "origin": t.origin,
                            }
                            for t in matches
                        ],
                    }
                )
            ]
        )

    def _teas_by_region(self, value: Any) -> ToolResult:
        if not isinstance(value, str) or not value.strip():
            return ToolResult(
                content=[json_content({"error": "Region parameter cannot be empty"})]
            )

        region = value.strip()
        matches = [t for t in self._teas if region.lower() in t.origin.lower()]
        if not matches:
            return ToolResult(
                content=[
                    json_content(
                        {
                            "matches": 0,
                            "message": f"Teas from {region} not found",
                            "availableRegions": sorted({t.origin for t in self._teas}),
                        }
                    )
                ]
            )

        return ToolResult(
            content=[
                json_content(
                    {
                        "matches": len(matches),
                        "region": matches[0].origin,
                        "teas": [
                            {
                                "name": t.name,
                                "simplified": t.simplified,
                                "traditional": t.traditional,
                                "type": t.type,
                            }
                            for t in matches
                        ],
                    }
                )
            ]
        )
