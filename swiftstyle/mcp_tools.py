"""MCP tool definitions for the swiftstyle linter."""

from __future__ import annotations

import json
import logging
import traceback
from typing import Optional

from fastmcp import FastMCP

from swiftstyle.analyzer import (
    correct_paths as _correct_paths,
    correct_source as _correct_source,
    lint_paths as _lint_paths,
    lint_source as _lint_source,
)
from swiftstyle.config import (
    CORRECTION_EXAMPLES,
    CONTROL_KEYWORDS,
    CONTROL_STATEMENT_RULE,
    VIOLATION_MARKER,
)

logger = logging.getLogger(__name__)


def _error_response(tool_name: str, error: Exception) -> str:
    """Build a structured JSON error response for MCP tool failures."""
    logger.error("Tool %s failed: %s\n%s", tool_name, error, traceback.format_exc())
    return json.dumps(
        {
            "verdict": "ERROR",
            "summary": f"Tool '{tool_name}' failed: {error}",
            "stats": {"errors": 0, "warnings": 0, "corrections": 0, "total": 0},
            "violations": [],
            "corrections": [],
            "error": str(error),
        },
        indent=2,
    )


def _parse_path_list(file_paths: str) -> list[str]:
    paths = json.loads(file_paths)
    if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
        raise ValueError("file_paths must be a JSON array of strings")
    return paths


def register_tools(mcp: FastMCP) -> None:
    """Register all lint tools on the given FastMCP server instance."""

    @mcp.tool()
    def lint_source(
        source: str,
        path: Optional[str] = None,
        severity: Optional[str] = None,
    ) -> str:
        """Check Swift source text for control statements wrapped in parentheses.

        Read-only: returns the violations found, with line/column locations.

        Args:
            source: The Swift source text
            path: Optional file name used to label locations
            severity: "warning" (default) or "error"
        """
        try:
            return _lint_source(source, path=path, severity=severity).to_json()
        except Exception as e:
            return _error_response("lint_source", e)

    @mcp.tool()
    def correct_source(source: str, path: Optional[str] = None) -> str:
        """Remove redundant parentheses around control statement clauses.

        Returns the corrections applied and the corrected text under
        `corrected_source`.

        Args:
            source: The Swift source text
            path: Optional file name used to label locations
        """
        try:
            return _correct_source(source, path=path).to_json()
        except Exception as e:
            return _error_response("correct_source", e)

    @mcp.tool()
    def lint_files(file_paths: str, severity: Optional[str] = None) -> str:
        """Lint Swift files or directories on disk without modifying them.

        Args:
            file_paths: JSON array of file or directory paths (e.g., '["Sources"]')
            severity: "warning" (default) or "error"
        """
        try:
            return _lint_paths(_parse_path_list(file_paths), severity=severity).to_json()
        except json.JSONDecodeError as e:
            return _error_response(
                "lint_files",
                ValueError(f"file_paths must be a valid JSON array: {e}"),
            )
        except Exception as e:
            return _error_response("lint_files", e)

    @mcp.tool()
    def correct_files(file_paths: str) -> str:
        """Correct Swift files or directories in place.

        Args:
            file_paths: JSON array of file or directory paths (e.g., '["Sources"]')
        """
        try:
            return _correct_paths(_parse_path_list(file_paths)).to_json()
        except json.JSONDecodeError as e:
            return _error_response(
                "correct_files",
                ValueError(f"file_paths must be a valid JSON array: {e}"),
            )
        except Exception as e:
            return _error_response("correct_files", e)

    @mcp.tool()
    def describe_rule() -> str:
        """Describe the control statement rule with a few before/after examples."""
        lines = [
            f"{CONTROL_STATEMENT_RULE.name} ({CONTROL_STATEMENT_RULE.identifier})",
            CONTROL_STATEMENT_RULE.description,
            "",
            f"Keywords: {', '.join(CONTROL_KEYWORDS)}",
            "",
            "Examples:",
        ]
        for before, after in list(CORRECTION_EXAMPLES.items())[:5]:
            before = before.replace(VIOLATION_MARKER, "").rstrip("\n")
            after = after.rstrip("\n")
            lines.append(f"  {before!r} -> {after!r}")
        return "\n".join(lines)
