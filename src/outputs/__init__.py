"""Renderers for DiffResult."""

from common.errors import UsageError
from outputs.json_output import JsonOutput
from outputs.markdown import MarkdownOutput
from outputs.text import TextOutput


def get_formatter(output_format: str, use_ansi: bool = True):
    """Return the renderer for ``output_format`` (text, json or markdown)."""
    fmt = (output_format or "text").lower()
    if fmt == "text":
        return TextOutput(use_ansi=use_ansi)
    if fmt == "json":
        return JsonOutput()
    if fmt == "markdown":
        return MarkdownOutput()
    raise UsageError(f"Invalid format: {output_format}. Valid formats are: text, json, markdown")


__all__ = ["get_formatter", "JsonOutput", "MarkdownOutput", "TextOutput"]
