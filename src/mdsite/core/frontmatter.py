"""Front-matter extraction and re-serialization"""

from typing import Any

import yaml

from mdsite.errors import MalformedFrontMatter


OPEN_DELIMITER = "---"
CLOSE_DELIMITERS = ("---", "...")
BOM = "\ufeff"


def _find_close(lines: list[str]) -> int | None:
    """Return the index of the closing delimiter line, or None if the block is unterminated."""
    for i in range(1, len(lines)):
        if lines[i].rstrip() in CLOSE_DELIMITERS:
            return i
    return None


def _load_mapping(block: str) -> dict[str, Any]:
    """Parse a YAML front-matter block into a mapping with string keys."""
    try:
        data = yaml.safe_load(block) if block.strip() else {}
    except yaml.YAMLError as e:
        raise MalformedFrontMatter(f"Invalid YAML front-matter: {e}") from e
    except ValueError as e:
        # out-of-range timestamps (2025-13-01) fail in the constructor, not the scanner
        raise MalformedFrontMatter(f"Invalid front-matter value: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedFrontMatter(
            f"Invalid front-matter: expected key/value pairs, got {type(data).__name__}"
        )
    bad = [k for k in data if not isinstance(k, str)]
    if bad:
        raise MalformedFrontMatter(f"Invalid front-matter: non-string key {bad[0]!r}")
    return data


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split text into (metadata, body).

    Text without an opening ``---`` line is all body. An opening line with no
    matching closing line raises MalformedFrontMatter.
    """
    text = text.removeprefix(BOM)
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != OPEN_DELIMITER:
        return {}, text

    end = _find_close(lines)
    if end is None:
        raise MalformedFrontMatter("Unterminated front-matter: missing closing '---' line")

    metadata = _load_mapping("".join(lines[1:end]))
    body = "".join(lines[end + 1:])
    return metadata, body


def dump_frontmatter(metadata: dict[str, Any]) -> str:
    """Serialize metadata back into a delimited YAML block (empty string for no metadata)."""
    if not metadata:
        return ""
    header = yaml.safe_dump(dict(metadata), sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f"{OPEN_DELIMITER}\n{header}{OPEN_DELIMITER}\n"
