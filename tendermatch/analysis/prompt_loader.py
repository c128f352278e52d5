import json
from dataclasses import dataclass
from pathlib import Path

from tendermatch.analysis.exceptions import AnalysisError

PROMPT_DIR = Path(__file__).parent / "prompts"


@dataclass(frozen=True)
class PromptBundle:
    """A prompt template together with the JSON schema its answer must follow.

    The schema is kept both as text, for embedding in the prompt, and parsed,
    for the provider's structured-output request.
    """

    template: str
    schema_text: str
    schema: dict[str, object]


def _read(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AnalysisError(f"Failed to load {what}: {exc}") from exc


def load_prompt_template(name: str, path: Path | None = None) -> str:
    """Read ``prompts/<name>.txt``, or ``path`` when given.

    Raises:
        AnalysisError: if the file cannot be read.
    """
    return _read(path or PROMPT_DIR / f"{name}.txt", "prompt template")


def load_json_schema(name: str, path: Path | None = None) -> str:
    """Read ``prompts/<name>.json``, or ``path`` when given."""
    return _read(path or PROMPT_DIR / f"{name}.json", "JSON schema")


def load_prompt_bundle(
    kind: str,
    template_path: Path | None = None,
    schema_path: Path | None = None,
) -> PromptBundle:
    """Load ``<kind>_prompt.txt`` and ``<kind>_schema.json`` as one bundle.

    Raises:
        AnalysisError: if either file is unreadable or the schema is not a
            JSON object.
    """
    template = load_prompt_template(f"{kind}_prompt", template_path)
    schema_text = load_json_schema(f"{kind}_schema", schema_path)
    try:
        schema = json.loads(schema_text)
    except json.JSONDecodeError as exc:
        raise AnalysisError(f"Invalid JSON schema for {kind}: {exc}") from exc
    if not isinstance(schema, dict):
        raise AnalysisError(f"JSON schema for {kind} must be an object")
    return PromptBundle(template=template, schema_text=schema_text, schema=schema)
