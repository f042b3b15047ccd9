"""Built-in starting templates and user-defined presets."""

from dataclasses import dataclass
from pathlib import Path

import yaml

from .errors import ConfigError

DEFAULT_PROMPT = """\
You are a {{role}} helping with {{task}}.

Instructions:
- Be concise and helpful
- {{additional_instructions}}

Context:
{{context}}"""


@dataclass(frozen=True)
class Preset:
    """A named starting template."""

    name: str
    content: str
    builtin: bool = True


BUILTIN_PRESETS: tuple[Preset, ...] = (
    Preset(
        name="Support Triage",
        content="""\
You are a support ticket triage agent.

Analyze the incoming ticket and categorize it:
- priority: critical | high | medium | low
- category: billing | technical | account | feature_request | other
- sentiment: frustrated | neutral | satisfied

Provide a brief summary and recommended action.

Ticket:
{{ticket_content}}""",
    ),
    Preset(
        name="Code Review",
        content="""\
You are a code reviewer providing constructive feedback.

Review the following code changes and identify:
1. Potential bugs or issues
2. Performance concerns
3. Code quality suggestions
4. Security considerations

Code diff:
{{diff}}

Provide your review in a structured format.""",
    ),
    Preset(
        name="SQL Generator",
        content="""\
You are a SQL query generator.

Given the following table schema and user request, generate an efficient SQL query.

Table Schema:
{{schema}}

User Request:
{{request}}

Provide only the SQL query with a brief explanation.""",
    ),
    Preset(
        name="Email Writer",
        content="""\
You are a professional email writer.

Write a {{tone}} email with the following details:
- Subject: {{subject}}
- Main message: {{message}}
- Call to action: {{cta}}

Keep it concise, clear, and professional.""",
    ),
    Preset(
        name="Meeting Summary",
        content="""\
You are a meeting notes summarizer.

Summarize the following meeting transcript into:
1. Key decisions made
2. Action items with owners
3. Topics discussed
4. Next steps

Transcript:
{{transcript}}

Format as structured bullet points.""",
    ),
    Preset(
        name="Data Analysis",
        content="""\
You are a data analyst.

Analyze the following dataset description and provide:
1. Suggested metrics to calculate
2. Potential insights or patterns
3. Recommended visualizations

Dataset:
{{dataset_description}}

Business Question:
{{question}}""",
    ),
    Preset(
        name="QA Tester",
        content="""\
You are a QA tester creating test cases.

Generate test cases for the following feature:

Feature Description:
{{feature}}

Test Coverage:
- Happy path scenarios
- Edge cases
- Error conditions
- Boundary values

Format as a structured test case list with prerequisites, steps, and expected results.""",
    ),
)


def load_user_presets(path: str | Path | None) -> list[Preset]:
    """Load presets from a YAML file with a `presets` mapping of name -> content.

    A missing path yields no presets.

    Raises:
        ConfigError: If the file is not valid YAML or has the wrong shape
    """
    if path is None:
        return []
    path = Path(path).expanduser()
    if not path.exists():
        return []
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to read presets file: {exc}") from exc
    if data is None:
        return []
    if not isinstance(data, dict):
        raise ConfigError("Presets file must be a YAML mapping at the top level")

    raw = data.get("presets", {})
    if not isinstance(raw, dict):
        raise ConfigError("presets must be a mapping of preset names to template text")

    presets = []
    for name, content in raw.items():
        if not isinstance(content, str) or not content.strip():
            raise ConfigError(f"Preset '{name}' must have non-empty template text")
        presets.append(Preset(name=str(name), content=content.rstrip("\n"), builtin=False))
    return presets


def all_presets(path: str | Path | None = None) -> list[Preset]:
    """Built-in presets followed by user presets; user entries win on name clashes."""
    merged: dict[str, Preset] = {p.name: p for p in BUILTIN_PRESETS}
    for preset in load_user_presets(path):
        merged[preset.name] = preset
    return list(merged.values())


def find_preset(name: str, path: str | Path | None = None) -> Preset | None:
    """Look up a preset by name, case-insensitively."""
    wanted = name.strip().lower()
    for preset in all_presets(path):
        if preset.name.lower() == wanted:
            return preset
    return None
