"""Release notes templates."""

from pathlib import Path

import jinja2
from jinja2 import Environment, TemplateSyntaxError

from .cli_config import DEFAULT_TEMPLATE_FILE
from .error_handling import ErrorCategory, TemplateError, get_error_handler
from .release import ReleaseNotes

RELEASE_NOTES_TEMPLATE = """\
{{ project_name }} {{ version }}

Welcome to the {{ tag }} release of {{ project_name }}!
{% if pre_release %}
*This is a pre-release of {{ project_name }}*
{% endif %}

{{ preface }}

Please try out the release binaries and report any issues at
https://github.com/{{ github_repo }}/issues.
{% for key, note in notes.items() %}

### {{ note.title }}

{{ note.description }}
{% endfor %}
{% if breaking %}

### Breaking Changes
{% for key, change in breaking.items() %}

#### {{ change.title }}

{{ change.description }}
{% endfor %}
{% endif %}

### Contributors

{% for contributor in contributors %}
* {{ contributor }}
{% endfor %}

### Changes

{% for change in changes %}
* {{ change.commit }} {{ change.description }}
{% endfor %}

### Dependency Changes

{% for dep in dependencies %}
{% if dep.previous %}
* **{{ dep.name }}**  {{ dep.previous }} -> {{ dep.commit }}
{% else %}
* **{{ dep.name }}**  {{ dep.commit }} **_new_**
{% endif %}
{% else %}
This release has no dependency changes
{% endfor %}
{% if previous %}

Previous release can be found at [{{ previous }}](https://github.com/{{ github_repo }}/releases/tag/{{ previous }})
{% endif %}
"""


def _environment() -> Environment:
    return Environment(
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def get_template(path: str) -> str:
    """
    Read a release notes template.

    The built-in template is used when ``path`` is the default template file
    and that file does not exist.

    Raises:
        TemplateError: If the template file cannot be read
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        if path == DEFAULT_TEMPLATE_FILE:
            return RELEASE_NOTES_TEMPLATE
        get_error_handler().error(
            ErrorCategory.TEMPLATE,
            "template file not found",
            "render",
            "get_template",
            exception=e,
            details={"path": path},
        )
        raise TemplateError(f"template file {path} does not exist") from e
    except (OSError, UnicodeDecodeError) as e:
        get_error_handler().error(
            ErrorCategory.FILESYSTEM,
            f"could not read template: {e}",
            "render",
            "get_template",
            exception=e,
            details={"path": path},
        )
        raise TemplateError(f"could not read template {path}: {e}") from e


def render_release_notes(notes: ReleaseNotes, template: str) -> str:
    """
    Render release notes with a Jinja2 template source.

    Raises:
        TemplateError: If the template is not valid Jinja2 or fails to render
    """
    try:
        compiled = _environment().from_string(template)
    except TemplateSyntaxError as e:
        get_error_handler().error(
            ErrorCategory.TEMPLATE,
            f"invalid template: {e.message}",
            "render",
            "render_release_notes",
            exception=e,
            details={"line": e.lineno},
        )
        raise TemplateError(f"invalid template at line {e.lineno}: {e.message}") from e

    try:
        return compiled.render(**notes.template_context())
    except jinja2.TemplateError as e:
        get_error_handler().error(
            ErrorCategory.TEMPLATE,
            f"template rendering failed: {e}",
            "render",
            "render_release_notes",
            exception=e,
        )
        raise TemplateError(f"could not render template: {e}") from e
