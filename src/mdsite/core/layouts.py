"""Layout lookup: user templates in layouts_dir shadow the built-in ones"""

from pathlib import Path

from jinja2 import (
    ChoiceLoader, DictLoader, Environment, FileSystemLoader, Template,
    TemplateNotFound, TemplateSyntaxError, select_autoescape,
)

from mdsite.core.errors import ConfigError


LAYOUT_SUFFIX = '.html'

_BASE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{% block title %}{{ site.title }}{% endblock %}</title>
</head>
<body>
<header><a href="{{ site.base_url }}">{{ site.title }}</a></header>
<main>
{% block main %}{% endblock %}
</main>
</body>
</html>
"""

_DEFAULT = """\
{% extends "_base.html" %}
{% block title %}{{ page.title }} | {{ site.title }}{% endblock %}
{% block main %}
<article>
<h1>{{ page.title }}</h1>
{% if meta.subtitle %}<p class="subtitle">{{ meta.subtitle }}</p>{% endif %}
{% if page.date %}<time datetime="{{ page.date.isoformat() }}">{{ page.date.isoformat() }}</time>{% endif %}
{% if page.tags %}<ul class="tags">{% for tag in page.tags %}<li><a href="{{ tag.url }}">{{ tag.name }}</a></li>{% endfor %}</ul>{% endif %}
{{ page.content | safe }}
</article>
{% endblock %}
"""

_LIST = """\
{% extends "_base.html" %}
{% block title %}{{ title }} | {{ site.title }}{% endblock %}
{% block main %}
<h1>{{ title }}</h1>
<ul class="listing">
{% for p in pages %}<li><a href="{{ p.url }}">{{ p.title }}</a>{% if p.date %} <time>{{ p.date.isoformat() }}</time>{% endif %}{% if p.summary %}<p>{{ p.summary }}</p>{% endif %}</li>
{% endfor %}</ul>
{% endblock %}
"""

_TAXONOMY = """\
{% extends "_base.html" %}
{% block title %}#{{ tag }} | {{ site.title }}{% endblock %}
{% block main %}
<h1>Tagged "{{ tag }}"</h1>
<ul class="listing">
{% for p in pages %}<li><a href="{{ p.url }}">{{ p.title }}</a>{% if p.date %} <time>{{ p.date.isoformat() }}</time>{% endif %}</li>
{% endfor %}</ul>
{% endblock %}
"""

BUILTIN_LAYOUTS = {
    '_base.html':    _BASE,
    'default.html':  _DEFAULT,
    'list.html':     _LIST,
    'taxonomy.html': _TAXONOMY,
}


def make_environment(layouts_dir: Path | str = None) -> Environment:
    """Jinja environment searching layouts_dir first, then the built-in layouts."""
    loaders = []
    if layouts_dir is not None and Path(layouts_dir).is_dir():
        loaders.append(FileSystemLoader(str(layouts_dir)))
    loaders.append(DictLoader(BUILTIN_LAYOUTS))
    return Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(['html']),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def resolve_layout(env: Environment, name: str, path: str = '<site>') -> Template:
    """Load layout `name`; a missing or broken template is a ConfigError for `path`."""
    try:
        return env.get_template(f"{name}{LAYOUT_SUFFIX}")
    except TemplateNotFound:
        raise ConfigError(path, f"layout '{name}' does not exist") from None
    except TemplateSyntaxError as e:
        raise ConfigError(path, f"layout '{name}' is invalid: {e}") from e
