# Sphinx configuration for the metar-parser documentation.
#
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os, platform, sys
from pathlib import Path

if list(map(int, platform.python_version_tuple()[:2])) < [3, 11]:
    import tomli as tomllib
else:
    import tomllib

root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path))

# -- Project information -----------------------------------------------------

with (root_path / "pyproject.toml").open("rb") as f:
    pyproject = tomllib.load(f)

release = pyproject["tool"]["poetry"]["version"]
version = ".".join(release.split(".")[:2])
project = f'metar-parser {release}'
copyright = '2026, METAR parser developers'
author = 'METAR parser developers'
highlight_language = 'none' # report text is not code

# -- General configuration ---------------------------------------------------

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx_design",
    "sphinx_copybutton",
]

autodoc_member_order = "bysource"
autodoc_typehints = "description"
copybutton_prompt_text = "METAR> "

master_doc = "index"
templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

# -- Options for HTML output -------------------------------------------------

on_rtd = os.environ.get("READTHEDOCS") == "True"
if not on_rtd:
    html_theme = "alabaster"  # fallback theme for local preview
else:
    html_theme = "sphinx_rtd_theme"
html_static_path = []
