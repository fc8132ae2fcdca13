from __future__ import annotations

import importlib.metadata

project = "acshell"
copyright = "2026, acshell developers"
author = "acshell developers"
version = release = importlib.metadata.version("acshell")

extensions = [
    "myst_parser",
    "sphinx.ext.autodoc",
    "sphinx.ext.doctest",
    "sphinx.ext.intersphinx",
    "sphinx.ext.mathjax",
    "sphinx.ext.napoleon",
    "sphinx_autodoc_typehints",
    "sphinx_copybutton",
]

source_suffix = [".rst", ".md"]
exclude_patterns = [
    "_build",
    "**.ipynb_checkpoints",
    "Thumbs.db",
    ".DS_Store",
    ".env",
    ".venv",
]

html_theme = "furo"

myst_enable_extensions = [
    "colon_fence",
    "dollarmath",
]

nitpick_ignore = [
    ("py:class", "optional"),
    ("py:class", '"tree"'),
    ("py:class", '"array"'),
    ("py:class", '{"tree"'),
    ("py:class", '"array"}'),
    ("py:class", "CoefficientMatrix"),
    ("py:class", "CoefficientTensor"),
    ("py:class", "FloatingNDArray"),
    ("py:class", "PacketArray"),
]

always_document_param_types = True

# sphinx.ext.intersphinx
intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable/", None),
    "pywt": ("https://pywavelets.readthedocs.io/en/latest/", None),
}

# sphinx_copybutton
copybutton_prompt_text = ">>> "
