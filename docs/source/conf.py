# -- Configuration file for the Sphinx documentation builder ------------------

import sys
from pathlib import Path


# -- Prevent circular imports in Sphinx ---------------------------------------

import sphinx.builders.html
import sphinx.builders.latex
import sphinx.builders.texinfo
import sphinx.builders.text
import sphinx.ext.autodoc


# -- inkgen import from the source tree ---------------------------------------

sys.path.insert(0, str(Path(__file__).parent.parent.parent))


# -- Project information ------------------------------------------------------

project = 'inkgen'
copyright = '2022, inkgen Committers'
author = 'inkgen Committers'

extlinks = {
    "ink":              ("https://use.ink/", None),
    "scale_info":       ("https://github.com/paritytech/scale-info/", None),
    "venv":             ("https://docs.python.org/3/tutorial/venv.html", None),
    "py_installing":    ("https://docs.python.org/3/installing/index.html", None)
}


# -- General configuration ----------------------------------------------------

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.extlinks',
    'sphinx.ext.napoleon',
    'sphinx.ext.intersphinx',
    "sphinx.ext.viewcode"
]
autodoc_member_order = 'bysource'
autodoc_typehints = 'description'

intersphinx_mapping = {'python': ('https://docs.python.org/3', None)}

napoleon_google_docstring = False
napoleon_numpy_docstring = True

templates_path = ['templates']
html_static_path = []

exclude_patterns = ['Thumbs.db', '.DS_Store']

html_theme = 'sphinx_rtd_theme'
pygments_style = 'friendly'
