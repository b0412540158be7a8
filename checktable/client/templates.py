# checktable/client/templates.py
from jinja2 import Environment, PackageLoader, select_autoescape

# Create a single templates environment for the client views
templates = Environment(
    loader=PackageLoader("checktable.client", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
