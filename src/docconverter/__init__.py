"""DocConverter - turn documents into Starlight-ready Markdown."""

__version__ = "0.1.0"
