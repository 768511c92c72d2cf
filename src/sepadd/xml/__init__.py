"""XML output for direct debits."""

from sepadd.xml.renderer import build_document, render

__all__ = ["build_document", "render"]
