"""Core models, edit sequencing and unit rewriting."""
