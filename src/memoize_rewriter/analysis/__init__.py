"""Analysis of planned rewrites."""
