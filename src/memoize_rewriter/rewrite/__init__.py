"""Per-function rewrite planning: extraction, prototype, rename and wrapper."""
