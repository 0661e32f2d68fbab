"""Pure domain types for the minijob kernel. Zero I/O."""
