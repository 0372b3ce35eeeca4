"""Data models for logseq-graph."""
