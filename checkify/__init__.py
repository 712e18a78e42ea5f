"""Checkify API: Notion todo-list extraction and streaming."""
