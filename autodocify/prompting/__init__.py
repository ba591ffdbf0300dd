"""Prompt templates and request builders."""
