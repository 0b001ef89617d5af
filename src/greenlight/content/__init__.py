"""Markdown agents, commands, references and templates installed by ``gl install``."""
