"""Builtin cafe skill: recognizer, demo dialogs and CLI commands."""
