"""Pagesmith CLI — Typer application and commands."""
