"""Command-line client for the WML prediction proxy.

The Typer application is ``cli.app.app``; run it as ``wml-proxy``.
"""
