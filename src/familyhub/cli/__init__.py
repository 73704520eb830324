"""Command line tasks for familyhub."""
