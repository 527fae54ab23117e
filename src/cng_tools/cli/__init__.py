"""Command line entry points (see ``[project.scripts]``)."""
