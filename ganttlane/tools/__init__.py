"""Developer tools (invoked via `python -m ganttlane.tools.<name>`)."""
