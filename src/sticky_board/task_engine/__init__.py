"""File-backed board and task engine.

Boards are registered in ``boards/boards.yaml`` under the storage root; each
board keeps one Markdown file per task plus its own ``config.yaml``.
"""
