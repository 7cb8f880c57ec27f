"""
Diarist
=======

A diary and blog content pipeline.

Authoring input (dated diary entries, Markdown with wiki-style media embeds
and card blocks, optionally password-protected bodies) becomes a normalized,
paginated, render-ready document model.

Main Components:
    - dataclasses: Identifiers, cards, diary entries, encrypted payloads
    - markdown: Attachment resolver and markdown-it-py rewriting passes
    - protected: Protected post codec and renderer
    - diary: Diary assembly, pagination and the timeline controller
    - pipeline: Per-run context and the click CLI
    - core: Logging, exceptions, paths, settings
    - utils: Filesystem and front matter helpers

Primary Interfaces:
    - diarist.pipeline.cli: Command-line interface
    - diarist.pipeline.context.PipelineContext: Per-run services

Example Usage:
    >>> from diarist.pipeline.context import PipelineContext
    >>> context = PipelineContext.from_attachment_dir(Path("src/data/attachment"))
    >>> context.render("![[photo.png|Harbor]]", "src/data/blog/trip.md")
"""

__version__ = "0.1.0"
