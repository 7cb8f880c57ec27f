#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants for the Diarist project.

All project paths are defined as Path objects relative to the project root
so that build steps, CLI defaults and tests agree on one layout.

The project structure:
    ROOT/
    ├── diarist/             # Package code
    ├── src/data/
    │   ├── blog/            # Blog posts (may be password protected)
    │   ├── diary/           # Diary entries named by date or date range
    │   └── attachment/      # Published media
    │       ├── blog/<doc>/  # Per-document attachment folders
    │       └── inbox/       # Shared inbox folder
    ├── dist/api/diary/      # Paginated diary JSON pages
    └── logs/                # Application logs

Paths are only computed here; nothing is created at import time.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine project root directory.

    Honors ``DIARIST_ROOT`` when set; otherwise uses the current working
    directory, the way a site build is run from the site checkout.

    Returns:
        Path object for project root
    """
    env_root = os.environ.get("DIARIST_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path.cwd().resolve()


# ----- Project directory -----
ROOT: Path = _get_project_root()
DATA_DIR = ROOT / "src" / "data"

# ---- Content ----
BLOG_DIR = DATA_DIR / "blog"
DIARY_DIR = DATA_DIR / "diary"

# ---- Attachments ----
ATTACHMENT_DIR = DATA_DIR / "attachment"
ATTACHMENT_BLOG_DIR = ATTACHMENT_DIR / "blog"
ATTACHMENT_INBOX_DIR = ATTACHMENT_DIR / "inbox"

# ---- Build output ----
DIST_DIR = ROOT / "dist"
API_DIARY_DIR = DIST_DIR / "api" / "diary"

# ---- Logs ----
LOG_DIR = ROOT / "logs"
