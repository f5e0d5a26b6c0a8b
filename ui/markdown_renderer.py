# ui/markdown_renderer.py
# -*- coding: utf-8 -*-

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from markdown import markdown

SESSION_MARKER = "--- Notes from Pomodoro session ---"


@dataclass(frozen=True)
class MarkdownTheme:
    text: str = "#1F2937"
    muted: str = "#6B7280"
    border: str = "#E5E7EB"
    panel: str = "#FFFFFF"
    codebg: str = "#F3F4F6"
    link: str = "#2563EB"
    accent: str = "#E5533D"


class MarkdownRenderer:
    """
    Single responsibility:
    - Convert a task notes file (MD) -> standalone HTML page
    - Provide CSS

    Notes files are plain markdown with one marker line per finished
    session; preprocess() turns those markers into numbered headings so the
    export reads as a session log.
    """

    def __init__(self, theme: Optional[MarkdownTheme] = None):
        self.theme = theme or MarkdownTheme()

    # ---------- preprocessing ----------
    def preprocess(self, md_text: str) -> str:
        if not md_text:
            return ""

        created_re = re.compile(r"^Created at:\s*(.+)$")

        out: List[str] = []
        session_no = 0
        for line in md_text.splitlines():
            if line.strip() == SESSION_MARKER:
                session_no += 1
                out.append("")
                out.append(f"## Session {session_no}")
                out.append("")
                continue

            m = created_re.match(line)
            if m:
                out.append(f"*Created at {m.group(1).strip()}*")
                continue

            out.append(line)

        return "\n".join(out)

    def title_of(self, md_text: str) -> str:
        for line in (md_text or "").splitlines():
            if line.startswith("# "):
                return line[2:].strip()
        return "Task notes"

    # ---------- extensions ----------
    def extensions(self) -> Tuple[List[str], Dict]:
        exts: List[str] = [
            "extra",
            "sane_lists",
            "nl2br",
            "admonition",
            "pymdownx.tasklist",
            "pymdownx.superfences",
            "pymdownx.tilde",
            "pymdownx.magiclink",
        ]
        cfg: Dict = {
            "pymdownx.tasklist": {
                "custom_checkbox": True,
                "clickable_checkbox": False,
            },
        }
        return exts, cfg

    # ---------- CSS ----------
    def css(self) -> str:
        t = self.theme
        return f"""
        body {{
          font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif;
          max-width: 760px;
          margin: 24px auto;
          padding: 0 16px;
          color: {t.text};
          background: {t.panel};
          line-height: 1.55;
        }}
        h1 {{ font-size: 1.4em; border-bottom: 3px solid {t.accent}; padding-bottom: 6px; }}
        h2 {{ font-size: 1.1em; color: {t.accent}; margin-top: 1.6em; }}
        em {{ color: {t.muted}; }}
        a {{ color: {t.link}; }}
        hr {{ border: 0; border-top: 1px solid {t.border}; }}
        code {{
          font-family: ui-monospace, SFMono-Regular, Menlo, Consolas, monospace;
          background: {t.codebg};
          padding: 2px 5px;
          border-radius: 6px;
        }}
        pre {{
          background: {t.codebg};
          padding: 10px 12px;
          border-radius: 10px;
          border: 1px solid {t.border};
          overflow-x: auto;
        }}
        pre code {{ background: transparent; padding: 0; }}
        .task-list-item {{ list-style: none; }}
        """

    # ---------- render ----------
    def to_html(self, md_text: str) -> str:
        safe_md = self.preprocess(md_text or "")
        exts, cfg = self.extensions()
        body = markdown(
            safe_md,
            extensions=exts,
            extension_configs=cfg,
            output_format="html",
        )
        title = html.escape(self.title_of(md_text))
        return (
            "<!DOCTYPE html>\n"
            "<html>\n"
            "  <head>\n"
            '    <meta charset="utf-8"/>\n'
            f"    <title>{title}</title>\n"
            f"    <style>{self.css()}</style>\n"
            "  </head>\n"
            f"  <body>{body}</body>\n"
            "</html>\n"
        )
