"""
Preview Compositor - Build self-contained documents for browser languages.

Handles:
- HTML: the code is the body; sibling stylesheets and scripts are inlined
- CSS: the code styles a fixed demo page with visible targets
- React (jsx/tsx): in-browser Babel transpiles the code, then the first
  defined of App, defaultExport, Component is mounted into #root

Every builder is a pure function of its inputs: no filesystem, no
subprocess. The only external resources are the CDN scripts injected here.
"""

from typing import Iterable, List, Optional

from src.schemas import RunFile
from src.sandbox.classifier import ExecutionStrategy
from src.utils import guess_language_from_filename, lowered


# =============================================================================
# CONSTANTS
# =============================================================================

REACT_SCRIPTS = (
    "https://unpkg.com/react@18/umd/react.development.js",
    "https://unpkg.com/react-dom@18/umd/react-dom.development.js",
)
BABEL_SCRIPT = "https://unpkg.com/@babel/standalone/babel.min.js"

STYLESHEET_LANGUAGES = ("css",)
SCRIPT_LANGUAGES = ("javascript", "js")

HTML_MESSAGE = "Rendered HTML preview."
CSS_MESSAGE = "Rendered CSS preview."
REACT_MESSAGE = "Rendered React preview. Define App/Component (or defaultExport) to mount automatically."

# Runs after the user's code inside the same Babel script block
AUTO_MOUNT = """
const __maybeComponent =
  typeof App !== "undefined"
    ? App
    : (typeof defaultExport !== "undefined" ? defaultExport : null);

if (__maybeComponent) {
  ReactDOM.createRoot(document.getElementById("root")).render(React.createElement(__maybeComponent));
} else if (typeof Component !== "undefined") {
  ReactDOM.createRoot(document.getElementById("root")).render(React.createElement(Component));
}"""


# =============================================================================
# SIBLING FILE SELECTION
# =============================================================================

def _matches(file: RunFile, languages: Iterable[str]) -> bool:
    """Match a file by declared language, falling back to its name suffix."""
    languages = tuple(languages)
    if lowered(file.language) in languages:
        return True
    return guess_language_from_filename(file.name) in languages


def _join_contents(files: List[RunFile], languages: Iterable[str]) -> str:
    return "\n".join(file.content or "" for file in files if _matches(file, languages))


# =============================================================================
# DOCUMENT BUILDERS
# =============================================================================

def build_html_preview(html: str, files: Optional[List[RunFile]] = None) -> str:
    """Wrap markup in a document with the project's CSS and JS inlined."""
    files = files or []
    css = _join_contents(files, STYLESHEET_LANGUAGES)
    js = _join_contents(files, SCRIPT_LANGUAGES)

    return f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width,initial-scale=1" />
    <style>{css}</style>
  </head>
  <body>
    {html}
    <script>{js}</script>
  </body>
</html>"""


def build_css_preview(css: str) -> str:
    """Apply a stylesheet to a fixed demo page."""
    return f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width,initial-scale=1" />
    <style>{css}</style>
  </head>
  <body>
    <main class="demo">
      <h1>CSS Preview</h1>
      <p>Edit styles and click Run.</p>
      <button>Button</button>
      <div class="card">Card</div>
    </main>
  </body>
</html>"""


def build_react_preview(code: str, variant: str = "jsx") -> str:
    """
    Embed component code in a page that transpiles and mounts it in-browser.

    Args:
        code: JSX/TSX source
        variant: "tsx" adds the TypeScript preset, anything else is plain JSX
    """
    presets = "react,typescript" if variant == "tsx" else "react"
    scripts = "\n".join(
        f'    <script crossorigin src="{src}"></script>' for src in REACT_SCRIPTS
    )

    return f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width,initial-scale=1" />
{scripts}
    <script src="{BABEL_SCRIPT}"></script>
    <style>body{{font-family:system-ui;padding:12px;margin:0}}</style>
  </head>
  <body>
    <div id="root"></div>
    <script type="text/babel" data-presets="{presets}">
{code}
{AUTO_MOUNT}
    </script>
  </body>
</html>"""


def compose_preview(
    strategy: ExecutionStrategy,
    code: str,
    files: Optional[List[RunFile]] = None,
) -> str:
    """
    Build the preview document for a PREVIEW strategy.

    Args:
        strategy: Classified strategy (language html, css, jsx, tsx or react)
        code: Source text of the open file
        files: Sibling project files (used for html only)

    Returns:
        Complete HTML document
    """
    language = strategy.language
    if language == "html":
        return build_html_preview(code, files)
    if language == "css":
        return build_css_preview(code)
    if language in ("jsx", "tsx", "react"):
        return build_react_preview(code, "tsx" if language == "tsx" else "jsx")
    raise ValueError(f"No preview available for language '{language}'")


def preview_message(language: str) -> str:
    """Status line returned alongside a preview document."""
    if language == "html":
        return HTML_MESSAGE
    if language == "css":
        return CSS_MESSAGE
    return REACT_MESSAGE
