"""
Pydantic schemas for the run request boundary.
"""

from typing import List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


NO_OUTPUT = "No output"


class RunFile(BaseModel):
    """A sibling project file, used only to assemble markup previews."""
    name: str = Field(..., description="File name, e.g. styles.css")
    language: Optional[str] = Field(None, description="Declared language of the file")
    content: Optional[str] = Field("", description="File contents")


class RunRequest(BaseModel):
    """Body of a run request."""
    code: str = Field("", description="Source text to run or preview")
    language: str = Field("", description="Free-form language identifier")
    files: List[RunFile] = Field(
        default_factory=list,
        description="Other files of the project, for HTML previews",
    )


class TextResult(BaseModel):
    """Plain-text program output or an explanatory message."""
    mode: Literal["text"] = "text"
    output: str = Field(..., description="Captured output or diagnostic")


class PreviewResult(BaseModel):
    """A self-contained document to render in an isolated viewer."""
    model_config = ConfigDict(populate_by_name=True)

    mode: Literal["preview"] = "preview"
    preview_html: str = Field(..., alias="previewHtml", description="Complete HTML document")
    output: Optional[str] = Field(None, description="Short status message")


RunResponse = Union[TextResult, PreviewResult]


def clean_output(text: Optional[str]) -> str:
    """Trim program output, substituting the no-output sentinel when empty."""
    text = (text or "").strip()
    return text or NO_OUTPUT
