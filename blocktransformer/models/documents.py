"""
Document, selection and reporting models for blocktransformer.
"""

from enum import Enum
from typing import List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..exceptions import SelectionError


DEFAULT_POST_TYPES = ("post",)
DEFAULT_POST_STATUS = "publish"


class Direction(str, Enum):
    """Which transform a run applies."""

    ENCODE = "encode"
    DECODE = "decode"
    NUDGE = "nudge"


class Document(BaseModel):
    """
    A post owned by the document store.
    """

    id: int = Field(
        ...,
        description="Unique post ID"
    )

    text: str = Field(
        "",
        description="The post content"
    )

    post_type: str = Field(
        "post",
        description="Post type, e.g. 'post' or 'page'"
    )

    post_status: str = Field(
        DEFAULT_POST_STATUS,
        description="Post status, e.g. 'publish' or 'draft'"
    )


class SelectionRange(BaseModel):
    """
    Which documents a run operates on.

    Either an explicit list of IDs, or the closed interval
    ``[min_id, max_id]`` narrowed by post types, status and an item limit.
    """

    model_config = ConfigDict(frozen=True)

    post_ids: List[int] = Field(
        default_factory=list,
        description="Explicit post IDs; when set, the range fields are ignored"
    )

    min_id: int = Field(
        0,
        description="Lowest post ID to include"
    )

    max_id: Optional[int] = Field(
        None,
        description="Highest post ID to include; None means no upper bound"
    )

    num_items: Optional[int] = Field(
        None,
        description="Maximum number of posts to select"
    )

    post_types: List[str] = Field(
        default_factory=lambda: list(DEFAULT_POST_TYPES),
        description="Post types to select from"
    )

    post_status: str = Field(
        DEFAULT_POST_STATUS,
        description="Post status to select"
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> "SelectionRange":
        if any(post_id <= 0 for post_id in self.post_ids):
            raise ValueError("post IDs must be positive")
        if self.min_id < 0:
            raise ValueError("min_id must not be negative")
        if self.max_id is not None and self.min_id > self.max_id:
            raise ValueError(f"min_id ({self.min_id}) is greater than max_id ({self.max_id})")
        if self.num_items is not None and self.num_items < 1:
            raise ValueError("num_items must be at least 1")
        if not self.post_types:
            raise ValueError("at least one post type is required")
        return self

    @property
    def is_explicit(self) -> bool:
        return bool(self.post_ids)

    @classmethod
    def from_args(
        cls,
        post_ids: Optional[Sequence[int]] = None,
        min_id: Optional[int] = None,
        max_id: Optional[int] = None,
        num_items: Optional[int] = None,
        post_types: Union[str, Sequence[str], None] = None,
        post_status: Optional[str] = None,
    ) -> "SelectionRange":
        """
        Build a selection from command-line style values.

        Args:
            post_ids: Explicit post IDs
            min_id: Lower bound of the ID range (default 0)
            max_id: Upper bound of the ID range (default unbounded)
            num_items: Maximum number of posts
            post_types: Comma-separated string or list of post types
            post_status: Post status filter

        Returns:
            The selection range

        Raises:
            SelectionError: If the combination of values is invalid
        """
        if isinstance(post_types, str):
            post_types = [t.strip() for t in post_types.split(",") if t.strip()]

        values = {
            "post_ids": list(post_ids or []),
            "min_id": min_id if min_id is not None else 0,
            "max_id": max_id,
            "num_items": num_items,
            "post_types": list(post_types) if post_types else list(DEFAULT_POST_TYPES),
            "post_status": post_status or DEFAULT_POST_STATUS,
        }
        try:
            return cls(**values)
        except ValidationError as e:
            reasons = "; ".join(error["msg"] for error in e.errors())
            raise SelectionError(f"Invalid selection: {reasons}") from e


class TransformResult(BaseModel):
    """
    Outcome of transforming one document's text.
    """

    text: str = Field(
        ...,
        description="The transformed text"
    )

    changed: bool = Field(
        ...,
        description="Whether the text differs from the input"
    )

    units: int = Field(
        0,
        description="Number of blocks or tokens converted"
    )

    errors: List[str] = Field(
        default_factory=list,
        description="Per-unit errors; the affected units were left untouched"
    )


class RunReport(BaseModel):
    """
    Counters accumulated over one batch run.
    """

    direction: Direction
    dry_run: bool = False
    selected: int = 0
    processed: int = 0
    changed: int = 0
    unchanged: int = 0
    missing: int = 0
    errored: int = 0
    unit_errors: int = 0
    changed_ids: List[int] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.changed + self.unchanged

    def summary(self) -> str:
        """One-line summary for the end of a run."""
        verb = "would change" if self.dry_run else "changed"
        return (
            f"{self.direction.value}: {self.processed}/{self.selected} documents processed, "
            f"{self.changed} {verb}, {self.unchanged} unchanged, {self.missing} missing, "
            f"{self.errored} errored, {self.unit_errors} unit errors"
        )
