"""
Block model for blocktransformer.

A block is one structured unit of post content as exposed by the block
grammar: a name, a mapping of JSON attributes and its literal inner content.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def _check_json_value(value: Any, path: str) -> None:
    """Raise ValueError if ``value`` is not representable as JSON."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            _check_json_value(item, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValueError(f"attribute key at {path} must be a string, got {type(key).__name__}")
            _check_json_value(item, f"{path}.{key}")
        return
    raise ValueError(f"attribute {path} has unsupported type {type(value).__name__}")


class Block(BaseModel):
    """
    A parsed content block.

    ``inner_content`` keeps literal HTML chunks in document order with a
    ``None`` placeholder wherever an entry of ``inner_blocks`` sits. A block
    without a name is a raw (freeform) block and renders as its inner content
    with no delimiters.
    """

    name: Optional[str] = Field(
        None,
        description="Namespaced block name, e.g. 'core/paragraph'; None for raw content"
    )

    attributes: Dict[str, Any] = Field(
        default_factory=dict,
        description="Block attributes decoded from the delimiter comment"
    )

    inner_blocks: List['Block'] = Field(
        default_factory=list,
        description="Nested blocks, in order"
    )

    inner_html: str = Field(
        "",
        description="Concatenated literal HTML of the block, without nested blocks"
    )

    inner_content: List[Optional[str]] = Field(
        default_factory=list,
        description="Literal HTML chunks interleaved with None placeholders for nested blocks"
    )

    @field_validator("attributes", mode="before")
    @classmethod
    def _validate_attributes(cls, value: Any) -> Dict[str, Any]:
        # PHP-style empty attribute arrays come through as [].
        if value is None or value == []:
            return {}
        if not isinstance(value, dict):
            raise ValueError(f"block attributes must be a mapping, got {type(value).__name__}")
        _check_json_value(value, "attributes")
        return value

    @classmethod
    def raw(cls, text: str) -> "Block":
        """Build a pass-through block holding ``text`` verbatim."""
        return cls(name=None, inner_html=text, inner_content=[text])

    @property
    def is_raw(self) -> bool:
        return not self.name


Block.model_rebuild()
