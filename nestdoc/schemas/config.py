"""
Configuration models

TreeConfig names the document fields a tree lives in, MongoStoreConfig
describes how to reach a MongoDB collection. Both are plain pydantic
models passed to constructors; nothing is read from global state.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from ..exceptions import ConfigurationError
from .types import RebuildStrategy


def is_empty_reference(value: Any) -> bool:
    """Whether a parent reference means "no parent" (None, "", 0, "0", empty container)."""
    if value is None or value is False:
        return True
    if isinstance(value, (str, bytes)):
        return value in ("", "0", b"", b"0")
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (list, tuple, dict, set)):
        return not value
    return False


class TreeConfig(BaseModel):
    """
    Field layout and numbering of a nested-set tree
    
    Defaults follow the classic MPTT column names (item, parent, lft, rght,
    level) with "0" as the root sentinel.
    
    Attributes:
        primary_field: Domain identifier referenced by parent fields
        parent_field: Reference to the parent's primary_field value
        order_field: Optional field used to order siblings
        label_field: Optional display field (falls back to order_field, then primary_field)
        left_field: Left coordinate
        right_field: Right coordinate
        level_field: Depth, root's children at level 1
        root_value: Sentinel parent value of top-level nodes
        root_left: Left coordinate of the first top-level node
        indent_marker: Prefix repeated (level - 1) times in select option labels
        strategy: Default rebuild traversal strategy
    """
    
    primary_field: str = "item"
    parent_field: str = "parent"
    order_field: Optional[str] = None
    label_field: Optional[str] = None
    
    left_field: str = "lft"
    right_field: str = "rght"
    level_field: str = "level"
    
    root_value: Any = "0"
    root_left: int = 0
    
    indent_marker: str = "- "
    strategy: RebuildStrategy = RebuildStrategy.BATCHED
    
    model_config = {
        "frozen": True,
    }
    
    @model_validator(mode="after")
    def _check_fields(self) -> "TreeConfig":
        coordinate_fields = {self.left_field, self.right_field, self.level_field}
        if len(coordinate_fields) != 3:
            raise ConfigurationError(
                "left_field, right_field and level_field must be distinct, "
                f"got {self.left_field!r}, {self.right_field!r}, {self.level_field!r}"
            )
        
        structural = {self.primary_field, self.parent_field}
        if len(structural) != 2 or structural & coordinate_fields:
            raise ConfigurationError(
                "primary_field and parent_field must be distinct from each other "
                "and from the coordinate fields"
            )
        
        if self.order_field and self.order_field in coordinate_fields:
            raise ConfigurationError(
                f"order_field {self.order_field!r} cannot be a coordinate field"
            )
        return self
    
    @property
    def coordinate_fields(self) -> tuple[str, str, str]:
        """(left, right, level) field names"""
        return (self.left_field, self.right_field, self.level_field)
    
    @property
    def display_field(self) -> str:
        """Field used for human readable labels"""
        return self.label_field or self.order_field or self.primary_field
    
    def normalize_parent(self, value: Any) -> Any:
        """Map an empty parent reference to the root sentinel."""
        return self.root_value if is_empty_reference(value) else value
    
    def topology_fields(self) -> set[str]:
        """Fields whose change can alter the tree shape"""
        fields = {self.parent_field, self.primary_field}
        if self.order_field:
            fields.add(self.order_field)
        return fields


class MongoStoreConfig(BaseModel):
    """
    Connection settings for MongoDocumentStore
    
    When connection_string is empty it is built from server, port and
    database: mongodb://{server}:{port}/{database}
    """
    
    database: str
    collection: str
    connection_string: str = ""
    server: str = "localhost"
    port: int = Field(default=27017, gt=0, lt=65536)
    timeout_ms: int = Field(default=5000, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    
    @model_validator(mode="after")
    def _check_names(self) -> "MongoStoreConfig":
        if not self.database or not self.collection:
            raise ConfigurationError("database and collection must be non-empty")
        return self
    
    def resolved_uri(self) -> str:
        """Return the connection string, building it when not given"""
        if self.connection_string:
            return self.connection_string
        return f"mongodb://{self.server}:{self.port}/{self.database}"
