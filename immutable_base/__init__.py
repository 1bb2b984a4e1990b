"""ImmutableBase: schema-driven immutable records for Python."""

from immutable_base.exceptions import (
    ImmutableBaseException,
    ConfigurationException,
    SerializationException,
    ImmutableInstanceException,
    InvalidComparisonTargetException,
    SchemaException,
    SchemaCategoryException,
    SchemaVisibilityException,
    ArrayOfSchemaException,
    HydrationException,
    MissingRequiredFieldException,
    TypeMismatchException,
    EnumMismatchException,
    UnionMismatchException,
    UnionRequiresInstanceException,
    InvalidCollectionValueException,
    ArrayElementException,
    InvalidJsonException,
    ValidationChainException,
)
from immutable_base.config import (
    HydrationConfig,
    get_config,
    set_config,
    reset_config,
)
from immutable_base.logging import configure_logging, get_logger
from immutable_base.hydration import (
    ArrayOf,
    Category,
    ValidationOrder,
    get_schema,
    reset_registry,
)
from immutable_base.base import ImmutableBase
from immutable_base.objects import (
    DataTransferObject,
    ValueObject,
    Entity,
    SingleValueObject,
)

__all__ = [
    "ImmutableBase",
    "DataTransferObject",
    "ValueObject",
    "Entity",
    "SingleValueObject",
    "ArrayOf",
    "Category",
    "ValidationOrder",
    "get_schema",
    "reset_registry",
    "HydrationConfig",
    "get_config",
    "set_config",
    "reset_config",
    "configure_logging",
    "get_logger",
    "ImmutableBaseException",
    "ConfigurationException",
    "SerializationException",
    "ImmutableInstanceException",
    "InvalidComparisonTargetException",
    "SchemaException",
    "SchemaCategoryException",
    "SchemaVisibilityException",
    "ArrayOfSchemaException",
    "HydrationException",
    "MissingRequiredFieldException",
    "TypeMismatchException",
    "EnumMismatchException",
    "UnionMismatchException",
    "UnionRequiresInstanceException",
    "InvalidCollectionValueException",
    "ArrayElementException",
    "InvalidJsonException",
    "ValidationChainException",
]

__version__ = "0.1.0"
