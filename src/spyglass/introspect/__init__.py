"""Parameter classification, report rendering and report parsing."""

from spyglass.introspect.classify import (
    CLASSIFICATION_RULES,
    PROFILE_LOAD_PATTERN,
    ArrayDoubleCategory,
    ArrayImageCategory,
    ArrayIntCategory,
    BooleanCategory,
    ByteDataCategory,
    ClassificationRule,
    Classifier,
    DoubleCategory,
    EnumCategory,
    FlagsCategory,
    ImageCategory,
    IntCategory,
    ObjectCategory,
    ProfileBlobCategory,
    StringCategory,
    TypeCategory,
    UInt64Category,
    classify,
)
from spyglass.introspect.parser import (
    ParsedOperation,
    ParsedParameter,
    category_to_dict,
    parse_report,
)
from spyglass.introspect.render import format_double, render_category
from spyglass.introspect.reporter import (
    OperationRecord,
    OperationReporter,
    ParameterReporter,
    RegistryWalker,
    Report,
    generate_report,
)

__all__ = [
    "CLASSIFICATION_RULES",
    "PROFILE_LOAD_PATTERN",
    "ArrayDoubleCategory",
    "ArrayImageCategory",
    "ArrayIntCategory",
    "BooleanCategory",
    "ByteDataCategory",
    "ClassificationRule",
    "Classifier",
    "DoubleCategory",
    "EnumCategory",
    "FlagsCategory",
    "ImageCategory",
    "IntCategory",
    "ObjectCategory",
    "OperationRecord",
    "OperationReporter",
    "ParameterReporter",
    "ParsedOperation",
    "ParsedParameter",
    "ProfileBlobCategory",
    "RegistryWalker",
    "Report",
    "StringCategory",
    "TypeCategory",
    "UInt64Category",
    "category_to_dict",
    "classify",
    "format_double",
    "generate_report",
    "parse_report",
    "render_category",
]
