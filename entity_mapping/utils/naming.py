"""
Naming utilities for entity-mapping.
"""


def to_camel_case(value: str) -> str:
    """
    Lower the first character of a property name.

    Args:
        value: Property name.

    Returns:
        The camel-cased name. Empty and single character strings are
        returned unchanged.

    Examples:
        >>> to_camel_case("DisplayName")
        "displayName"
        >>> to_camel_case("ID")
        "iD"
    """
    if value and len(value) > 1:
        return value[0].lower() + value[1:]
    return value
