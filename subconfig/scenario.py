"""Loading scenario: the ordered tiers applied on top of the base tree.

1. Common keys (``<base>.common``)
2. Common keys for the subproject (``<base>.<subproject>.common``)
3. Keys for the subproject and environment (``<base>.<subproject>.<env>``)
"""

TierDescriptor = tuple[str, ...]

BASE_CONFIG_KEY = "env"
COMMON_NAME = "common"


def generate_scenario(
    subproject: str,
    environment: str,
    base_key: str = BASE_CONFIG_KEY,
    common_name: str = COMMON_NAME,
) -> tuple[TierDescriptor, TierDescriptor, TierDescriptor]:
    """Return the three tier descriptors in the order they are applied."""
    return (
        (base_key, common_name),
        (base_key, subproject, common_name),
        (base_key, subproject, environment),
    )
