from cuid2 import cuid_wrapper

# Shared CUID generator for entry ids and blob paths
cuid_generator = cuid_wrapper()


def generate_entry_id() -> str:
    """Generate a collision-resistant id, used both as entry id and blob folder"""
    result = cuid_generator()
    assert isinstance(result, str)
    return result
