from app.core.ids import IdGenerator, uuid_id


def get_id_generator() -> IdGenerator:
    """Id source for new rows; override in tests for predictable ids."""
    return uuid_id
