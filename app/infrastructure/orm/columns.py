from sqlalchemy import Enum as SQLEnum


def enum_column(enum_cls):
    """Store enum values (not member names) in a portable VARCHAR column"""
    return SQLEnum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        validate_strings=True,
        length=32,
    )
