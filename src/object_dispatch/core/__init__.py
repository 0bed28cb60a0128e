"""
Core primitives of the object model.

- field_store: per-instance ordered field storage
- method_table: per-class immutable method tables and class modules
- dispatcher: the message entry point of every instance
- self_logger: objects log to themselves
- errors: exception hierarchy
"""
