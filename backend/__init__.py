"""Natural-language todo generation and task summary backend."""
