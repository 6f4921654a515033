"""Bug records: models, persistence, queries and the service that composes them."""

__all__: list[str] = []
