"""Infrastructure: configuration, logging and the Catalog Service client."""
