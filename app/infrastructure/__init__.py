"""Infrastructure layer: DB pool, repositorios, token store y servicios externos."""
