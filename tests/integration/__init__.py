"""
Integration tests contra componentes reales de infraestructura.

- Store SQL sobre SQLite in-memory (aiosqlite)
- Reintentos ante deadlocks
- Health checks
"""
