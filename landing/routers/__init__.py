from landing.routers import admin, adventure, content, leads

__all__ = ["admin", "adventure", "content", "leads"]
