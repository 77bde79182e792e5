"""
FastAPI routers grouped by domain (auth, posts, weather).

Each module exposes an APIRouter included by ``blog_api.app.create_app``.
"""
